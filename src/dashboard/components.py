"""
Dashboard HTML Components
=========================
Markup for the store cards in the call list and the detail panel's
product table. Kept free of Streamlit calls so the page can render the
markup with ``st.markdown(..., unsafe_allow_html=True)``.

Every value that comes from the API (store, city, buyer and product names)
is HTML-escaped before it goes into the markup.
"""

import html
import sys
from pathlib import Path
from typing import Dict

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent.parent))

from models.sales import StoreIntelligence
from services.product_mix import strain_percentages
from utils.constants import (
    URGENCY_DISPLAY, STRAIN_TYPES, STRAIN_DISPLAY, CARD_TOP_PRODUCTS, DETAIL_TOP_PRODUCTS
)


def strain_mix_html(breakdown: Dict[str, float]) -> str:
    """Whole-percent strain bar; only strains with a share are drawn."""
    if sum(breakdown.get(s, 0.0) for s in STRAIN_TYPES) <= 0:
        return ""
    pcts = strain_percentages(breakdown, decimals=0)
    segments = "".join(
        f"<div style='width: {pcts[s]:.0f}%; background: {STRAIN_DISPLAY[s]['color']}; color: white; "
        f"font-size: 0.7rem; text-align: center;'>{STRAIN_DISPLAY[s]['icon']} {pcts[s]:.0f}%</div>"
        for s in STRAIN_TYPES if pcts[s] > 0
    )
    return (
        "<div class='strain-mix' style='display: flex; height: 1.2rem; border-radius: 4px; "
        f"overflow: hidden; margin-top: 0.5rem;'>{segments}</div>"
    )


def store_card_html(store: StoreIntelligence) -> str:
    config = URGENCY_DISPLAY.get(store.urgency, URGENCY_DISPLAY['good'])
    overdue = (
        f"<div class='overdue-banner' style='background: {config['border']};'>"
        f"⚠️ {store.overdue_days} DAYS OVERDUE!</div>"
        if store.is_overdue else ""
    )
    products = "".join(
        f"<div style='font-size: 0.85rem;'>{rank}. {html.escape(str(p.get('product_name') or ''))} "
        f"<span style='color: #6b7280;'>${p.get('revenue') or 0:,.0f}</span></div>"
        for rank, p in enumerate(store.top_products[:CARD_TOP_PRODUCTS], start=1)
    )
    buyer = f" • 👤 {html.escape(store.buyer_name)}" if store.buyer_name else ""

    return f"""
    <div class="store-card" style="background: {config['color']}; border-color: {config['border']};">
        <div style="display: flex; justify-content: space-between;">
            <div>
                <strong style="font-size: 1.1rem;">{html.escape(store.name)}</strong><br/>
                <span style="color: #6b7280; font-size: 0.85rem;">📍 {html.escape(store.city or '-')}{buyer}</span>
            </div>
            <div style="text-align: right;">
                <span style="font-size: 1.3rem; font-weight: 700; color: {config['text_color']};">
                    ${store.total_revenue / 1000:.1f}K</span><br/>
                <span style="color: #6b7280; font-size: 0.8rem;">{store.order_count} orders</span>
            </div>
        </div>
        <div style="margin-top: 0.5rem; font-weight: 600; color: {config['text_color']};">
            {config['label']} · Last order: {store.days_since_last_order} days ago
        </div>
        <div style="color: #6b7280; font-size: 0.85rem;">Typical cycle: Every {store.avg_cycle} days</div>
        {overdue}
        {strain_mix_html(store.strain_type_breakdown)}
        {products}
    </div>
    """


def top_products_table(store: StoreIntelligence) -> pd.DataFrame:
    """Best sellers for the detail panel, capped at DETAIL_TOP_PRODUCTS."""
    top_df = pd.DataFrame(store.top_products[:DETAIL_TOP_PRODUCTS])
    shown = [c for c in ['product_name', 'category', 'strain_type', 'revenue'] if c in top_df.columns]
    return top_df[shown]
