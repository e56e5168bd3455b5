"""
Product Mix Service
====================
What a store buys: top products, revenue per category and revenue per
strain type, plus the percentage views and the plain-English insight the
store detail page shows.

Strain Classification (case-insensitive):
- contains "indica"  -> indica
- contains "sativa"  -> sativa
- anything else      -> hybrid (includes blank strain types)

Percentages round half up, so a 12.5% share shows as 13 on a card and
12.5 on the detail page.
"""

import pandas as pd
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Any

from models.sales import empty_strain_breakdown
from utils.logger import get_logger
from utils.constants import STRAIN_TYPES, INSIGHT_CONFIG, LINE_ITEM_SCHEMA
from utils.validators import SchemaValidator

logger = get_logger(__name__)


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round like a cash register: 0.5 goes up, not to even."""
    exponent = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def classify_strain(strain_type: Optional[str]) -> str:
    strain = str(strain_type or '').lower()
    if 'indica' in strain:
        return 'indica'
    if 'sativa' in strain:
        return 'sativa'
    return 'hybrid'


def line_items_frame(orders: pd.DataFrame, validator: Optional[SchemaValidator] = None) -> pd.DataFrame:
    """
    Flatten the ``line_items`` lists of an orders frame into one row per item.

    Items are checked against LINE_ITEM_SCHEMA first; problems are logged
    and the items are still used. Item revenue falls back to
    quantity * unit_price when the API sends no revenue. Orders without
    line items contribute nothing.
    """
    columns = ['product_name', 'category', 'strain_type', 'quantity', 'revenue']
    if orders.empty or 'line_items' not in orders.columns:
        return pd.DataFrame(columns=columns)

    items = [
        item
        for line_items in orders['line_items']
        if isinstance(line_items, list)
        for item in line_items
        if isinstance(item, dict)
    ]
    if not items:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame.from_records(items)
    (validator or SchemaValidator()).validate(df, LINE_ITEM_SCHEMA)

    for col in ['product_name', 'category', 'strain_type', 'quantity', 'unit_price', 'revenue']:
        if col not in df.columns:
            df[col] = None

    df['quantity'] = pd.to_numeric(df['quantity'], errors='coerce').fillna(0.0)
    unit_price = pd.to_numeric(df['unit_price'], errors='coerce').fillna(0.0)
    revenue = pd.to_numeric(df['revenue'], errors='coerce')
    df['revenue'] = revenue.fillna(df['quantity'] * unit_price).astype(float)
    df['product_name'] = df['product_name'].fillna('Unknown product').astype(str)
    df['category'] = df['category'].fillna('Uncategorized').astype(str)

    return df[columns]


def top_products(items: pd.DataFrame, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Products ranked by revenue, highest first."""
    if items.empty:
        return []

    grouped = (
        items.groupby('product_name', sort=False)
        .agg(
            revenue=('revenue', 'sum'),
            quantity=('quantity', 'sum'),
            category=('category', 'first'),
            strain_type=('strain_type', 'first')
        )
        .reset_index()
        .sort_values(['revenue', 'product_name'], ascending=[False, True], kind='mergesort')
    )
    if limit is not None:
        grouped = grouped.head(limit)

    return [
        {
            'product_name': row.product_name,
            'revenue': float(row.revenue),
            'quantity': float(row.quantity),
            'category': row.category,
            'strain_type': row.strain_type if isinstance(row.strain_type, str) else None
        }
        for row in grouped.itertuples(index=False)
    ]


def category_breakdown(items: pd.DataFrame) -> Dict[str, float]:
    if items.empty:
        return {}
    totals = items.groupby('category')['revenue'].sum()
    return {str(category): float(revenue) for category, revenue in totals.items()}


def strain_breakdown(items: pd.DataFrame) -> Dict[str, float]:
    breakdown = empty_strain_breakdown()
    if items.empty:
        return breakdown
    strains = items['strain_type'].apply(classify_strain)
    for strain, revenue in items.groupby(strains)['revenue'].sum().items():
        breakdown[strain] = float(revenue)
    return breakdown


def strain_percentages(breakdown: Dict[str, float], decimals: int = 1) -> Dict[str, float]:
    """
    Share of each strain in the strain total.

    Parameters
    ----------
    breakdown : dict
        Revenue per strain type
    decimals : int
        0 for store cards, 1 for the detail page
    """
    total = sum(breakdown.get(strain, 0.0) for strain in STRAIN_TYPES)
    if total <= 0:
        return {strain: 0.0 for strain in STRAIN_TYPES}
    return {
        strain: round_half_up(breakdown.get(strain, 0.0) / total * 100, decimals)
        for strain in STRAIN_TYPES
    }


def smart_insights(percentages: Dict[str, float]) -> List[str]:
    """
    Sales hints derived from strain shares.

    More than one hint can fire (e.g. 55% indica and 45% hybrid); when none
    does, the store gets the "balanced" hint.
    """
    messages = INSIGHT_CONFIG['messages']
    insights = []
    if percentages.get('indica', 0) > INSIGHT_CONFIG['indica_dominant_pct']:
        insights.append(messages['indica'])
    if percentages.get('sativa', 0) > INSIGHT_CONFIG['sativa_dominant_pct']:
        insights.append(messages['sativa'])
    if percentages.get('hybrid', 0) > INSIGHT_CONFIG['hybrid_dominant_pct']:
        insights.append(messages['hybrid'])
    return insights or [messages['balanced']]


def category_percentages(breakdown: Dict[str, float], total_revenue: float) -> List[Dict[str, Any]]:
    """Categories by revenue, highest first, with their share of total store revenue."""
    rows = sorted(breakdown.items(), key=lambda kv: (-kv[1], kv[0]))
    return [
        {
            'category': category,
            'revenue': revenue,
            'pct': round_half_up(revenue / total_revenue * 100, 1) if total_revenue > 0 else 0.0
        }
        for category, revenue in rows
    ]
