"""
White Mousse - Sales Intelligence Dashboard
============================================

A call-list dashboard for the White Mousse sales team.

DESIGN PHILOSOPHY:
==================
Every element answers: "Which store should I call next?" and "Why?"

TARGET USERS:
- Sales reps working the store list
- Sales managers tracking revenue and commission

LAYOUT STRUCTURE:
- Header: Branding + as-of time + Refresh / Sync
- KPI Bar: Orders, revenue, average order, commission
- Urgency counts + filters
- Main Area: Two-column layout
  - Left (60%): Store cards, most overdue first
  - Right (40%): Detail panel for the selected store
"""

import streamlit as st
import plotly.graph_objects as go
import sys
from pathlib import Path

# Add src and project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from config.settings import API_CONFIG, DASHBOARD_CONFIG
from dashboard.components import store_card_html, top_products_table
from dashboard.data_loader import get_dashboard_data
from services.api_client import SalesApiClient, ApiError
from services.product_mix import strain_percentages, smart_insights, category_percentages
from services.store_intelligence import prioritize, urgency_counts, to_frame
from utils.constants import (
    URGENCY_DISPLAY, URGENCY_LEVELS, STRAIN_TYPES, STRAIN_DISPLAY, DETAIL_TOP_PRODUCTS
)


# ============================================================
# PAGE CONFIGURATION
# ============================================================

st.set_page_config(
    page_title=DASHBOARD_CONFIG['page_title'],
    page_icon=DASHBOARD_CONFIG['page_icon'],
    layout="wide",
    initial_sidebar_state="collapsed"
)

st.markdown("""
<style>
    .header-container {
        background: linear-gradient(135deg, #4f46e5 0%, #6366f1 100%);
        padding: 1.5rem 2rem;
        border-radius: 10px;
        margin-bottom: 1.5rem;
        color: white;
    }
    .header-title { font-size: 1.8rem; font-weight: 700; margin: 0; color: white; }
    .header-subtitle { font-size: 1rem; opacity: 0.9; margin-top: 0.3rem; color: #e0e7ff; }
    .store-card { border-radius: 10px; padding: 1rem; margin-bottom: 0.8rem; border: 2px solid; }
    .overdue-banner {
        margin-top: 0.5rem; padding: 0.4rem; color: white; border-radius: 6px;
        font-weight: 700; text-align: center; font-size: 0.85rem;
    }
</style>
""", unsafe_allow_html=True)

BASE_URL = API_CONFIG['base_url']

if 'source' not in st.session_state:
    st.session_state.source = DASHBOARD_CONFIG['default_source']


def render_header(subtitle: str) -> None:
    st.markdown(f"""
    <div class="header-container">
        <h1 class="header-title">🍄 White Mousse Sales Intelligence</h1>
        <p class="header-subtitle">{subtitle}</p>
    </div>
    """, unsafe_allow_html=True)


# ============================================================
# DATA LOADING
# ============================================================
# Stats failing is fatal; everything else degrades to a warning

try:
    data = get_dashboard_data(st.session_state.source, BASE_URL)
except ApiError as e:
    render_header("Connection Error")
    st.error(f"**API Connection Error**\n\n{e}")
    st.markdown(
        "Make sure:\n"
        "- the backend is deployed and reachable\n"
        "- `SALES_API_URL` points at it\n"
        "- the database schema exists"
    )
    if st.button("Retry Connection", type="primary"):
        st.cache_data.clear()
        st.rerun()
    st.stop()

stats = data['stats']
stores = data['stores']
as_of = data['as_of']


# ============================================================
# HEADER SECTION
# ============================================================

render_header("Product Analytics • Reorder Tracking • Strain Insights")

if 'sync_message' in st.session_state:
    level, message = st.session_state.pop('sync_message')
    (st.success if level == 'success' else st.error)(message)

for warning in data['warnings']:
    st.warning(warning)

col_date, col_source, col_refresh, col_sync = st.columns([3, 3, 2, 2])
with col_date:
    st.markdown(f"**📅 As of:** {as_of.strftime('%B %d, %Y at %H:%M')} UTC")
with col_source:
    source = st.radio(
        "Data source",
        options=['client', 'server'],
        format_func=lambda s: "Computed here" if s == 'client' else "Backend aggregate",
        index=0 if st.session_state.source == 'client' else 1,
        horizontal=True,
        label_visibility="collapsed"
    )
    if source != st.session_state.source:
        st.session_state.source = source
        st.rerun()
with col_refresh:
    if st.button("🔄 Refresh Data", use_container_width=True):
        st.cache_data.clear()
        st.rerun()
with col_sync:
    if st.button("⬇️ Sync LeafLink", use_container_width=True):
        with st.spinner("Syncing with LeafLink... this can take a few minutes"):
            try:
                result = SalesApiClient(BASE_URL).sync()
            except ApiError as e:
                st.session_state.sync_message = ('error', f"❌ Sync failed: {e}")
            else:
                st.session_state.sync_message = ('success', f"✅ Synced! {result.summary()}")
                st.cache_data.clear()
        st.rerun()


# ============================================================
# KPI BAR
# ============================================================

st.markdown("---")

kpi_col1, kpi_col2, kpi_col3, kpi_col4 = st.columns(4)
recent = data.get('recent_stats')

with kpi_col1:
    st.metric("📦 Total Orders", f"{stats.total_orders:,}",
              delta=f"{recent.total_orders} in last 90 days" if recent else None)
with kpi_col2:
    st.metric("💰 Total Revenue", f"${stats.total_revenue:,.2f}",
              delta=f"${recent.total_revenue:,.0f} in last 90 days" if recent else None)
with kpi_col3:
    st.metric("🧾 Avg Order Value", f"${stats.avg_order_value:,.2f}")
with kpi_col4:
    st.metric("🤝 Commission (8%)", f"${stats.total_commission:,.2f}",
              delta=f"${recent.total_commission:,.0f} in last 90 days" if recent else None)


# ============================================================
# URGENCY COUNTS + FILTERS
# ============================================================

counts = urgency_counts(stores)

st.markdown("---")
filter_col1, filter_col2 = st.columns([2, 3])

with filter_col1:
    urgency_filter = st.selectbox(
        "Urgency",
        options=['all'] + URGENCY_LEVELS,
        format_func=lambda u: (
            f"All stores ({len(stores)})" if u == 'all'
            else f"{URGENCY_DISPLAY[u]['label']} ({counts[u]})"
        ),
        help="Show one urgency tier"
    )

with filter_col2:
    search_term = st.text_input("Search stores", placeholder="Store name...")

filtered = prioritize(stores, urgency_filter, search_term)


# ============================================================
# MAIN CONTENT - TWO COLUMN LAYOUT
# ============================================================

st.markdown("---")
st.markdown("### 📞 Call List")

list_col, detail_col = st.columns([3, 2])
selected = None

with list_col:
    if len(filtered) == 0:
        st.info("No stores match your filters. Try adjusting the filters above.")
    else:
        count_col, export_col = st.columns([3, 2])
        with count_col:
            st.markdown(f"**Showing {len(filtered)} stores**")
        with export_col:
            st.download_button(
                "📥 Export call list",
                data=to_frame(filtered).to_csv(index=False),
                file_name=f"call_list_{as_of.strftime('%Y%m%d')}.csv",
                mime="text/csv",
                use_container_width=True
            )
        selected_idx = st.selectbox(
            "Select a store for detailed view:",
            options=list(range(len(filtered))),
            format_func=lambda i: filtered[i].name,
            index=0,
            label_visibility="collapsed"
        )
        selected = filtered[selected_idx]

        for store in filtered:
            st.markdown(store_card_html(store), unsafe_allow_html=True)


with detail_col:
    if selected:
        st.markdown(f"## {selected.name}")

        location = selected.city or ''
        if selected.state:
            location = f"{location}, {selected.state}"
        contact = [f"📍 {location}"] if location else []
        if selected.buyer_name:
            contact.append(f"👤 {selected.buyer_name}")
        if selected.buyer_phone:
            contact.append(f"📞 [{selected.buyer_phone}](tel:{selected.buyer_phone})")
        if selected.buyer_email:
            contact.append(f"📧 [{selected.buyer_email}](mailto:{selected.buyer_email})")
        st.markdown(" · ".join(contact))

        if selected.is_overdue:
            st.error(
                f"🔥 **REORDER OVERDUE - CALL TODAY!**\n\n"
                f"This store typically orders every **{selected.avg_cycle} days**. "
                f"Last order was **{selected.days_since_last_order} days ago**.\n\n"
                f"📞 OVERDUE BY {selected.overdue_days} DAYS"
            )

        metric_col1, metric_col2 = st.columns(2)
        with metric_col1:
            st.metric("💰 Total Revenue", f"${selected.total_revenue:,.2f}",
                      delta=f"{selected.order_count} orders total", delta_color="off")
            st.metric("📅 Last 90 Days", f"${selected.revenue_90d:,.2f}")
        with metric_col2:
            st.metric("📦 Total Orders", selected.order_count,
                      delta=f"Avg: ${selected.avg_order_value:,.2f}", delta_color="off")
            st.metric("🔁 Reorder Cycle", f"{selected.avg_cycle} days")

        timing_col1, timing_col2 = st.columns(2)
        with timing_col1:
            st.metric("📅 Last Order", f"{selected.days_since_last_order} days ago",
                      delta=f"Cycle: {selected.avg_cycle} days",
                      delta_color="inverse" if selected.is_overdue else "off")
        with timing_col2:
            st.metric("🎯 Next Expected",
                      "OVERDUE" if selected.is_overdue else f"{selected.days_until_next_order} days",
                      delta=selected.next_expected_order, delta_color="off")

        if selected.top_products:
            st.markdown(f"#### 📦 Top {DETAIL_TOP_PRODUCTS} Products")
            st.dataframe(top_products_table(selected), hide_index=True, use_container_width=True)

        # Strain preferences
        breakdown = selected.strain_type_breakdown
        if sum(breakdown.get(s, 0.0) for s in STRAIN_TYPES) > 0:
            st.markdown("#### 🌿 Strain Preferences")
            pcts = strain_percentages(breakdown, decimals=1)

            fig = go.Figure()
            for strain in STRAIN_TYPES:
                if pcts[strain] > 0:
                    fig.add_trace(go.Bar(
                        x=[pcts[strain]],
                        y=['Mix'],
                        orientation='h',
                        name=f"{STRAIN_DISPLAY[strain]['label']} ${breakdown[strain]:,.0f}",
                        marker_color=STRAIN_DISPLAY[strain]['color'],
                        text=f"{pcts[strain]}%",
                        textposition='inside'
                    ))
            fig.update_layout(
                barmode='stack',
                height=140,
                margin=dict(l=0, r=0, t=10, b=0),
                xaxis=dict(visible=False, range=[0, 100]),
                yaxis=dict(visible=False),
                legend=dict(orientation="h", yanchor="bottom", y=1.02)
            )
            st.plotly_chart(fig, use_container_width=True)

            for insight in smart_insights(pcts):
                st.info(f"💡 **Smart Insight:** {insight}")

        # Category breakdown
        categories = category_percentages(selected.category_breakdown, selected.total_revenue)
        if categories:
            st.markdown("#### 📊 Category Breakdown")
            for row in categories:
                st.markdown(f"**{row['category']}** · ${row['revenue']:,.2f} ({row['pct']}%)")
                st.progress(min(max(row['pct'] / 100, 0.0), 1.0))


# ============================================================
# FOOTER
# ============================================================

st.markdown("---")
st.markdown("""
<div style="text-align: center; color: #999; padding: 1rem;">
    <p>🍄 White Mousse – Sales Intelligence</p>
</div>
""", unsafe_allow_html=True)
