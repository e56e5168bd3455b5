"""
Dashboard Data Loader
=====================
Cached entry points the Streamlit app calls to get everything it renders.

Two data sources:
- "client": fetch /api/stores + /api/orders and aggregate here
- "server": read /api/sales-intelligence, aggregated by the backend

Both always fetch /api/dashboard stats first; a stats failure raises and
the app shows its error panel. Results are cached for
DASHBOARD_CONFIG['cache_ttl_seconds']; exceptions are never cached, so a
retry re-runs the whole load.
"""

import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from typing import Dict, Any, Optional

# Add src and project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from config.settings import DASHBOARD_CONFIG
from services.api_client import SalesApiClient, ApiError
from services.data_loader import DashboardLoader
from services.sales_summary import summarize_orders
from services.store_intelligence import StoreIntelligenceAggregator, StoreIdMatcher, normalize_as_of
from utils.constants import URGENCY_CONFIG
from utils.logger import get_logger

logger = get_logger(__name__)

CACHE_TTL = DASHBOARD_CONFIG['cache_ttl_seconds']


def build_client_side_data(client: SalesApiClient, as_of: Optional[pd.Timestamp] = None) -> Dict[str, Any]:
    """Fetch raw stores + orders and aggregate them locally."""
    as_of = normalize_as_of(as_of)
    result = DashboardLoader(client).load()

    aggregator = StoreIntelligenceAggregator(matcher=StoreIdMatcher())
    stores = aggregator.build(result.stores, result.orders, as_of)

    window_start = as_of - pd.Timedelta(days=URGENCY_CONFIG['revenue_window_days'])
    recent = summarize_orders(result.orders, since=window_start) if not result.orders.empty else None

    return {
        'source': 'client',
        'stats': result.stats,
        'recent_stats': recent,
        'stores': stores,
        'warnings': result.warnings,
        'as_of': as_of
    }


def build_server_side_data(client: SalesApiClient, as_of: Optional[pd.Timestamp] = None) -> Dict[str, Any]:
    """Read stores already aggregated by the backend."""
    as_of = normalize_as_of(as_of)
    stats = client.get_dashboard_stats()

    warnings = []
    try:
        stores = client.get_sales_intelligence()
    except ApiError as e:
        logger.warning(f"Showing empty store list: {e}")
        warnings.append(f"Could not load sales intelligence: {e}")
        stores = []

    return {
        'source': 'server',
        'stats': stats,
        'recent_stats': None,
        'stores': stores,
        'warnings': warnings,
        'as_of': as_of
    }


@st.cache_data(ttl=CACHE_TTL)
def get_dashboard_data(source: str, base_url: str) -> Dict[str, Any]:
    """
    Main function to load all dashboard data.

    Returns a dictionary containing:
    - source: "client" or "server"
    - stats: DashboardStats from /api/dashboard
    - recent_stats: DashboardStats over the trailing 90 days (client source only)
    - stores: List[StoreIntelligence]
    - warnings: messages for sections that could not be loaded
    - as_of: reference time of the day counts
    """
    client = SalesApiClient(base_url)
    if source == 'server':
        return build_server_side_data(client)
    return build_client_side_data(client)


if __name__ == "__main__":
    from config.settings import API_CONFIG

    print("Testing data loader...")
    data = build_client_side_data(SalesApiClient(API_CONFIG['base_url']))
    print(f"   Stats: {data['stats'].to_dict()}")
    print(f"   Stores: {len(data['stores'])}")
    for warning in data['warnings']:
        print(f"   Warning: {warning}")
