"""
Services Package
=================
Core business logic for the White Mousse Sales Intelligence dashboard.

Modules:
- api_client: HTTP client for the sales backend
- data_loader: Concurrent fetch, validation and normalization
- store_intelligence: Per-store reorder metrics, urgency and call-list order
- product_mix: Top products, category and strain breakdowns
- sales_summary: Order totals and commission
"""

from services.api_client import (
    SalesApiClient,
    ApiError,
    ApiConnectionError,
    ApiStatusError,
    ApiResponseError
)
from services.data_loader import DashboardLoader, LoadResult
from services.store_intelligence import (
    StoreIntelligenceAggregator,
    FuzzyNameMatcher,
    StoreIdMatcher,
    prioritize
)
from services.sales_summary import summarize_orders

__all__ = [
    'SalesApiClient',
    'ApiError',
    'ApiConnectionError',
    'ApiStatusError',
    'ApiResponseError',
    'DashboardLoader',
    'LoadResult',
    'StoreIntelligenceAggregator',
    'FuzzyNameMatcher',
    'StoreIdMatcher',
    'prioritize',
    'summarize_orders'
]
