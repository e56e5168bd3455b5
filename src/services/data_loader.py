"""
Dashboard Data Loading Service
===============================
Fetch stats, stores and orders from the sales API, validate them and
normalize them into typed DataFrames.

Design Principles:
- Never silently fail: every degraded section is logged and reported
- Validate payloads before processing
- Parse dates to naive UTC timestamps, amounts to floats (missing = 0)
- The three fetches are independent and run concurrently

Partial-failure policy:
- Stats is the primary call; if it fails the whole load fails
- Stores or orders failing leaves that section empty and adds a warning

Usage:
    loader = DashboardLoader(SalesApiClient())
    result = loader.load()

    stats = result.stats
    orders = result.orders
    warnings = result.warnings
"""

import pandas as pd
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Dict, List, Optional, Any, Tuple
from dataclasses import dataclass, field
from datetime import datetime

from models.sales import DashboardStats
from services.api_client import SalesApiClient, ApiError
from utils.logger import get_logger, LogContext, log_dataframe_info, log_date_range
from utils.validators import SchemaValidator, ValidationResult
from utils.constants import ORDER_SCHEMA, STORE_SCHEMA

logger = get_logger(__name__)

ORDER_COLUMNS = [
    'id', 'buyer_name', 'order_date', 'order_number',
    'total_amount', 'status', 'store_id', 'line_items'
]

STORE_COLUMNS = [
    'id', 'name', 'city', 'state', 'buyer_name', 'buyer_phone', 'buyer_email'
]


def to_utc_naive(values: pd.Series) -> pd.Series:
    """Parse ISO dates / datetimes to naive UTC; unparseable values become NaT."""
    parsed = pd.to_datetime(values, errors='coerce', utc=True, format='ISO8601')
    return parsed.dt.tz_localize(None)


def _with_columns(raw: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    df = raw.copy()
    for col in columns:
        if col not in df.columns:
            df[col] = None
    return df


def orders_to_frame(
    records: List[Dict[str, Any]],
    validator: Optional[SchemaValidator] = None
) -> Tuple[pd.DataFrame, ValidationResult]:
    """
    Normalize ``/api/orders`` records.

    Returns
    -------
    Tuple[pd.DataFrame, ValidationResult]
        Frame with every column in ORDER_COLUMNS (plus any extra fields the
        API sent), ``order_date`` as naive UTC datetimes and
        ``total_amount`` as float with missing amounts set to 0.
    """
    validator = validator or SchemaValidator()
    raw = pd.DataFrame.from_records(records) if records else pd.DataFrame()
    validation = validator.validate(raw, ORDER_SCHEMA)

    df = _with_columns(raw, ORDER_COLUMNS)
    df['order_date'] = to_utc_naive(df['order_date'])
    df['total_amount'] = pd.to_numeric(df['total_amount'], errors='coerce').fillna(0.0).astype(float)
    df = df.reset_index(drop=True)

    log_dataframe_info(logger, 'orders', df[ORDER_COLUMNS])
    log_date_range(logger, 'orders', 'order_date', df)
    return df, validation


def stores_to_frame(
    records: List[Dict[str, Any]],
    validator: Optional[SchemaValidator] = None
) -> Tuple[pd.DataFrame, ValidationResult]:
    """Normalize ``/api/stores`` records; a store without a name gets ''."""
    validator = validator or SchemaValidator()
    raw = pd.DataFrame.from_records(records) if records else pd.DataFrame()
    validation = validator.validate(raw, STORE_SCHEMA)

    df = _with_columns(raw, STORE_COLUMNS)
    df['name'] = df['name'].fillna('').astype(str)
    df = df.reset_index(drop=True)

    log_dataframe_info(logger, 'stores', df[STORE_COLUMNS])
    return df, validation


@dataclass
class LoadResult:
    """
    Result of one dashboard load.

    Attributes
    ----------
    stats : DashboardStats
        Totals from ``/api/dashboard``
    stores : pd.DataFrame
        Normalized stores (empty if the call failed)
    orders : pd.DataFrame
        Normalized orders (empty if the call failed)
    warnings : List[str]
        User-facing messages for degraded sections and dirty data
    validation_results : Dict[str, ValidationResult]
        Validation results keyed by payload name
    loaded_at : datetime
        When the load finished
    """
    stats: DashboardStats
    stores: pd.DataFrame
    orders: pd.DataFrame
    warnings: List[str] = field(default_factory=list)
    validation_results: Dict[str, ValidationResult] = field(default_factory=dict)
    loaded_at: datetime = field(default_factory=datetime.now)


class DashboardLoader:
    """
    Load everything the dashboard needs in one call.

    Example
    -------
    >>> loader = DashboardLoader(SalesApiClient("http://localhost:3001"))
    >>> result = loader.load()
    >>> print(f"Loaded {len(result.orders)} orders")
    """

    def __init__(self, client: Optional[SalesApiClient] = None, validator: Optional[SchemaValidator] = None):
        self.client = client or SalesApiClient()
        self.validator = validator or SchemaValidator()

    def load(self) -> LoadResult:
        """
        Fetch stats, stores and orders concurrently.

        Raises
        ------
        ApiError
            If the stats call fails. Stores and orders failures are downgraded
            to warnings.
        """
        warnings: List[str] = []

        with LogContext(logger, "Loading dashboard data"):
            with ThreadPoolExecutor(max_workers=3) as pool:
                stats_future = pool.submit(self.client.get_dashboard_stats)
                stores_future = pool.submit(self.client.get_stores)
                orders_future = pool.submit(self.client.get_orders)

                stats = stats_future.result()
                store_records = self._secondary(stores_future, 'stores', warnings)
                order_records = self._secondary(orders_future, 'orders', warnings)

            stores, stores_validation = stores_to_frame(store_records, self.validator)
            orders, orders_validation = orders_to_frame(order_records, self.validator)

        validation_results = {'stores': stores_validation, 'orders': orders_validation}
        for name, validation in validation_results.items():
            for error in validation.errors:
                warnings.append(f"{name.capitalize()} data problem: {error}")

        return LoadResult(
            stats=stats,
            stores=stores,
            orders=orders,
            warnings=warnings,
            validation_results=validation_results
        )

    def _secondary(self, future: Future, name: str, warnings: List[str]) -> List[Dict[str, Any]]:
        try:
            return future.result()
        except ApiError as e:
            logger.warning(f"Showing empty {name}: {e}")
            warnings.append(f"Could not load {name}: {e}")
            return []
