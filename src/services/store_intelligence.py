"""
Store Intelligence Service
===========================
Turn stores + orders into per-store reorder metrics and decide which
stores the sales team should call first.

Per-store Metrics:
1. Matched orders are sorted newest first
2. totalRevenue: sum of order totals (missing totals count as 0)
3. lastOrder: newest order, or None
4. daysSinceLastOrder: whole days from lastOrder to as_of (999 if no orders)
5. avgCycle: mean gap between consecutive orders, ignoring gaps outside
   1-89 days; 14 when there are fewer than two orders or no usable gap
6. urgency: urgent when daysSinceLastOrder > avgCycle * 1.5,
   warning when > avgCycle * 1.2, otherwise good
   urgencyScore: days past avgCycle (0 if not overdue)
7. revenue90d: revenue from orders on or after as_of - 90 days

A store that never ordered gets 999 / 14 and therefore lands in "urgent".

Order-to-store Matching:
Orders carry a buyer name, not a store id. FuzzyNameMatcher attributes an
order to a store when either lower-cased name contains the other. This can
mis-attribute orders between similarly named stores. StoreIdMatcher joins
on ``order.store_id`` when the backend supplies it and falls back to the
fuzzy rule for orders without one.

Every computation takes an explicit ``as_of`` timestamp; only the outermost
caller defaults it to the current time.
"""

import math
import pandas as pd
from typing import Dict, List, Optional, Any, Union
from datetime import datetime

from models.sales import StoreIntelligence, classify_urgency
from services import product_mix
from utils.logger import get_logger, LogContext
from utils.constants import URGENCY_CONFIG, URGENCY_ORDER, URGENCY_LEVELS

logger = get_logger(__name__)

DAY = pd.Timedelta(days=1)


def normalize_as_of(as_of: Optional[Union[datetime, str, pd.Timestamp]] = None) -> pd.Timestamp:
    """Return ``as_of`` as a naive UTC timestamp (now when not given)."""
    ts = pd.Timestamp.now(tz='UTC') if as_of is None else pd.Timestamp(as_of)
    if ts.tzinfo is not None:
        ts = ts.tz_convert('UTC').tz_localize(None)
    return ts


def whole_days(later: pd.Timestamp, earlier: pd.Timestamp) -> int:
    """Floor of the day difference, so 4 days 23 hours counts as 4."""
    return math.floor((later - earlier) / DAY)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ============================================================
# ORDER MATCHING
# ============================================================

def names_match(buyer_name: Optional[str], store_name: Optional[str]) -> bool:
    """
    Case-insensitive substring match in either direction.

    Blank names never match; otherwise an empty buyer name would be a
    substring of every store.
    """
    # Missing fields arrive as None or NaN
    if not isinstance(buyer_name, str) or not isinstance(store_name, str):
        return False
    if not buyer_name or not store_name:
        return False
    buyer = buyer_name.lower()
    store = store_name.lower()
    return store in buyer or buyer in store


def _id_key(value: Any) -> str:
    # pandas turns an int column with gaps into floats (2 -> 2.0)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class StoreMatcher:
    """Decides which orders belong to a store."""

    def match(self, store: Dict[str, Any], orders: pd.DataFrame) -> pd.Series:
        """Return a boolean mask over ``orders``."""
        raise NotImplementedError


class FuzzyNameMatcher(StoreMatcher):
    """Match on buyer name vs store name (see names_match)."""

    def match(self, store: Dict[str, Any], orders: pd.DataFrame) -> pd.Series:
        if orders.empty:
            return pd.Series(False, index=orders.index, dtype=bool)
        store_name = store.get('name')
        return orders['buyer_name'].apply(lambda buyer: names_match(buyer, store_name)).astype(bool)


class StoreIdMatcher(StoreMatcher):
    """
    Join on ``order.store_id``; orders without one fall back to ``fallback``.

    Parameters
    ----------
    fallback : StoreMatcher, optional
        Matcher for orders lacking a store id (default: FuzzyNameMatcher)
    """

    def __init__(self, fallback: Optional[StoreMatcher] = None):
        self.fallback = fallback or FuzzyNameMatcher()

    def match(self, store: Dict[str, Any], orders: pd.DataFrame) -> pd.Series:
        if orders.empty or 'store_id' not in orders.columns:
            return self.fallback.match(store, orders)

        has_id = orders['store_id'].notna()
        by_id = has_id & (orders['store_id'].apply(_id_key) == _id_key(store.get('id')))
        if has_id.all():
            return by_id
        return by_id | (~has_id & self.fallback.match(store, orders))


# ============================================================
# METRICS
# ============================================================

def average_cycle(order_dates: List[pd.Timestamp], config: Optional[Dict] = None) -> int:
    """
    Typical days between orders.

    Parameters
    ----------
    order_dates : list
        Order dates sorted newest first

    Example
    -------
    >>> dates = [pd.Timestamp('2026-03-01'), pd.Timestamp('2026-02-24'),
    ...          pd.Timestamp('2025-08-08'), pd.Timestamp('2025-07-29')]
    >>> average_cycle(dates)  # gaps 5, 200, 10 -> (5 + 10) / 2
    8
    """
    config = config or URGENCY_CONFIG
    if len(order_dates) < 2:
        return config['default_cycle_days']

    cycles = []
    for newer, older in zip(order_dates, order_dates[1:]):
        days = whole_days(newer, older)
        if 0 < days < config['max_cycle_days']:
            cycles.append(days)

    if not cycles:
        return config['default_cycle_days']
    return round_half_up(sum(cycles) / len(cycles))


def _order_record(row: pd.Series) -> Dict[str, Any]:
    record = row.to_dict()
    if pd.notna(record.get('order_date')):
        record['order_date'] = record['order_date'].isoformat()
    return record


class StoreIntelligenceAggregator:
    """
    Compute StoreIntelligence for every store.

    Usage
    -----
    >>> aggregator = StoreIntelligenceAggregator()
    >>> intel = aggregator.build(stores_df, orders_df, as_of="2026-10-18")
    >>> urgent = [s for s in intel if s.urgency == 'urgent']
    """

    def __init__(self, matcher: Optional[StoreMatcher] = None, config: Optional[Dict] = None):
        self.matcher = matcher or FuzzyNameMatcher()
        self.config = config or URGENCY_CONFIG

    def build(
        self,
        stores: pd.DataFrame,
        orders: pd.DataFrame,
        as_of: Optional[Union[datetime, str, pd.Timestamp]] = None
    ) -> List[StoreIntelligence]:
        """
        Aggregate all stores against a snapshot of orders.

        Parameters
        ----------
        stores : pd.DataFrame
            Normalized stores (see services.data_loader.stores_to_frame)
        orders : pd.DataFrame
            Normalized orders (see services.data_loader.orders_to_frame)
        as_of : datetime-like, optional
            Reference time for day counts and the 90-day window

        Returns
        -------
        List[StoreIntelligence]
            One entry per store, in input order
        """
        as_of = normalize_as_of(as_of)

        with LogContext(logger, f"Aggregating {len(stores)} stores over {len(orders)} orders"):
            results = []
            for store in stores.to_dict('records'):
                mask = self.matcher.match(store, orders)
                results.append(self.analyze_store(store, orders[mask], as_of))

        counts = urgency_counts(results)
        logger.info(f"Urgency counts: {counts}")
        return results

    def analyze_store(
        self,
        store: Dict[str, Any],
        store_orders: pd.DataFrame,
        as_of: Optional[Union[datetime, str, pd.Timestamp]] = None
    ) -> StoreIntelligence:
        """Metrics for one store from its already-matched orders."""
        as_of = normalize_as_of(as_of)
        config = self.config

        # Undated orders still count toward totals but not toward timing
        ordered = store_orders.sort_values('order_date', ascending=False, na_position='last', kind='mergesort')
        dated = ordered[ordered['order_date'].notna()]

        total_revenue = float(ordered['total_amount'].fillna(0.0).sum()) if len(ordered) else 0.0

        if len(dated):
            last = dated.iloc[0]
            last_order = _order_record(last)
            days_since = whole_days(as_of, last['order_date'])
        else:
            last_order = None
            days_since = config['no_orders_days_sentinel']

        avg_cycle = average_cycle(list(dated['order_date']), config)
        next_expected = None
        if len(dated):
            next_expected = (last['order_date'] + pd.Timedelta(days=avg_cycle)).date().isoformat()
        urgency, urgency_score = classify_urgency(days_since, avg_cycle, config)

        window_start = as_of - pd.Timedelta(days=config['revenue_window_days'])
        recent = dated[dated['order_date'] >= window_start]
        revenue_90d = float(recent['total_amount'].fillna(0.0).sum()) if len(recent) else 0.0

        items = product_mix.line_items_frame(ordered)

        return StoreIntelligence(
            id=store.get('id'),
            name=store.get('name') or '',
            city=_optional(store.get('city')),
            state=_optional(store.get('state')),
            buyer_name=_optional(store.get('buyer_name')),
            buyer_phone=_optional(store.get('buyer_phone')),
            buyer_email=_optional(store.get('buyer_email')),
            order_count=int(len(ordered)),
            total_revenue=total_revenue,
            last_order=last_order,
            days_since_last_order=days_since,
            avg_cycle=avg_cycle,
            urgency=urgency,
            urgency_score=urgency_score,
            revenue_90d=revenue_90d,
            next_expected_order=next_expected,
            top_products=product_mix.top_products(items),
            category_breakdown=product_mix.category_breakdown(items),
            strain_type_breakdown=product_mix.strain_breakdown(items)
        )


def _optional(value: Any) -> Optional[Any]:
    """Map pandas missing markers (NaN / None) to None."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


# ============================================================
# FILTER / SORT / SUMMARY
# ============================================================

def filter_stores(
    stores: List[StoreIntelligence],
    urgency: str = 'all',
    search: str = ''
) -> List[StoreIntelligence]:
    """Keep stores in the given tier ('all' keeps every tier) whose name contains ``search``."""
    term = (search or '').lower()
    return [
        store for store in stores
        if (urgency == 'all' or store.urgency == urgency)
        and (not term or term in (store.name or '').lower())
    ]


def sort_stores(stores: List[StoreIntelligence]) -> List[StoreIntelligence]:
    """
    Call list order.

    urgent, then warning, then good; within a tier the most overdue first
    (urgencyScore, then daysSinceLastOrder); store name breaks remaining ties.
    """
    return sorted(
        stores,
        key=lambda s: (
            URGENCY_ORDER.get(s.urgency, len(URGENCY_ORDER)),
            -s.urgency_score,
            -s.days_since_last_order,
            (s.name or '').lower()
        )
    )


def prioritize(
    stores: List[StoreIntelligence],
    urgency: str = 'all',
    search: str = ''
) -> List[StoreIntelligence]:
    """Filter, then sort."""
    return sort_stores(filter_stores(stores, urgency, search))


def urgency_counts(stores: List[StoreIntelligence]) -> Dict[str, int]:
    counts = {level: 0 for level in URGENCY_LEVELS}
    for store in stores:
        if store.urgency in counts:
            counts[store.urgency] += 1
    return counts


def to_frame(stores: List[StoreIntelligence]) -> pd.DataFrame:
    """Call list as a table, in the given order (the dashboard's CSV export)."""
    columns = [
        'name', 'city', 'urgency', 'days_since_last_order', 'avg_cycle',
        'urgency_score', 'next_expected_order', 'order_count', 'total_revenue',
        'revenue_90d', 'avg_order_value'
    ]
    rows = [
        {
            'name': s.name,
            'city': s.city,
            'urgency': s.urgency,
            'days_since_last_order': s.days_since_last_order,
            'avg_cycle': s.avg_cycle,
            'urgency_score': s.urgency_score,
            'next_expected_order': s.next_expected_order,
            'order_count': s.order_count,
            'total_revenue': s.total_revenue,
            'revenue_90d': s.revenue_90d,
            'avg_order_value': s.avg_order_value
        }
        for s in stores
    ]
    return pd.DataFrame(rows, columns=columns)
