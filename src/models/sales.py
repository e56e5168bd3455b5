"""
Sales Intelligence Data Models
===============================
Plain data structures passed between the API client, the aggregation
services and the dashboard.

The API speaks camelCase for derived store fields (``daysSinceLastOrder``)
and snake_case for raw records (``buyer_name``). Models use snake_case
attributes and convert at the ``from_api`` / ``to_dict`` boundary.
"""

from typing import Dict, List, Optional, Any, Tuple
from dataclasses import dataclass, field

from utils.constants import COMMISSION_RATE, URGENCY_CONFIG, STRAIN_TYPES


def _as_float(value: Any) -> float:
    """Coerce an API amount to float; None and garbage count as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0  # NaN check


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def classify_urgency(
    days_since_last_order: int,
    avg_cycle: int,
    config: Optional[Dict] = None
) -> Tuple[str, int]:
    """
    Urgency tier and score for a store.

    Returns
    -------
    Tuple[str, int]
        (urgency, urgency_score) where urgency_score is days past avg_cycle
    """
    config = config or URGENCY_CONFIG
    if days_since_last_order > avg_cycle * config['urgent_multiplier']:
        urgency = 'urgent'
    elif days_since_last_order > avg_cycle * config['warning_multiplier']:
        urgency = 'warning'
    else:
        urgency = 'good'
    return urgency, max(0, days_since_last_order - avg_cycle)


@dataclass
class DashboardStats:
    """
    Business-wide totals shown in the KPI bar.

    Attributes
    ----------
    total_orders : int
        Number of orders on record
    total_revenue : float
        Sum of order totals
    avg_order_value : float
        total_revenue / total_orders
    total_commission : float
        Sales commission owed on total_revenue
    """
    total_orders: int = 0
    total_revenue: float = 0.0
    avg_order_value: float = 0.0
    total_commission: float = 0.0

    @classmethod
    def from_api(cls, stats: Optional[Dict[str, Any]]) -> 'DashboardStats':
        """Build from the ``stats`` object of ``GET /api/dashboard``."""
        stats = stats or {}
        total_orders = _as_int(stats.get('total_orders'))
        total_revenue = _as_float(stats.get('total_revenue'))

        if stats.get('avg_order_value') is not None:
            avg_order_value = _as_float(stats.get('avg_order_value'))
        else:
            avg_order_value = total_revenue / total_orders if total_orders else 0.0

        # Older backends omit commission
        if stats.get('total_commission') is not None:
            total_commission = _as_float(stats.get('total_commission'))
        else:
            total_commission = total_revenue * COMMISSION_RATE

        return cls(
            total_orders=total_orders,
            total_revenue=total_revenue,
            avg_order_value=avg_order_value,
            total_commission=total_commission
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_orders': self.total_orders,
            'total_revenue': self.total_revenue,
            'avg_order_value': self.avg_order_value,
            'total_commission': self.total_commission
        }


@dataclass
class SyncResult:
    """Counts reported by ``POST /api/sync``."""
    orders: int = 0
    companies: int = 0
    line_items: Optional[int] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> 'SyncResult':
        line_items = payload.get('lineItems')
        return cls(
            orders=_as_int(payload.get('orders')),
            companies=_as_int(payload.get('companies')),
            line_items=_as_int(line_items) if line_items is not None else None
        )

    def summary(self) -> str:
        parts = [f"{self.orders} orders"]
        if self.line_items is not None:
            parts.append(f"{self.line_items} products")
        parts.append(f"{self.companies} stores")
        return ", ".join(parts)


def empty_strain_breakdown() -> Dict[str, float]:
    return {strain: 0.0 for strain in STRAIN_TYPES}


@dataclass
class StoreIntelligence:
    """
    Derived reorder metrics for one store.

    Recomputed on every dashboard load and never persisted. The store
    fields are copied from the store record; everything below ``buyer_email``
    is derived from the store's matched orders.

    Attributes
    ----------
    order_count : int
        Number of matched orders
    total_revenue : float
        Sum of matched order totals
    last_order : dict, optional
        Most recent matched order record
    days_since_last_order : int
        Whole days since last_order (999 when the store never ordered)
    avg_cycle : int
        Typical days between orders (14 when history is too short)
    urgency : str
        urgent, warning or good
    urgency_score : int
        Days past avg_cycle, 0 when not overdue
    revenue_90d : float
        Revenue from orders in the trailing 90 days
    next_expected_order : str, optional
        ISO date of last order + avg_cycle, None when the store never ordered
    top_products, category_breakdown, strain_type_breakdown
        Product mix, empty when orders carry no line items
    """
    id: Any
    name: str
    city: Optional[str] = None
    state: Optional[str] = None
    buyer_name: Optional[str] = None
    buyer_phone: Optional[str] = None
    buyer_email: Optional[str] = None

    order_count: int = 0
    total_revenue: float = 0.0
    last_order: Optional[Dict[str, Any]] = None
    days_since_last_order: int = URGENCY_CONFIG['no_orders_days_sentinel']
    avg_cycle: int = URGENCY_CONFIG['default_cycle_days']
    urgency: str = 'urgent'
    urgency_score: int = 0
    revenue_90d: float = 0.0
    next_expected_order: Optional[str] = None

    top_products: List[Dict[str, Any]] = field(default_factory=list)
    category_breakdown: Dict[str, float] = field(default_factory=dict)
    strain_type_breakdown: Dict[str, float] = field(default_factory=empty_strain_breakdown)

    @property
    def is_overdue(self) -> bool:
        return self.days_since_last_order > self.avg_cycle

    @property
    def overdue_days(self) -> int:
        return max(0, self.days_since_last_order - self.avg_cycle)

    @property
    def days_until_next_order(self) -> int:
        """Days left in the cycle; negative once the store is overdue."""
        return self.avg_cycle - self.days_since_last_order

    @property
    def avg_order_value(self) -> float:
        return self.total_revenue / self.order_count if self.order_count > 0 else 0.0

    @property
    def commission(self) -> float:
        return self.total_revenue * COMMISSION_RATE

    @classmethod
    def from_api(cls, record: Dict[str, Any]) -> 'StoreIntelligence':
        """Parse one store from ``GET /api/sales-intelligence``."""
        breakdown = empty_strain_breakdown()
        for strain, revenue in (record.get('strainTypeBreakdown') or {}).items():
            breakdown[str(strain).lower()] = _as_float(revenue)

        days_since = _as_int(
            record.get('daysSinceLastOrder'), URGENCY_CONFIG['no_orders_days_sentinel']
        )
        avg_cycle = _as_int(record.get('avgCycle'), URGENCY_CONFIG['default_cycle_days'])

        return cls(
            id=record.get('id'),
            name=record.get('name') or '',
            city=record.get('city'),
            state=record.get('state'),
            buyer_name=record.get('buyer_name'),
            buyer_phone=record.get('buyer_phone'),
            buyer_email=record.get('buyer_email'),
            order_count=_as_int(record.get('orderCount')),
            total_revenue=_as_float(record.get('totalRevenue')),
            last_order=record.get('lastOrder'),
            days_since_last_order=days_since,
            avg_cycle=avg_cycle,
            urgency=record.get('urgency') or classify_urgency(days_since, avg_cycle)[0],
            urgency_score=_as_int(record.get('urgencyScore'), max(0, days_since - avg_cycle)),
            revenue_90d=_as_float(record.get('revenue90d')),
            next_expected_order=record.get('nextExpectedOrder'),
            top_products=list(record.get('topProducts') or []),
            category_breakdown={
                str(k): _as_float(v) for k, v in (record.get('categoryBreakdown') or {}).items()
            },
            strain_type_breakdown=breakdown
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the same shape ``/api/sales-intelligence`` returns."""
        return {
            'id': self.id,
            'name': self.name,
            'city': self.city,
            'state': self.state,
            'buyer_name': self.buyer_name,
            'buyer_phone': self.buyer_phone,
            'buyer_email': self.buyer_email,
            'orderCount': self.order_count,
            'totalRevenue': self.total_revenue,
            'lastOrder': self.last_order,
            'daysSinceLastOrder': self.days_since_last_order,
            'avgCycle': self.avg_cycle,
            'urgency': self.urgency,
            'urgencyScore': self.urgency_score,
            'revenue90d': self.revenue_90d,
            'nextExpectedOrder': self.next_expected_order,
            'topProducts': self.top_products,
            'categoryBreakdown': self.category_breakdown,
            'strainTypeBreakdown': self.strain_type_breakdown
        }
