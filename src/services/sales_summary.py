"""
Sales Summary Service
======================
Business-wide totals computed from an orders frame: order count, revenue,
average order value and the sales commission owed on that revenue.

The backend's ``/api/dashboard`` reports the same four numbers for all
time; this module lets the dashboard show them for any window (e.g. the
last 90 days) without another round trip.
"""

import pandas as pd
from typing import Optional

from models.sales import DashboardStats
from utils.constants import COMMISSION_RATE


def commission_for(revenue: float, rate: float = COMMISSION_RATE) -> float:
    return float(revenue) * rate


def summarize_orders(
    orders: pd.DataFrame,
    since: Optional[pd.Timestamp] = None,
    rate: float = COMMISSION_RATE
) -> DashboardStats:
    """
    Totals over ``orders``, optionally only those dated on or after ``since``.

    Parameters
    ----------
    orders : pd.DataFrame
        Normalized orders (naive UTC ``order_date``, float ``total_amount``)
    since : pd.Timestamp, optional
        Naive UTC lower bound; undated orders are excluded when given
    rate : float
        Commission rate

    Returns
    -------
    DashboardStats
    """
    if since is not None and not orders.empty:
        orders = orders[orders['order_date'].notna() & (orders['order_date'] >= since)]

    total_orders = int(len(orders))
    total_revenue = float(orders['total_amount'].fillna(0.0).sum()) if total_orders else 0.0

    return DashboardStats(
        total_orders=total_orders,
        total_revenue=total_revenue,
        avg_order_value=total_revenue / total_orders if total_orders else 0.0,
        total_commission=commission_for(total_revenue, rate)
    )
