"""
Models Package
===============
Data models for the White Mousse Sales Intelligence dashboard.

Modules:
- sales: Store intelligence, dashboard stats and sync results
"""

from models.sales import (
    DashboardStats,
    StoreIntelligence,
    SyncResult,
    classify_urgency
)

__all__ = [
    'DashboardStats',
    'StoreIntelligence',
    'SyncResult',
    'classify_urgency'
]
