"""
System-Wide Constants and Business Rules
=========================================
Centralized location for the reorder thresholds, API payload schemas and
display labels used by the sales intelligence services.

Design Principles:
- All magic numbers live here, not inside the services
- Schemas define the fields each API endpoint is expected to return
- Labels and colors are shared by every view of the same urgency tier
"""

from typing import Dict, List, Any

# =============================================================================
# API PAYLOAD SCHEMAS
# =============================================================================
# Required columns trigger validation errors if missing.
# Optional columns are coerced if present and filled with defaults if absent.

ORDER_SCHEMA = {
    "name": "orders",
    "description": "Orders pulled from the ordering platform",
    "required_columns": ["buyer_name", "order_date"],
    "optional_columns": ["id", "order_number", "total_amount", "status", "store_id", "line_items"],
    "timestamp_columns": ["order_date"],
    "numeric_columns": ["total_amount"]
}

STORE_SCHEMA = {
    "name": "stores",
    "description": "Retail stores (buyers) served by the distributor",
    "required_columns": ["id", "name"],
    "optional_columns": ["city", "state", "buyer_name", "buyer_phone", "buyer_email"],
    "timestamp_columns": [],
    "numeric_columns": []
}

LINE_ITEM_SCHEMA = {
    "name": "line_items",
    "description": "Products on a single order",
    "required_columns": ["product_name"],
    "optional_columns": ["category", "strain_type", "quantity", "unit_price", "revenue"],
    "timestamp_columns": [],
    "numeric_columns": ["quantity", "unit_price", "revenue"]
}

# =============================================================================
# REORDER URGENCY
# =============================================================================
# A store is late once it passes its usual reorder cycle by these factors.

URGENCY_CONFIG = {
    # daysSinceLastOrder > avgCycle * 1.5 -> urgent
    "urgent_multiplier": 1.5,

    # avgCycle * 1.2 < daysSinceLastOrder <= avgCycle * 1.5 -> warning
    "warning_multiplier": 1.2,

    # Reported when a store has never ordered; always classifies as urgent
    "no_orders_days_sentinel": 999,

    # Assumed cycle when history is too short to estimate one
    "default_cycle_days": 14,

    # Gaps of this many days or more are treated as churn, not a cycle
    "max_cycle_days": 90,

    # Trailing window for recent revenue
    "revenue_window_days": 90
}

URGENCY_LEVELS: List[str] = ["urgent", "warning", "good"]

# Sort rank: lower shows first
URGENCY_ORDER: Dict[str, int] = {"urgent": 0, "warning": 1, "good": 2}

URGENCY_DISPLAY: Dict[str, Dict[str, str]] = {
    "urgent": {
        "label": "🔥 URGENT - CALL NOW",
        "color": "#fee2e2",
        "border": "#ef4444",
        "text_color": "#dc2626"
    },
    "warning": {
        "label": "⚠️ FOLLOW UP SOON",
        "color": "#fef3c7",
        "border": "#f59e0b",
        "text_color": "#d97706"
    },
    "good": {
        "label": "✅ ON SCHEDULE",
        "color": "#f0fdf4",
        "border": "#22c55e",
        "text_color": "#16a34a"
    }
}

# =============================================================================
# COMMISSION
# =============================================================================

COMMISSION_RATE = 0.08

# =============================================================================
# PRODUCT MIX
# =============================================================================

STRAIN_TYPES: List[str] = ["indica", "sativa", "hybrid"]

STRAIN_DISPLAY: Dict[str, Dict[str, str]] = {
    "indica": {"icon": "🟣", "label": "Indica", "color": "#7c3aed", "background": "#e9d5ff"},
    "sativa": {"icon": "🟢", "label": "Sativa", "color": "#059669", "background": "#d1fae5"},
    "hybrid": {"icon": "🟡", "label": "Hybrid", "color": "#d97706", "background": "#fef3c7"}
}

INSIGHT_CONFIG: Dict[str, Any] = {
    # Share (percent) above which a single strain dominates
    "indica_dominant_pct": 50,
    "sativa_dominant_pct": 50,
    "hybrid_dominant_pct": 40,
    "messages": {
        "indica": "Strong Indica preference! Recommend new Indica products.",
        "sativa": "Strong Sativa preference! Focus on Sativa products.",
        "hybrid": "They love Hybrids! Push hybrid product line.",
        "balanced": "Balanced preferences - offer variety across all strain types."
    }
}

# Products shown on a store card
CARD_TOP_PRODUCTS = 3

# Products listed in the store detail panel
DETAIL_TOP_PRODUCTS = 10
