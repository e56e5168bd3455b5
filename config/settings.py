# White Mousse Configuration
# Centralized configuration settings for the sales intelligence dashboard

"""
Configuration settings for the White Mousse Sales Intelligence dashboard.
Values come from the environment where one is set, otherwise the defaults
below are used.
"""

import os
from pathlib import Path

# Base Paths
BASE_DIR = Path(__file__).parent.parent
SRC_DIR = BASE_DIR / "src"

DEFAULT_API_URL = "https://white-mousse-backend-production.up.railway.app"

# API Configuration
API_CONFIG = {
    "base_url": os.getenv("SALES_API_URL", DEFAULT_API_URL).rstrip("/"),
    "timeout_seconds": float(os.getenv("SALES_API_TIMEOUT", "30")),
    # Sync re-pulls everything from LeafLink and is much slower than a read
    "sync_timeout_seconds": float(os.getenv("SALES_API_SYNC_TIMEOUT", "300")),
}

# Dashboard Configuration
DASHBOARD_CONFIG = {
    "page_title": "White Mousse Sales Intelligence",
    "page_icon": "🍄",
    "cache_ttl_seconds": int(os.getenv("DASHBOARD_CACHE_TTL", "300")),
    # "client" aggregates /api/stores + /api/orders, "server" reads /api/sales-intelligence
    "default_source": os.getenv("DASHBOARD_SOURCE", "client"),
}

# Logging Configuration
LOGGING_CONFIG = {
    "level": os.getenv("LOG_LEVEL", "INFO"),
    "log_file": os.getenv("LOG_FILE"),
}
