# White Mousse Configuration Package

"""
Configuration module for the White Mousse Sales Intelligence dashboard.
Import settings from this module to access configuration values.
"""

from .settings import (
    BASE_DIR,
    SRC_DIR,
    DEFAULT_API_URL,
    API_CONFIG,
    DASHBOARD_CONFIG,
    LOGGING_CONFIG,
)

__all__ = [
    "BASE_DIR",
    "SRC_DIR",
    "DEFAULT_API_URL",
    "API_CONFIG",
    "DASHBOARD_CONFIG",
    "LOGGING_CONFIG",
]
