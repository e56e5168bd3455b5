"""
Utils Package
=============
Utility functions for the White Mousse Sales Intelligence dashboard.

Modules:
- logger: Centralized logging configuration
- validators: API payload validation utilities
- constants: Business rules, thresholds and payload schemas
"""

from utils.logger import get_logger
from utils.validators import SchemaValidator
from utils.constants import (
    ORDER_SCHEMA,
    STORE_SCHEMA,
    URGENCY_CONFIG,
    COMMISSION_RATE
)

__all__ = [
    'get_logger',
    'SchemaValidator',
    'ORDER_SCHEMA',
    'STORE_SCHEMA',
    'URGENCY_CONFIG',
    'COMMISSION_RATE'
]
