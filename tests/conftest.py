"""
Shared fixtures: a fixed clock and helpers that build normalized frames
from plain API-shaped records.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pandas as pd
import pytest
import requests

# Add src and project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT))

from services.data_loader import orders_to_frame, stores_to_frame

AS_OF = pd.Timestamp("2026-10-18 12:00:00")


def days_ago(days: float) -> str:
    """ISO timestamp ``days`` before AS_OF."""
    return (AS_OF - pd.Timedelta(days=days)).isoformat()


def make_orders(records):
    return orders_to_frame(records)[0]


def make_stores(records):
    return stores_to_frame(records)[0]


def json_response(payload, status_code=200):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = payload
    return response


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def session():
    return Mock(spec=requests.Session)
