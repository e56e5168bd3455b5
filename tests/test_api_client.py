"""
API Client Tests
=================
Each failure class of the error taxonomy, plus the happy path of every
endpoint, against a mocked requests.Session.
"""

import pytest
import requests

from models.sales import DashboardStats, StoreIntelligence, SyncResult
from services.api_client import (
    SalesApiClient,
    ApiError,
    ApiConnectionError,
    ApiStatusError,
    ApiResponseError,
)
from tests.conftest import json_response

BASE_URL = "http://api.test"


@pytest.fixture
def client(session):
    return SalesApiClient(base_url=BASE_URL + "/", timeout=5, sync_timeout=60, session=session)


# =============================================================================
# ENDPOINTS
# =============================================================================


class TestEndpoints:

    def test_dashboard_stats(self, client, session):
        session.request.return_value = json_response({
            'success': True,
            'stats': {'total_orders': 4, 'total_revenue': 1000, 'avg_order_value': 250, 'total_commission': 80}
        })

        stats = client.get_dashboard_stats()

        session.request.assert_called_once_with('GET', f"{BASE_URL}/api/dashboard", timeout=5)
        assert stats == DashboardStats(4, 1000.0, 250.0, 80.0)

    def test_stores_and_orders_do_not_need_success_flag(self, client, session):
        session.request.side_effect = [
            json_response({'stores': [{'id': 1, 'name': 'A'}]}),
            json_response({'orders': [{'id': 9, 'buyer_name': 'A'}]}),
        ]

        assert client.get_stores() == [{'id': 1, 'name': 'A'}]
        assert client.get_orders() == [{'id': 9, 'buyer_name': 'A'}]

    def test_missing_lists_become_empty(self, client, session):
        session.request.return_value = json_response({})
        assert client.get_stores() == []
        assert client.get_orders() == []

    def test_sales_intelligence(self, client, session):
        session.request.return_value = json_response({
            'success': True,
            'stores': [{'id': 1, 'name': 'A', 'urgency': 'warning', 'daysSinceLastOrder': 20, 'avgCycle': 15}]
        })

        stores = client.get_sales_intelligence()

        assert len(stores) == 1
        assert isinstance(stores[0], StoreIntelligence)
        assert stores[0].urgency == 'warning'
        assert stores[0].urgency_score == 5

    def test_sync_posts_with_sync_timeout(self, client, session):
        session.request.return_value = json_response(
            {'success': True, 'orders': 120, 'lineItems': 800, 'companies': 14}
        )

        result = client.sync()

        session.request.assert_called_once_with('POST', f"{BASE_URL}/api/sync", timeout=60)
        assert result == SyncResult(orders=120, companies=14, line_items=800)


# =============================================================================
# ERRORS
# =============================================================================


class TestErrors:

    def test_transport_failure(self, client, session):
        session.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(ApiConnectionError, match="connection refused"):
            client.get_dashboard_stats()

    def test_timeout_is_a_transport_failure(self, client, session):
        session.request.side_effect = requests.Timeout("read timed out")

        with pytest.raises(ApiConnectionError):
            client.get_orders()

    def test_non_2xx_status(self, client, session):
        session.request.return_value = json_response(None, status_code=502)
        session.request.return_value.json.side_effect = ValueError("no json")

        with pytest.raises(ApiStatusError) as excinfo:
            client.get_stores()

        assert excinfo.value.status_code == 502
        assert str(excinfo.value) == "API Error: 502"

    def test_status_error_carries_server_message(self, client, session):
        session.request.return_value = json_response({'success': False, 'error': 'db down'}, status_code=500)

        with pytest.raises(ApiStatusError, match="db down"):
            client.get_dashboard_stats()

    def test_success_false(self, client, session):
        session.request.return_value = json_response({'success': False, 'error': 'LeafLink token expired'})

        with pytest.raises(ApiResponseError, match="LeafLink token expired"):
            client.sync()

    def test_missing_success_flag_fails_where_required(self, client, session):
        session.request.return_value = json_response({'stats': {}})

        with pytest.raises(ApiResponseError):
            client.get_dashboard_stats()

    def test_explicit_failure_fails_even_where_not_required(self, client, session):
        session.request.return_value = json_response({'success': False})

        with pytest.raises(ApiResponseError, match="/api/orders"):
            client.get_orders()

    def test_body_that_is_not_json(self, client, session):
        session.request.return_value = json_response(None)
        session.request.return_value.json.side_effect = ValueError("Expecting value")

        with pytest.raises(ApiResponseError):
            client.get_orders()

    def test_all_errors_share_a_base_class(self):
        for cls in (ApiConnectionError, ApiStatusError, ApiResponseError):
            assert issubclass(cls, ApiError)
