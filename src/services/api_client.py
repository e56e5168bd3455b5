"""
Sales API Client
=================
Thin HTTP client for the White Mousse backend.

Endpoints:
- GET  /api/dashboard            -> business-wide stats
- GET  /api/stores               -> store records
- GET  /api/orders               -> order records
- GET  /api/sales-intelligence   -> stores already aggregated server-side
- POST /api/sync                 -> re-pull orders and stores from LeafLink

Error Taxonomy:
- ApiConnectionError: the request never got an HTTP answer (DNS, refused, timeout)
- ApiStatusError: the server answered with a non-2xx status
- ApiResponseError: the body is not JSON, or it reports ``success: false``

All three derive from ApiError so callers can catch one class at the top
of a load routine.
"""

from typing import Dict, List, Optional, Any

import requests

from config.settings import API_CONFIG
from models.sales import DashboardStats, StoreIntelligence, SyncResult
from utils.logger import get_logger

logger = get_logger(__name__)


class ApiError(Exception):
    """Base class for every failure talking to the sales API."""


class ApiConnectionError(ApiError):
    """Network or transport failure."""


class ApiStatusError(ApiError):
    """Non-2xx HTTP status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ApiResponseError(ApiError):
    """Well-formed response that reports failure, or a body that is not JSON."""


class SalesApiClient:
    """
    Client for the sales backend.

    Every request carries a timeout; a hung backend surfaces as
    ApiConnectionError instead of blocking the dashboard forever.

    Usage
    -----
    >>> client = SalesApiClient()
    >>> stats = client.get_dashboard_stats()
    >>> orders = client.get_orders()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        sync_timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        self.base_url = (base_url or API_CONFIG['base_url']).rstrip('/')
        self.timeout = timeout if timeout is not None else API_CONFIG['timeout_seconds']
        self.sync_timeout = (
            sync_timeout if sync_timeout is not None else API_CONFIG['sync_timeout_seconds']
        )
        self.session = session or requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        require_success: bool = False,
        timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON object.

        Parameters
        ----------
        method : str
            HTTP method
        path : str
            Endpoint path starting with ``/api``
        require_success : bool
            Treat a missing or false ``success`` flag as failure. When False,
            only an explicit ``success: false`` fails.
        timeout : float, optional
            Override of the client's read timeout

        Raises
        ------
        ApiConnectionError, ApiStatusError, ApiResponseError
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(method, url, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiConnectionError(f"Could not reach API at {self.base_url}: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            message = f"API Error: {response.status_code}"
            if isinstance(payload, dict) and payload.get('error'):
                message = f"{message} - {payload['error']}"
            logger.error(f"{method} {path} -> {message}")
            raise ApiStatusError(message, response.status_code)

        if not isinstance(payload, dict):
            logger.error(f"{method} {path} returned a non-JSON body")
            raise ApiResponseError(f"Unexpected response from {path}")

        success = payload.get('success')
        if success is False or (require_success and not success):
            message = payload.get('error') or f"Request to {path} was not successful"
            logger.error(f"{method} {path} -> {message}")
            raise ApiResponseError(message)

        logger.info(f"{method} {path} -> {response.status_code}")
        return payload

    def get_dashboard_stats(self) -> DashboardStats:
        payload = self._request('GET', '/api/dashboard', require_success=True)
        return DashboardStats.from_api(payload.get('stats'))

    def get_stores(self) -> List[Dict[str, Any]]:
        payload = self._request('GET', '/api/stores')
        return list(payload.get('stores') or [])

    def get_orders(self) -> List[Dict[str, Any]]:
        payload = self._request('GET', '/api/orders')
        return list(payload.get('orders') or [])

    def get_sales_intelligence(self) -> List[StoreIntelligence]:
        """Fetch stores pre-aggregated by the backend."""
        payload = self._request('GET', '/api/sales-intelligence', require_success=True)
        return [StoreIntelligence.from_api(record) for record in payload.get('stores') or []]

    def sync(self) -> SyncResult:
        """
        Trigger a LeafLink re-pull on the backend and wait for it to finish.

        No request body; repeating the call is harmless from the client's side.
        """
        payload = self._request(
            'POST', '/api/sync', require_success=True, timeout=self.sync_timeout
        )
        result = SyncResult.from_api(payload)
        logger.info(f"Sync complete: {result.summary()}")
        return result
