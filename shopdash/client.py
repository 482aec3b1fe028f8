"""
Async client for the remote e-commerce API.

One method per (resource, action) pair. Every method returns an
``ApiResponse`` envelope or raises a ``RequestError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple
from urllib.parse import quote

import httpx

from shopdash.config import ApiConfig
from shopdash.errors import ServerFailure, TransportFailure
from shopdash.filters import strip_filters

logger = logging.getLogger(__name__)


# Endpoint paths, relative to the configured base URL
PRODUCTS_PATH = "/api/products"
SELLERS_PATH = "/api/sellers"
CUSTOMERS_PATH = "/api/customers"
HEALTH_PATH = "/health"
INFO_PATH = "/"


def _segment(value: object) -> str:
    return quote(str(value), safe="")


@dataclass(frozen=True)
class ApiResponse:
    status: int
    body: Any = None

    @property
    def data(self) -> Any:
        if isinstance(self.body, Mapping):
            return self.body.get("data")
        return None

    def items(self) -> Tuple[Any, ...]:
        """The ``data`` payload as a tuple; missing data is an empty result."""
        data = self.data
        if data is None:
            return ()
        if isinstance(data, Mapping):
            return (data,)
        if isinstance(data, (list, tuple)):
            return tuple(data)
        return (data,)


def _server_message(body: Any) -> Optional[str]:
    if isinstance(body, Mapping):
        message = body.get("message")
        if message:
            return str(message)
    return None


class ApiClient:
    """Read-only after construction; safe to share between controllers."""

    def __init__(self, config: Optional[ApiConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._config = config or ApiConfig()
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._config.base_url

    async def _get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        query = strip_filters(params or {})
        url = f"{self._config.base_url}{path}"
        logger.debug("GET %s params=%s", url, query)
        try:
            async with httpx.AsyncClient(
                base_url=self._config.base_url,
                headers=self._config.headers(),
                timeout=self._config.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(path, params=query)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("GET %s failed: %s", url, type(exc).__name__)
            raise TransportFailure("GET", url, cause=exc) from exc

        try:
            body = response.json()
        except ValueError:
            body = response.text or None

        if not response.is_success:
            message = _server_message(body)
            logger.warning("GET %s returned %s: %s", url, response.status_code, message or "no message")
            raise ServerFailure("GET", url, response.status_code, message)
        return ApiResponse(status=response.status_code, body=body)

    # Products
    async def get_products(self, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        return await self._get(PRODUCTS_PATH, params)

    async def get_product(self, product_id: object) -> ApiResponse:
        return await self._get(f"{PRODUCTS_PATH}/{_segment(product_id)}")

    async def get_products_by_category(self, category: str) -> ApiResponse:
        return await self._get(f"{PRODUCTS_PATH}/category/{_segment(category)}")

    # Sellers
    async def get_sellers(self, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        return await self._get(SELLERS_PATH, params)

    async def get_seller(self, seller_id: object) -> ApiResponse:
        return await self._get(f"{SELLERS_PATH}/{_segment(seller_id)}")

    async def get_top_sellers(self, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        return await self._get(f"{SELLERS_PATH}/top", params)

    # Customers
    async def get_customers(self, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        return await self._get(CUSTOMERS_PATH, params)

    async def get_customer(self, customer_id: object) -> ApiResponse:
        return await self._get(f"{CUSTOMERS_PATH}/{_segment(customer_id)}")

    async def get_top_customers(self, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        return await self._get(f"{CUSTOMERS_PATH}/top", params)

    # Utility
    async def health_check(self) -> ApiResponse:
        return await self._get(HEALTH_PATH)

    async def get_api_info(self) -> ApiResponse:
        return await self._get(INFO_PATH)
