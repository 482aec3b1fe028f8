from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from shopdash.client import ApiClient
from shopdash.config import ApiConfig


PRODUCTS = [
    {"id": "p1", "name": "Laptop", "category": "Electronics", "description": "14 inch", "price": 999.5, "stock": 4, "sellerName": "TechHub", "rating": 4.5},
    {"id": "p2", "name": "Sneakers", "category": "Footwear", "description": "Running", "price": 79.99, "stock": 30, "sellerName": "RunCo", "rating": 4.0},
    {"id": "p3", "name": "Jacket", "category": "Clothing", "description": "Rain", "price": 120, "stock": 12, "sellerName": "Outdoors", "rating": 3.5},
    {"id": "p4", "name": "Headphones", "category": "Electronics", "description": "Noise cancelling", "price": 199, "stock": 0, "sellerName": "TechHub", "rating": 5.0},
    {"id": "p5", "name": "Sandals", "category": "Footwear", "description": "Beach", "price": 25, "stock": 50, "sellerName": "RunCo", "rating": 3.0},
    {"id": "p6", "name": "Scarf", "category": "Clothing", "description": "Wool", "price": 30, "stock": 8, "sellerName": "Outdoors", "rating": 4.0},
]

SELLERS = [
    {"id": "s1", "name": "TechHub", "description": "Gadgets", "businessType": "Retail", "rating": 4.8, "totalSales": 150000, "productCount": 42, "joinedDate": "2021-03-15", "email": "hi@techhub.example"},
    {"id": "s2", "name": "RunCo", "description": "Shoes", "businessType": "Brand", "rating": 4.2, "totalSales": 82000.5, "productCount": 12, "joinedDate": "2019-07-01", "email": "sales@runco.example"},
    {"id": "s3", "name": "Outdoors", "description": "Apparel", "businessType": "Wholesale", "rating": 3.9, "totalSales": 40000, "productCount": 20, "joinedDate": "2022-11-30", "email": "team@outdoors.example"},
]

CUSTOMERS = [
    {"id": "c1", "name": "Ada", "email": "ada@example.com", "phone": "555-0101", "loyaltyTier": "Gold", "totalOrders": 20, "totalSpent": 5000, "registrationDate": "2020-01-15", "city": "London", "country": "UK"},
    {"id": "c2", "name": "Grace", "email": "grace@example.com", "phone": "555-0102", "loyaltyTier": "Platinum", "totalOrders": 35, "totalSpent": 4200.75, "registrationDate": "2019-06-02", "city": "New York", "country": "USA"},
    {"id": "c3", "name": "Linus", "email": "linus@example.com", "phone": "555-0103", "loyaltyTier": "Silver", "totalOrders": 8, "totalSpent": 3100, "registrationDate": "2021-09-09", "city": "Helsinki", "country": "Finland"},
    {"id": "c4", "name": "Barbara", "email": "barbara@example.com", "phone": "555-0104", "loyaltyTier": "Bronze", "totalOrders": 4, "totalSpent": 900, "registrationDate": "2022-02-20", "city": "Boston", "country": "USA"},
    {"id": "c5", "name": "Ken", "email": "ken@example.com", "phone": "555-0105", "loyaltyTier": "Bronze", "totalOrders": 0, "totalSpent": 0, "registrationDate": "2023-05-05", "city": "Kyoto", "country": "Japan"},
]

Route = Tuple[int, Any]


def default_routes() -> Dict[str, Route]:
    return {
        "/health": (200, {"status": "ok"}),
        "/": (200, {"name": "E-commerce API", "version": "1.0.0"}),
        "/api/products": (200, {"success": True, "data": PRODUCTS}),
        "/api/sellers": (200, {"success": True, "data": SELLERS}),
        "/api/customers": (200, {"success": True, "data": CUSTOMERS}),
        "/api/sellers/top": (200, {"success": True, "data": SELLERS}),
        "/api/customers/top": (200, {"success": True, "data": CUSTOMERS}),
        "/api/products/p1": (200, {"success": True, "data": PRODUCTS[0]}),
    }


class FakeApi:
    """Route table served through ``httpx.MockTransport``; records every request."""

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"success": False, "message": "Route not found"})
        if callable(route):
            return route(request)
        status, body = route
        if isinstance(body, (dict, list)):
            return httpx.Response(status, content=json.dumps(body).encode(), headers={"content-type": "application/json"})
        return httpx.Response(status, text=body or "")

    @property
    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def client(self, **config: Any) -> ApiClient:
        return ApiClient(ApiConfig(**config), transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi(default_routes())


@pytest.fixture
def client(fake_api: FakeApi) -> ApiClient:
    return fake_api.client(api_key="secret-token")


def network_error(message: str = "connection refused") -> Callable[[httpx.Request], httpx.Response]:
    def _raise(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(message, request=request)

    return _raise
