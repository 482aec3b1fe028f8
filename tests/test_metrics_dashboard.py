import asyncio

import httpx
import pytest

from conftest import CUSTOMERS, PRODUCTS, SELLERS, network_error
from shopdash.client import ApiClient
from shopdash.config import ApiConfig
from shopdash.controller import Failure, Success
from shopdash.metrics_dashboard import (
    QuickStats,
    compute_dashboard,
    load_quick_stats,
    load_recent_products,
    load_top_performers,
    mean_rating,
    recent_products,
)


def test_mean_rating_of_empty_list_is_zero():
    assert mean_rating([]) == 0


def test_mean_rating_is_arithmetic_mean():
    assert mean_rating([{"rating": 4.5}, {"rating": 3.5}, {"rating": 5}]) == pytest.approx(13 / 3)
    assert mean_rating(PRODUCTS) == pytest.approx(sum(p["rating"] for p in PRODUCTS) / len(PRODUCTS))


def test_mean_rating_counts_missing_rating_as_zero():
    assert mean_rating([{"rating": 4}, {"name": "unrated"}]) == 2.0


@pytest.mark.parametrize("n", [0, 1, 3, 5, 6, 9])
def test_recent_products_is_positional_prefix(n):
    products = [{"id": i} for i in range(n)]
    recent = recent_products(products)
    assert list(recent) == products[: min(5, n)]


def test_quick_stats_success(fake_api, client):
    outcome = asyncio.run(load_quick_stats(client))
    assert outcome == Success(
        (
            QuickStats(
                total_products=len(PRODUCTS),
                total_sellers=len(SELLERS),
                total_customers=len(CUSTOMERS),
                average_product_rating=mean_rating(PRODUCTS),
            ),
        )
    )
    assert sorted(fake_api.paths) == ["/api/customers", "/api/products", "/api/sellers"]
    assert all(r.url.query == b"" for r in fake_api.requests)


def test_quick_stats_fail_as_a_whole(fake_api, client):
    fake_api.routes["/api/sellers"] = (500, {"message": "sellers down"})
    outcome = asyncio.run(load_quick_stats(client))
    assert outcome == Failure("sellers down")


def test_quick_stats_failure_waits_for_the_other_fetches():
    finished = []

    async def handler(request):
        if request.url.path == "/api/sellers":
            return httpx.Response(500, json={"message": "down"})
        await asyncio.sleep(0.05)
        finished.append(request.url.path)
        return httpx.Response(200, json={"data": []})

    client = ApiClient(ApiConfig(), transport=httpx.MockTransport(handler))
    assert asyncio.run(load_quick_stats(client)) == Failure("down")
    assert sorted(finished) == ["/api/customers", "/api/products"]


def test_quick_stats_network_failure_uses_fallback(fake_api, client):
    fake_api.routes["/api/customers"] = network_error()
    assert asyncio.run(load_quick_stats(client)) == Failure("Failed to fetch stats")


def test_recent_products_outcome(client):
    outcome = asyncio.run(load_recent_products(client))
    assert outcome == Success(tuple(PRODUCTS[:5]))


def test_top_performers_fetch_top_three(fake_api, client):
    top = asyncio.run(load_top_performers(client))
    assert isinstance(top.sellers, Success)
    assert isinstance(top.customers, Success)
    params = {r.url.path: dict(r.url.params) for r in fake_api.requests}
    assert params["/api/sellers/top"] == {"limit": "3"}
    assert params["/api/customers/top"] == {"limit": "3", "sortBy": "spent"}


def test_top_performers_fail_independently(fake_api, client):
    fake_api.routes["/api/sellers/top"] = network_error()
    top = asyncio.run(load_top_performers(client))
    assert top.sellers == Failure("Failed to fetch top sellers")
    assert isinstance(top.customers, Success)


def test_compute_dashboard_payload(fake_api, client):
    fake_api.routes["/api/sellers"] = (500, {"message": "sellers down"})
    payload = asyncio.run(compute_dashboard(client))
    assert payload["quick_stats"] == {"status": "error", "error": "sellers down"}
    assert payload["recent_products"]["status"] == "success"
    assert [row["name"] for row in payload["recent_products"]["data"]] == [p["name"] for p in PRODUCTS[:5]]
    assert [row["rank"] for row in payload["top_customers"]["data"]] == [1, 2, 3]
    assert payload["top_sellers"]["data"][0]["name"] == "TechHub"
