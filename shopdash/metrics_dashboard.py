from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Sequence, Tuple

import pandas as pd

from shopdash.cards import rank_rows, recent_product_rows
from shopdash.client import ApiClient
from shopdash.controller import Failure, Loading, Outcome, Success, failure_message
from shopdash.errors import RequestError

logger = logging.getLogger(__name__)

RECENT_PRODUCTS_COUNT = 5
TOP_PERFORMERS_LIMIT = 3


@dataclass(frozen=True)
class QuickStats:
    total_products: int = 0
    total_sellers: int = 0
    total_customers: int = 0
    average_product_rating: float = 0.0


@dataclass(frozen=True)
class TopPerformers:
    sellers: Outcome = Loading()
    customers: Outcome = Loading()


def mean_rating(products: Sequence[Mapping[str, Any]]) -> float:
    if not products:
        return 0.0
    ratings = pd.to_numeric(pd.Series([p.get("rating") for p in products], dtype=object), errors="coerce").fillna(0)
    return float(ratings.astype(float).mean())


def recent_products(products: Sequence[Any], n: int = RECENT_PRODUCTS_COUNT) -> Tuple[Any, ...]:
    # Positional: the first n entries as received.
    return tuple(products[:n])


async def fetch_quick_stats(client: ApiClient) -> QuickStats:
    """Counts and mean product rating; raises if any of the three fetches fails.

    All three requests settle before the first failure is re-raised.
    """
    results = await asyncio.gather(
        client.get_products(),
        client.get_sellers(),
        client.get_customers(),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    products_res, sellers_res, customers_res = results
    products = products_res.items()
    return QuickStats(
        total_products=len(products),
        total_sellers=len(sellers_res.items()),
        total_customers=len(customers_res.items()),
        average_product_rating=mean_rating(products),
    )


async def load_quick_stats(client: ApiClient) -> Outcome:
    try:
        stats = await fetch_quick_stats(client)
    except RequestError as exc:
        logger.warning("quick stats failed: %s", exc)
        return Failure(failure_message(exc, "Failed to fetch stats"))
    return Success((stats,))


async def load_recent_products(client: ApiClient) -> Outcome:
    try:
        response = await client.get_products()
    except RequestError as exc:
        logger.warning("recent products failed: %s", exc)
        return Failure(failure_message(exc, "Failed to fetch recent products"))
    return Success(recent_products(response.items()))


async def _top_outcome(call, params: Dict[str, Any], fallback: str) -> Outcome:
    try:
        response = await call(params)
    except RequestError as exc:
        logger.warning("%s: %s", fallback, exc)
        return Failure(failure_message(exc, fallback))
    return Success(response.items())


async def load_top_performers(client: ApiClient, limit: int = TOP_PERFORMERS_LIMIT) -> TopPerformers:
    sellers, customers = await asyncio.gather(
        _top_outcome(client.get_top_sellers, {"limit": limit}, "Failed to fetch top sellers"),
        _top_outcome(client.get_top_customers, {"limit": limit, "sortBy": "spent"}, "Failed to fetch top customers"),
    )
    return TopPerformers(sellers=sellers, customers=customers)


def outcome_payload(outcome: Outcome, rows: Any = None) -> Dict[str, Any]:
    if isinstance(outcome, Failure):
        return {"status": "error", "error": outcome.message}
    if isinstance(outcome, Loading):
        return {"status": "loading"}
    return {"status": "success", "data": rows if rows is not None else list(outcome.items)}


async def compute_dashboard(client: ApiClient) -> Dict[str, Any]:
    """JSON-ready payload of the three dashboard panels."""
    stats, recent, top = await asyncio.gather(
        load_quick_stats(client),
        load_recent_products(client),
        load_top_performers(client),
    )
    stats_rows = asdict(stats.items[0]) if isinstance(stats, Success) else None
    recent_rows = recent_product_rows(recent.items) if isinstance(recent, Success) else None
    seller_rows = rank_rows("sellers", top.sellers.items, TOP_PERFORMERS_LIMIT) if isinstance(top.sellers, Success) else None
    customer_rows = (
        rank_rows("customers", top.customers.items, TOP_PERFORMERS_LIMIT, sort_by="spent")
        if isinstance(top.customers, Success)
        else None
    )
    return {
        "quick_stats": outcome_payload(stats, stats_rows),
        "recent_products": outcome_payload(recent, recent_rows),
        "top_sellers": outcome_payload(top.sellers, seller_rows),
        "top_customers": outcome_payload(top.customers, customer_rows),
    }
