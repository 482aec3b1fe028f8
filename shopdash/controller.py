"""
Fetch/filter/render controllers.

A controller owns one view's filter set and the outcome of its most
recently issued request. Responses that arrive for a superseded request
are dropped, so the last request *issued* wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Union

from shopdash.client import ApiClient, ApiResponse
from shopdash.errors import RequestError
from shopdash.filters import TOP_LIMIT_DEFAULT, normalize_top_params, strip_filters

logger = logging.getLogger(__name__)

Fetch = Callable[[Dict[str, Any]], Awaitable[ApiResponse]]


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Success:
    items: Tuple[Any, ...] = ()

    @property
    def empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class Failure:
    message: str


Outcome = Union[Loading, Success, Failure]


def failure_message(exc: RequestError, fallback: str) -> str:
    return exc.server_message or fallback


class ListController:
    def __init__(self, resource: str, fetch: Fetch, filters: Optional[Mapping[str, Any]] = None):
        self.resource = resource
        self._fetch = fetch
        self.filters: Dict[str, Any] = dict(filters or {})
        self.outcome: Outcome = Loading()
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def loading(self) -> bool:
        return isinstance(self.outcome, Loading)

    @property
    def items(self) -> Tuple[Any, ...]:
        return self.outcome.items if isinstance(self.outcome, Success) else ()

    @property
    def error(self) -> Optional[str]:
        return self.outcome.message if isinstance(self.outcome, Failure) else None

    @property
    def count(self) -> int:
        return len(self.items)

    async def set_filters(self, filters: Optional[Mapping[str, Any]]) -> Outcome:
        """Replace the whole filter set and re-fetch."""
        self.filters = dict(filters or {})
        return await self.refresh()

    async def refresh(self) -> Outcome:
        self._generation += 1
        generation = self._generation
        self.outcome = Loading()
        params = strip_filters(self.filters)

        try:
            response = await self._fetch(params)
            outcome: Outcome = Success(response.items())
        except RequestError as exc:
            logger.warning("%s fetch failed: %s", self.resource, exc)
            outcome = Failure(failure_message(exc, f"Failed to fetch {self.resource}"))

        if generation != self._generation:
            logger.debug("%s: dropping stale response %d (current %d)", self.resource, generation, self._generation)
            return self.outcome
        self.outcome = outcome
        return outcome

    async def retry(self) -> Outcome:
        return await self.refresh()


def products_controller(client: ApiClient) -> ListController:
    return ListController("products", client.get_products)


def sellers_controller(client: ApiClient) -> ListController:
    return ListController("sellers", client.get_sellers)


def customers_controller(client: ApiClient) -> ListController:
    return ListController("customers", client.get_customers)


def top_sellers_controller(client: ApiClient, limit: int = TOP_LIMIT_DEFAULT) -> ListController:
    return ListController("top sellers", client.get_top_sellers, normalize_top_params(limit))


def top_customers_controller(client: ApiClient, limit: int = TOP_LIMIT_DEFAULT, sort_by: str = "spent") -> ListController:
    return ListController("top customers", client.get_top_customers, normalize_top_params(limit, sort_by))


LIST_CONTROLLERS: Dict[str, Callable[[ApiClient], ListController]] = {
    "products": products_controller,
    "sellers": sellers_controller,
    "customers": customers_controller,
}
