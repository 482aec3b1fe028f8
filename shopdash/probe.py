"""
Endpoint self-test for operators.

Runs a fixed list of API calls one at a time and records each outcome
independently; a failing call never stops the ones after it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from shopdash.client import ApiClient, ApiResponse
from shopdash.errors import RequestError

logger = logging.getLogger(__name__)

ProbeCall = Callable[[ApiClient], Awaitable[ApiResponse]]

API_CONNECTED = "connected"
API_ERROR = "error"

PROBE_OPERATIONS: List[Tuple[str, ProbeCall]] = [
    ("Health Check", lambda c: c.health_check()),
    ("API Info", lambda c: c.get_api_info()),
    ("Get Products", lambda c: c.get_products()),
    ("Get Sellers", lambda c: c.get_sellers()),
    ("Get Customers", lambda c: c.get_customers()),
    ("Top Sellers", lambda c: c.get_top_sellers({"limit": 3})),
    ("Top Customers", lambda c: c.get_top_customers({"limit": 3})),
]


@dataclass(frozen=True)
class ProbeResult:
    name: str
    success: bool
    status: Optional[int] = None
    data: Any = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ProbeReport:
    results: List[ProbeResult] = field(default_factory=list)

    @property
    def any_success(self) -> bool:
        return any(r.success for r in self.results)

    @property
    def failures(self) -> List[ProbeResult]:
        return [r for r in self.results if not r.success]


async def run_probe(client: ApiClient, operations: Optional[List[Tuple[str, ProbeCall]]] = None) -> ProbeReport:
    results: List[ProbeResult] = []
    for name, call in operations or PROBE_OPERATIONS:
        try:
            response = await call(client)
        except RequestError as exc:
            logger.info("probe %s failed: %s", name, exc.message)
            results.append(ProbeResult(name=name, success=False, status=exc.status, error=exc.server_message or exc.message))
            continue
        results.append(ProbeResult(name=name, success=True, status=response.status, data=response.body))
    report = ProbeReport(results=results)
    logger.info("probe finished: %d/%d succeeded", len(results) - len(report.failures), len(results))
    return report


async def check_api_status(client: ApiClient) -> str:
    try:
        await client.health_check()
    except RequestError as exc:
        logger.warning("API health check failed: %s", exc.message)
        return API_ERROR
    return API_CONNECTED
