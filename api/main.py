from __future__ import annotations

import logging
import math
from dataclasses import asdict
from functools import lru_cache
from typing import Any, Dict, List, Literal

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import (
    CustomerFiltersModel,
    ListingResponse,
    ProbeResponse,
    ProductFiltersModel,
    SellerFiltersModel,
    StatusResponse,
)
from shopdash.cards import build_cards, entities_frame, rank_rows
from shopdash.charts import category_breakdown_chart, rating_distribution_chart, to_vega_spec
from shopdash.client import ApiClient
from shopdash.config import load_config
from shopdash.controller import (
    LIST_CONTROLLERS,
    Failure,
    ListController,
    top_customers_controller,
    top_sellers_controller,
)
from shopdash.filters import TOP_LIMIT_DEFAULT, normalize_top_params
from shopdash.metrics_dashboard import compute_dashboard
from shopdash.probe import check_api_status, run_probe


app = FastAPI(title="Shop Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_api_client() -> ApiClient:
    return ApiClient(load_config())


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _listing_charts(resource: str, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    if resource != "products":
        return {}
    return {
        "category_breakdown": to_vega_spec(category_breakdown_chart(items)),
        "rating_distribution": to_vega_spec(rating_distribution_chart(items)),
    }


def _listing(controller: ListController, resource: str, cards: bool = True) -> JSONResponse:
    outcome = controller.outcome
    if isinstance(outcome, Failure):
        payload = ListingResponse(resource=resource, filters=controller.filters, status="error", error=outcome.message)
        return _json(payload.model_dump(), status_code=502)
    items = list(controller.items)
    payload = ListingResponse(
        resource=resource,
        filters=controller.filters,
        status="success",
        count=len(items),
        data=items,
        cards=build_cards(resource, items) if cards else [],
        charts=_listing_charts(resource, items) if cards else {},
    )
    return _json(payload.model_dump())


async def _run_listing(resource: str, filters: Dict[str, Any], client: ApiClient) -> ListController:
    controller = LIST_CONTROLLERS[resource](client)
    await controller.set_filters(filters)
    return controller


@app.get("/status")
async def status(client: ApiClient = Depends(get_api_client)):
    api_status = await check_api_status(client)
    return _json(StatusResponse(status=api_status, base_url=client.base_url).model_dump())


@app.get("/overview")
async def overview(client: ApiClient = Depends(get_api_client)):
    try:
        return _json(await compute_dashboard(client))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.get("/products")
async def products(filters: ProductFiltersModel = Depends(), client: ApiClient = Depends(get_api_client)):
    try:
        controller = await _run_listing("products", filters.model_dump(), client)
        return _listing(controller, "products")
    except Exception as exc:
        logger.exception("products failed")
        return _error(exc)


@app.get("/sellers/top")
async def top_sellers(limit: int = Query(default=TOP_LIMIT_DEFAULT), client: ApiClient = Depends(get_api_client)):
    try:
        controller = top_sellers_controller(client, limit=limit)
        await controller.refresh()
        if isinstance(controller.outcome, Failure):
            return _listing(controller, "sellers", cards=False)
        rows = rank_rows("sellers", controller.items, controller.filters["limit"])
        return _json({"filters": controller.filters, "status": "success", "count": len(rows), "data": rows})
    except Exception as exc:
        logger.exception("top_sellers failed")
        return _error(exc)


@app.get("/sellers")
async def sellers(filters: SellerFiltersModel = Depends(), client: ApiClient = Depends(get_api_client)):
    try:
        controller = await _run_listing("sellers", filters.model_dump(), client)
        return _listing(controller, "sellers")
    except Exception as exc:
        logger.exception("sellers failed")
        return _error(exc)


@app.get("/customers/top")
async def top_customers(
    limit: int = Query(default=TOP_LIMIT_DEFAULT),
    sortBy: Literal["spent", "orders"] = Query(default="spent"),
    client: ApiClient = Depends(get_api_client),
):
    try:
        controller = top_customers_controller(client, limit=limit, sort_by=sortBy)
        await controller.refresh()
        if isinstance(controller.outcome, Failure):
            return _listing(controller, "customers", cards=False)
        params = normalize_top_params(limit, sortBy)
        rows = rank_rows("customers", controller.items, params["limit"], sort_by=params["sortBy"])
        return _json({"filters": controller.filters, "status": "success", "count": len(rows), "data": rows})
    except Exception as exc:
        logger.exception("top_customers failed")
        return _error(exc)


@app.get("/customers")
async def customers(filters: CustomerFiltersModel = Depends(), client: ApiClient = Depends(get_api_client)):
    try:
        controller = await _run_listing("customers", filters.model_dump(), client)
        return _listing(controller, "customers")
    except Exception as exc:
        logger.exception("customers failed")
        return _error(exc)


@app.get("/probe")
async def probe(client: ApiClient = Depends(get_api_client)):
    try:
        report = await run_probe(client)
        payload = ProbeResponse(any_success=report.any_success, results=[asdict(r) for r in report.results])
        return _json(payload.model_dump())
    except Exception as exc:
        logger.exception("probe failed")
        return _error(exc)


@app.get("/export/{page}")
async def export_page(page: str, client: ApiClient = Depends(get_api_client)):
    if page not in LIST_CONTROLLERS:
        export_df = pd.DataFrame()
    else:
        controller = await _run_listing(page, {}, client)
        if isinstance(controller.outcome, Failure):
            return JSONResponse(status_code=502, content={"error": controller.outcome.message, "type": "RequestError"})
        export_df = entities_frame(page, controller.items)
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={page}.csv"})
