from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ProductFiltersModel(BaseModel):
    category: Optional[str] = None
    minPrice: Optional[str] = None
    maxPrice: Optional[str] = None


class SellerFiltersModel(BaseModel):
    minRating: Optional[str] = None
    sortBy: Optional[str] = None


class CustomerFiltersModel(BaseModel):
    minOrders: Optional[str] = None
    minSpent: Optional[str] = None
    sortBy: Optional[str] = None


class ListingResponse(BaseModel):
    resource: str
    filters: Dict[str, Any] = Field(default_factory=dict)
    status: Literal["success", "error"]
    count: int = 0
    data: List[Dict[str, Any]] = Field(default_factory=list)
    cards: List[Dict[str, Any]] = Field(default_factory=list)
    charts: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


class ProbeResultModel(BaseModel):
    name: str
    success: bool
    status: Optional[int] = None
    data: Any = None
    error: Optional[str] = None


class ProbeResponse(BaseModel):
    any_success: bool
    results: List[ProbeResultModel]


class StatusResponse(BaseModel):
    status: Literal["connected", "error"]
    base_url: str
