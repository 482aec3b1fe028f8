from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


ALL_CATEGORIES = "All"
PRODUCT_CATEGORIES = [ALL_CATEGORIES, "Electronics", "Footwear", "Clothing"]

SELLER_SORT_OPTIONS: List[Tuple[str, str]] = [
    ("", "Default"),
    ("rating", "Rating"),
    ("sales", "Sales"),
    ("name", "Name"),
]
CUSTOMER_SORT_OPTIONS: List[Tuple[str, str]] = [
    ("", "Default"),
    ("orders", "Total Orders"),
    ("spent", "Total Spent"),
    ("name", "Name"),
    ("registered", "Registration Date"),
]

TOP_LIMIT_OPTIONS = [3, 5, 10]
TOP_LIMIT_DEFAULT = 5
TOP_LIMIT_MAX = 50
TOP_CUSTOMER_SORT_OPTIONS: List[Tuple[str, str]] = [("spent", "Spent"), ("orders", "Orders")]


@dataclass(frozen=True)
class FilterField:
    key: str
    label: str
    kind: str = "number"
    options: List[Tuple[str, str]] = field(default_factory=list)
    placeholder: str = ""
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    step: Optional[float] = None


PRODUCT_FIELDS = [
    FilterField(
        "category",
        "Category",
        kind="select",
        options=[("" if c == ALL_CATEGORIES else c, c) for c in PRODUCT_CATEGORIES],
    ),
    FilterField("minPrice", "Min Price", placeholder="0", min_value=0.0),
    FilterField("maxPrice", "Max Price", placeholder="999999", min_value=0.0),
]

SELLER_FIELDS = [
    FilterField("minRating", "Minimum Rating", placeholder="0.0", min_value=0.0, max_value=5.0, step=0.1),
    FilterField("sortBy", "Sort By", kind="select", options=SELLER_SORT_OPTIONS),
]

CUSTOMER_FIELDS = [
    FilterField("minOrders", "Minimum Orders", placeholder="0", min_value=0.0, step=1.0),
    FilterField("minSpent", "Minimum Spent ($)", placeholder="0", min_value=0.0),
    FilterField("sortBy", "Sort By", kind="select", options=CUSTOMER_SORT_OPTIONS),
]

FILTER_FIELDS: Dict[str, List[FilterField]] = {
    "products": PRODUCT_FIELDS,
    "sellers": SELLER_FIELDS,
    "customers": CUSTOMER_FIELDS,
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def strip_filters(filters: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop unset entries (``None`` or empty string) before transmission."""
    if not filters:
        return {}
    return {k: v for k, v in filters.items() if not _is_blank(v)}


def category_value(selection: Optional[str]) -> str:
    if not selection or selection == ALL_CATEGORIES:
        return ""
    return selection


def update_filter(filters: Optional[Mapping[str, Any]], key: str, value: Any) -> Dict[str, Any]:
    """Return the full filter set with one field replaced."""
    updated = dict(filters or {})
    if key == "category":
        value = category_value(value)
    updated[key] = value
    return updated


def clear_filters() -> Dict[str, Any]:
    # Replaces the whole set, including keys not shown in the panel.
    return {}


def normalize_top_params(limit: object = TOP_LIMIT_DEFAULT, sort_by: Optional[str] = None) -> Dict[str, Any]:
    try:
        limit = int(limit)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        limit = TOP_LIMIT_DEFAULT
    limit = max(1, min(TOP_LIMIT_MAX, limit))

    params: Dict[str, Any] = {"limit": limit}
    if sort_by is not None:
        allowed = {value for value, _ in TOP_CUSTOMER_SORT_OPTIONS}
        params["sortBy"] = sort_by if sort_by in allowed else "spent"
    return params


def _label_for(resource: str, key: str) -> str:
    for f in FILTER_FIELDS.get(resource, []):
        if f.key == key:
            return f.label
    return key


def _option_label(resource: str, key: str, value: Any) -> str:
    for f in FILTER_FIELDS.get(resource, []):
        if f.key == key and f.options:
            for opt_value, opt_label in f.options:
                if opt_value == value:
                    return opt_label
    return str(value)


def format_filter_summary(resource: str, filters: Optional[Mapping[str, Any]]) -> List[str]:
    """Chip labels for the active filters, e.g. ``["Category: Footwear"]``."""
    active = strip_filters(filters)
    if not active:
        return ["Filters: None"]
    return [f"{_label_for(resource, k)}: {_option_label(resource, k, v)}" for k, v in active.items()]


def format_number_param(value: Optional[float]) -> str:
    """Widget number -> query string value; 500.0 -> "500", empty -> ""."""
    if value is None:
        return ""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(number)
