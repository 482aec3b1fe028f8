from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd


PRODUCT_COLUMNS = ["id", "name", "category", "description", "price", "stock", "sellerName", "rating"]
SELLER_COLUMNS = [
    "id",
    "name",
    "description",
    "businessType",
    "rating",
    "totalSales",
    "productCount",
    "joinedDate",
    "email",
]
CUSTOMER_COLUMNS = [
    "id",
    "name",
    "email",
    "phone",
    "loyaltyTier",
    "totalOrders",
    "totalSpent",
    "registrationDate",
    "city",
    "country",
]

ENTITY_COLUMNS: Dict[str, List[str]] = {
    "products": PRODUCT_COLUMNS,
    "sellers": SELLER_COLUMNS,
    "customers": CUSTOMER_COLUMNS,
}


def _as_float(value: object) -> Optional[float]:
    if value is None:
        return None
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if pd.isna(out):
        return None
    return out


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    number = _as_float(value)
    if number is None:
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(number)).quantize(q, rounding=ROUND_HALF_UP))


def format_currency(value: object, decimals: int = 2) -> str:
    number = round_half_up(value, decimals)
    if number is None:
        return "N/A"
    return f"${number:,.{decimals}f}"


def format_amount(value: object) -> str:
    """Grouped dollars without forced decimals: 1234.5 -> $1,234.5"""
    number = _as_float(value)
    if number is None:
        return "N/A"
    if number.is_integer():
        return f"${number:,.0f}"
    return f"${number:,.2f}".rstrip("0").rstrip(".")


def format_rating(value: object) -> str:
    number = round_half_up(value, 1)
    return f"{number:.1f}" if number is not None else "N/A"


def parse_date(value: object) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    ts = pd.to_datetime(str(value), errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def format_date(value: object) -> str:
    d = parse_date(value)
    return d.strftime("%m/%d/%Y") if d else "N/A"


def joined_year(value: object) -> str:
    d = parse_date(value)
    return str(d.year) if d else "N/A"


def average_order(total_spent: object, total_orders: object) -> str:
    spent = _as_float(total_spent)
    orders = _as_float(total_orders)
    if spent is None or not orders:
        return "N/A"
    return format_currency(spent / orders)


# ---------- Cards ----------

def product_card(product: Mapping[str, Any]) -> Dict[str, str]:
    return {
        "title": str(product.get("name", "")),
        "badge": str(product.get("category", "")),
        "description": str(product.get("description", "") or ""),
        "price": format_currency(product.get("price")),
        "stock": f"Stock: {product.get('stock', 'N/A')}",
        "seller": f"Seller: {product.get('sellerName', 'N/A')}",
        "rating": f"★ {product.get('rating', 'N/A')}",
    }


def seller_card(seller: Mapping[str, Any]) -> Dict[str, str]:
    return {
        "title": str(seller.get("name", "")),
        "badge": f"★ {format_rating(seller.get('rating'))}",
        "description": str(seller.get("description", "") or ""),
        "business": str(seller.get("businessType", "")),
        "total_sales": format_amount(seller.get("totalSales")),
        "products": str(seller.get("productCount", "N/A")),
        "joined": joined_year(seller.get("joinedDate")),
        "contact": str(seller.get("email", "")),
    }


def customer_card(customer: Mapping[str, Any]) -> Dict[str, str]:
    city = customer.get("city") or ""
    country = customer.get("country") or ""
    return {
        "title": str(customer.get("name", "")),
        "badge": str(customer.get("loyaltyTier", "")),
        "email": str(customer.get("email", "")),
        "phone": str(customer.get("phone", "")),
        "total_orders": str(customer.get("totalOrders", "N/A")),
        "total_spent": format_amount(customer.get("totalSpent")),
        "avg_order": average_order(customer.get("totalSpent"), customer.get("totalOrders")),
        "registered": format_date(customer.get("registrationDate")),
        "address": ", ".join(part for part in (city, country) if part),
    }


CARD_BUILDERS = {
    "products": product_card,
    "sellers": seller_card,
    "customers": customer_card,
}


def build_cards(resource: str, entities: Iterable[Mapping[str, Any]]) -> List[Dict[str, str]]:
    builder = CARD_BUILDERS[resource]
    return [builder(e) for e in entities]


def empty_message(resource: str) -> str:
    return f"No {resource} found matching your criteria."


def count_label(resource: str, count: int) -> str:
    return f"{count} {resource} found"


# ---------- Ranked rows (Top N panels) ----------

def rank_rows(resource: str, entities: Sequence[Mapping[str, Any]], limit: Optional[int] = None, sort_by: str = "spent") -> List[Dict[str, Any]]:
    """Numbered rows in the order received; capped at ``limit``, never re-sorted."""
    rows = list(entities[:limit] if limit is not None else entities)
    out: List[Dict[str, Any]] = []
    for idx, e in enumerate(rows, start=1):
        if resource == "sellers":
            primary = f"★ {format_rating(e.get('rating'))}"
            secondary = format_amount(e.get("totalSales"))
            subtitle = e.get("businessType", "")
        else:
            spent = format_amount(e.get("totalSpent"))
            orders = f"{e.get('totalOrders', 0)} orders"
            primary, secondary = (spent, orders) if sort_by == "spent" else (orders, spent)
            subtitle = e.get("loyaltyTier", "")
        out.append(
            {
                "rank": idx,
                "name": e.get("name", ""),
                "subtitle": subtitle,
                "primary": primary,
                "secondary": secondary,
            }
        )
    return out


def recent_product_rows(products: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "name": p.get("name", ""),
            "category": p.get("category", ""),
            "price": f"${p.get('price', '')}",
            "rating": f"★ {p.get('rating', 'N/A')}",
        }
        for p in products
    ]


# ---------- Tables ----------

def entities_frame(resource: str, entities: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Tabular view of a listing, known columns first, for display and CSV export."""
    columns = ENTITY_COLUMNS.get(resource, [])
    df = pd.DataFrame(list(entities))
    if df.empty:
        return pd.DataFrame(columns=columns)
    ordered = [c for c in columns if c in df.columns] + [c for c in df.columns if c not in columns]
    return df[ordered]
