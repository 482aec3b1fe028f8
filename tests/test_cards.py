import asyncio

from conftest import CUSTOMERS, PRODUCTS, SELLERS
from shopdash.cards import (
    PRODUCT_COLUMNS,
    build_cards,
    count_label,
    customer_card,
    empty_message,
    entities_frame,
    format_amount,
    format_currency,
    product_card,
    rank_rows,
    recent_product_rows,
    seller_card,
)


def test_product_card():
    card = product_card(PRODUCTS[0])
    assert card["title"] == "Laptop"
    assert card["badge"] == "Electronics"
    assert card["price"] == "$999.50"
    assert card["stock"] == "Stock: 4"
    assert card["seller"] == "Seller: TechHub"
    assert card["rating"] == "★ 4.5"


def test_seller_card():
    card = seller_card(SELLERS[1])
    assert card["badge"] == "★ 4.2"
    assert card["total_sales"] == "$82,000.5"
    assert card["joined"] == "2019"
    assert card["products"] == "12"


def test_customer_card():
    card = customer_card(CUSTOMERS[0])
    assert card["badge"] == "Gold"
    assert card["total_spent"] == "$5,000"
    assert card["avg_order"] == "$250.00"
    assert card["registered"] == "01/15/2020"
    assert card["address"] == "London, UK"


def test_customer_without_orders_has_no_average():
    assert customer_card(CUSTOMERS[4])["avg_order"] == "N/A"


def test_cards_tolerate_missing_fields():
    card = seller_card({"name": "Bare"})
    assert card["joined"] == "N/A"
    assert card["total_sales"] == "N/A"
    assert product_card({})["price"] == "N/A"


def test_build_cards_preserves_order():
    assert [c["title"] for c in build_cards("customers", CUSTOMERS)] == [c["name"] for c in CUSTOMERS]


def test_currency_formatting():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(0.125) == "$0.13"
    assert format_amount(150000) == "$150,000"
    assert format_amount("oops") == "N/A"


def test_amount_drops_trailing_point_when_cents_round_to_zero():
    assert format_amount(1000.001) == "$1,000"
    assert format_amount(82000.5) == "$82,000.5"
    assert seller_card({"name": "x", "totalSales": 2500.004})["total_sales"] == "$2,500"


def test_empty_and_count_labels():
    assert empty_message("products") == "No products found matching your criteria."
    assert count_label("sellers", 3) == "3 sellers found"


def test_top_customers_capped_and_not_resorted(fake_api, client):
    response = asyncio.run(client.get_top_customers({"limit": 3, "sortBy": "spent"}))
    assert len(response.items()) == 5
    rows = rank_rows("customers", response.items(), 3, sort_by="spent")
    assert [r["name"] for r in rows] == ["Ada", "Grace", "Linus"]
    assert [r["rank"] for r in rows] == [1, 2, 3]
    assert rows[0]["primary"] == "$5,000"
    assert rows[0]["secondary"] == "20 orders"


def test_rank_rows_by_orders_swaps_columns():
    rows = rank_rows("customers", CUSTOMERS, 1, sort_by="orders")
    assert rows[0]["primary"] == "20 orders"
    assert rows[0]["secondary"] == "$5,000"


def test_rank_rows_sellers():
    rows = rank_rows("sellers", SELLERS)
    assert len(rows) == 3
    assert rows[0] == {"rank": 1, "name": "TechHub", "subtitle": "Retail", "primary": "★ 4.8", "secondary": "$150,000"}


def test_recent_product_rows():
    rows = recent_product_rows(PRODUCTS[:2])
    assert rows[1] == {"name": "Sneakers", "category": "Footwear", "price": "$79.99", "rating": "★ 4.0"}


def test_entities_frame_orders_known_columns_first():
    df = entities_frame("products", [dict(PRODUCTS[0], warehouse="W1")])
    assert list(df.columns) == PRODUCT_COLUMNS + ["warehouse"]
    assert df.loc[0, "name"] == "Laptop"


def test_entities_frame_empty_has_headers():
    df = entities_frame("products", [])
    assert df.empty
    assert list(df.columns) == PRODUCT_COLUMNS
