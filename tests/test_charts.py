from conftest import PRODUCTS
from shopdash.charts import category_breakdown_chart, rating_distribution_chart, to_vega_spec


def test_category_breakdown_counts_products():
    spec = to_vega_spec(category_breakdown_chart(PRODUCTS))
    assert spec["mark"]["type"] == "bar"
    datasets = list(spec["datasets"].values())
    counts = {row["category"]: row["products"] for row in datasets[0]}
    assert counts == {"Electronics": 2, "Footwear": 2, "Clothing": 2}


def test_category_breakdown_with_no_products():
    spec = to_vega_spec(category_breakdown_chart([]))
    assert list(spec["datasets"].values())[0] == []


def test_rating_distribution_skips_unrated():
    spec = to_vega_spec(rating_distribution_chart(PRODUCTS + [{"name": "unrated"}]))
    rows = list(spec["datasets"].values())[0]
    assert len(rows) == len(PRODUCTS)
    assert spec["encoding"]["x"]["bin"]["step"] == 0.5
