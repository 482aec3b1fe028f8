from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def category_breakdown_chart(products: Iterable[Mapping[str, Any]]) -> alt.Chart:
    df = pd.DataFrame([{"category": p.get("category") or "Uncategorized"} for p in products])
    if df.empty:
        df = pd.DataFrame({"category": pd.Series(dtype=str)})
    counts = df.groupby("category").size().reset_index(name="products").sort_values("products", ascending=False)
    return (
        alt.Chart(counts)
        .mark_bar()
        .encode(
            x=alt.X("category:N", title="Category", sort="-y"),
            y=alt.Y("products:Q", title="Products", axis=alt.Axis(format="d")),
            color=alt.Color("category:N", legend=None),
            tooltip=["category", "products"],
        )
        .properties(height=220)
    )


def rating_distribution_chart(entities: Iterable[Mapping[str, Any]]) -> alt.Chart:
    ratings = pd.to_numeric(pd.Series([e.get("rating") for e in entities], dtype=object), errors="coerce").dropna()
    df = pd.DataFrame({"rating": ratings.astype(float)})
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("rating:Q", bin=alt.Bin(extent=[0, 5], step=0.5), title="Rating"),
            y=alt.Y("count():Q", title="Count"),
            tooltip=[alt.Tooltip("count():Q", title="Count")],
        )
        .properties(height=220)
    )
