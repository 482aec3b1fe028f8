import asyncio
import html
import logging
import os
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Mapping, Optional

import pandas as pd
import streamlit as st

from shopdash.cards import (
    build_cards,
    count_label,
    empty_message,
    entities_frame,
    rank_rows,
    recent_product_rows,
)
from shopdash.charts import category_breakdown_chart, rating_distribution_chart
from shopdash.client import ApiClient
from shopdash.config import load_config
from shopdash.controller import (
    Failure,
    ListController,
    Loading,
    Outcome,
    Success,
    customers_controller,
    products_controller,
    sellers_controller,
    top_customers_controller,
    top_sellers_controller,
)
from shopdash.errors import RequestError
from shopdash.filters import (
    FILTER_FIELDS,
    TOP_CUSTOMER_SORT_OPTIONS,
    TOP_LIMIT_OPTIONS,
    clear_filters,
    format_filter_summary,
    format_number_param,
    normalize_top_params,
    strip_filters,
    update_filter,
)
from shopdash.metrics_dashboard import (
    TOP_PERFORMERS_LIMIT,
    load_quick_stats,
    load_recent_products,
    load_top_performers,
)
from shopdash.probe import API_CONNECTED, API_ERROR, check_api_status, run_probe

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("shopdash.app")

VIEWS = ["Dashboard", "Products", "Sellers", "Customers"]
VIEW_ICONS = {"Dashboard": "📊", "Products": "📦", "Sellers": "🏪", "Customers": "👥"}


def run(coro):
    return asyncio.run(coro)


@st.cache_resource
def get_client() -> ApiClient:
    return ApiClient(load_config())


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.85rem;color: #1e40af;background: #dbeafe;border-radius: 10px;padding: 2px 8px;}
        .card-muted {color: #6b7280;font-size: 0.85rem;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{html.escape(title)}</div>
            <div class="card-actions">{html.escape(actions or "")}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str, chips: List[str], export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    chip_html = "".join(f"<span class='chip'>{html.escape(c)}</span>" for c in chips)
    st.markdown(f"<div class='chip-row'>{chip_html}</div>", unsafe_allow_html=True)


def render_outcome(outcome: Outcome, on_retry: Optional[Callable[[], None]] = None, retry_key: str = "retry") -> bool:
    """Spinner / error + retry for non-success outcomes. Returns True on success."""
    if isinstance(outcome, Loading):
        st.info("Loading…")
        return False
    if isinstance(outcome, Failure):
        st.error(f"**Error occurred**  \n{outcome.message}")
        if on_retry is not None and st.button("Try again", key=retry_key):
            on_retry()
            st.rerun()
        return False
    return True


# ---------- View state ----------
def activate_view(view: str):
    """View state lives only while its view is active."""
    if st.session_state.get("active_view") == view:
        return
    for key in [k for k in st.session_state.keys() if str(k).startswith("view:")]:
        del st.session_state[key]
    st.session_state["active_view"] = view
    logger.debug("activated view %s", view)


def view_state(key: str, factory: Callable[[], Any]) -> Any:
    state_key = f"view:{key}"
    if state_key not in st.session_state:
        st.session_state[state_key] = factory()
    return st.session_state[state_key]


def view_controller(key: str, factory: Callable[[ApiClient], ListController]) -> ListController:
    def _create() -> ListController:
        controller = factory(get_client())
        with st.spinner("Loading…"):
            run(controller.refresh())
        return controller

    return view_state(key, _create)


# ---------- Filter panels ----------
def _widget_key(resource: str, key: str) -> str:
    return f"view:{resource}:field:{key}"


def _clear_panel(resource: str):
    for f in FILTER_FIELDS[resource]:
        st.session_state.pop(_widget_key(resource, f.key), None)
    st.session_state[f"view:{resource}:cleared"] = True


def render_filter_panel(resource: str, controller: ListController):
    if st.session_state.pop(f"view:{resource}:cleared", False):
        with st.spinner("Loading…"):
            run(controller.set_filters(clear_filters()))
    current = controller.filters
    edited: Dict[str, Any] = dict(current)
    with card("Filters"):
        for f in FILTER_FIELDS[resource]:
            key = _widget_key(resource, f.key)
            if f.kind == "select":
                values = [v for v, _ in f.options]
                labels = dict(f.options)
                selected = current.get(f.key) or ""
                value = st.selectbox(
                    f.label,
                    options=values,
                    index=values.index(selected) if selected in values else 0,
                    format_func=lambda v, labels=labels: labels.get(v, v),
                    key=key,
                )
            else:
                raw = current.get(f.key)
                try:
                    number = float(raw) if raw not in (None, "") else None
                except (TypeError, ValueError):
                    number = None
                value = format_number_param(
                    st.number_input(
                        f.label,
                        min_value=f.min_value,
                        max_value=f.max_value,
                        step=f.step,
                        value=number,
                        placeholder=f.placeholder,
                        key=key,
                    )
                )
            edited = update_filter(edited, f.key, value)
        st.button("Clear Filters", key=f"view:{resource}:clear", on_click=_clear_panel, args=(resource,), use_container_width=True)

    if strip_filters(edited) != strip_filters(current):
        with st.spinner("Loading…"):
            run(controller.set_filters(edited))


def render_top_sellers_panel():
    controller = view_controller("sellers:top", top_sellers_controller)
    with card("Top Sellers"):
        limit = st.selectbox("Limit", TOP_LIMIT_OPTIONS, index=TOP_LIMIT_OPTIONS.index(controller.filters["limit"]), key="view:sellers:top:limit")
        params = normalize_top_params(limit)
        if params != controller.filters:
            run(controller.set_filters(params))
        if not render_outcome(controller.outcome, on_retry=lambda: run(controller.retry()), retry_key="view:sellers:top:retry"):
            return
        render_ranked_rows(rank_rows("sellers", controller.items, params["limit"]))


def render_top_customers_panel():
    controller = view_controller("customers:top", top_customers_controller)
    with card("Top Customers"):
        cols = st.columns(2)
        limit = cols[0].selectbox("Limit", TOP_LIMIT_OPTIONS, index=TOP_LIMIT_OPTIONS.index(controller.filters["limit"]), key="view:customers:top:limit")
        sort_values = [v for v, _ in TOP_CUSTOMER_SORT_OPTIONS]
        sort_by = cols[1].selectbox(
            "Sort By",
            sort_values,
            format_func=lambda v: dict(TOP_CUSTOMER_SORT_OPTIONS)[v],
            key="view:customers:top:sort",
        )
        params = normalize_top_params(limit, sort_by)
        if params != controller.filters:
            run(controller.set_filters(params))
        if not render_outcome(controller.outcome, on_retry=lambda: run(controller.retry()), retry_key="view:customers:top:retry"):
            return
        render_ranked_rows(rank_rows("customers", controller.items, params["limit"], sort_by=params["sortBy"]))


def render_ranked_rows(rows: List[Dict[str, Any]]):
    for row in rows:
        left, right = st.columns([3, 2])
        left.markdown(f"**{row['rank']}. {row['name']}**  \n<span class='card-muted'>{html.escape(str(row['subtitle']))}</span>", unsafe_allow_html=True)
        right.markdown(f"**{row['primary']}**  \n<span class='card-muted'>{row['secondary']}</span>", unsafe_allow_html=True)


# ---------- Cards ----------
def render_product_card(c: Mapping[str, str]):
    with card(c["title"], c["badge"]):
        st.caption(c["description"])
        cols = st.columns(2)
        cols[0].markdown(f"### {c['price']}")
        cols[1].write(c["stock"])
        cols = st.columns(2)
        cols[0].caption(c["seller"])
        cols[1].write(c["rating"])


def render_seller_card(c: Mapping[str, str]):
    with card(c["title"], c["badge"]):
        st.caption(c["description"])
        cols = st.columns(2)
        cols[0].metric("Business", c["business"])
        cols[1].metric("Total Sales", c["total_sales"])
        cols = st.columns(2)
        cols[0].metric("Products", c["products"])
        cols[1].metric("Joined", c["joined"])
        st.caption(f"Contact: {c['contact']}")


def render_customer_card(c: Mapping[str, str]):
    with card(c["title"], c["badge"]):
        cols = st.columns(2)
        cols[0].caption(f"Email: {c['email']}")
        cols[1].caption(f"Phone: {c['phone']}")
        cols = st.columns(2)
        cols[0].metric("Total Orders", c["total_orders"])
        cols[1].metric("Total Spent", c["total_spent"])
        cols = st.columns(2)
        cols[0].metric("Avg Order", c["avg_order"])
        cols[1].metric("Registered", c["registered"])
        st.caption(f"Address: {c['address']}")


CARD_RENDERERS = {
    "products": render_product_card,
    "sellers": render_seller_card,
    "customers": render_customer_card,
}


def render_cards(resource: str, items, per_row: int):
    if not items:
        with card(""):
            st.info(empty_message(resource))
        return
    cards = build_cards(resource, items)
    for start in range(0, len(cards), per_row):
        cols = st.columns(per_row)
        for col, c in zip(cols, cards[start : start + per_row]):
            with col:
                CARD_RENDERERS[resource](c)


LOOKUPS = {
    "products": lambda client, entity_id: client.get_product(entity_id),
    "sellers": lambda client, entity_id: client.get_seller(entity_id),
    "customers": lambda client, entity_id: client.get_customer(entity_id),
}


def render_lookup(resource: str):
    with st.expander(f"Look up {resource[:-1]} by ID"):
        entity_id = st.text_input("ID", key=f"view:{resource}:lookup:id").strip()
        if st.button("Fetch", key=f"view:{resource}:lookup:go") and entity_id:
            try:
                response = run(LOOKUPS[resource](get_client(), entity_id))
            except RequestError as exc:
                st.error(exc.server_message or f"Failed to fetch {resource[:-1]} {entity_id}")
                return
            found = response.items()
            if not found:
                st.info(f"No {resource[:-1]} with ID {entity_id}.")
                return
            CARD_RENDERERS[resource](build_cards(resource, found)[0])


# ----- Page renderers -----

def render_listing_page(resource: str, title: str, factory: Callable[[ApiClient], ListController], side_panel: Optional[Callable[[], None]] = None, per_row: int = 2):
    controller = view_controller(resource, factory)
    header = st.container()

    left, right = st.columns([1, 3])
    with left:
        render_filter_panel(resource, controller)
        if side_panel is not None:
            side_panel()
    with header:
        # Filled in after the panel so it reflects the filters just applied.
        export_df = entities_frame(resource, controller.items) if isinstance(controller.outcome, Success) else None
        render_page_header(title, f"Home / {title}", format_filter_summary(resource, controller.filters), export_df=export_df, export_name=f"{resource}.csv")
    with right:
        if not render_outcome(controller.outcome, on_retry=lambda: run(controller.retry()), retry_key=f"view:{resource}:retry"):
            return
        st.markdown(f"**{count_label(resource, controller.count)}**")
        render_lookup(resource)
        render_cards(resource, controller.items, per_row)
        return controller


def render_products_page():
    controller = render_listing_page("products", "Products", products_controller, per_row=3)
    if controller is None or not controller.items:
        return
    chart_cols = st.columns(2)
    with chart_cols[0]:
        with card("Category breakdown"):
            st.altair_chart(category_breakdown_chart(controller.items), use_container_width=True)
    with chart_cols[1]:
        with card("Rating distribution"):
            st.altair_chart(rating_distribution_chart(controller.items), use_container_width=True)


def render_sellers_page():
    render_listing_page("sellers", "Sellers", sellers_controller, side_panel=render_top_sellers_panel)


def render_customers_page():
    render_listing_page("customers", "Customers", customers_controller, side_panel=render_top_customers_panel)


def render_quick_stats():
    client = get_client()
    outcome = view_state("dashboard:stats", lambda: run(load_quick_stats(client)))
    if not render_outcome(outcome, on_retry=lambda: st.session_state.pop("view:dashboard:stats", None), retry_key="view:dashboard:stats:retry"):
        return
    stats = outcome.items[0]
    cols = st.columns(4)
    cols[0].metric("Total Products", stats.total_products, help="Active listings")
    cols[1].metric("Total Sellers", stats.total_sellers, help="Active merchants")
    cols[2].metric("Total Customers", stats.total_customers, help="Registered users")
    cols[3].metric("Avg Rating", f"{stats.average_product_rating:.1f}", help="Product rating")


def render_recent_products():
    client = get_client()
    outcome = view_state("dashboard:recent", lambda: run(load_recent_products(client)))
    with card("Recent Products"):
        if not render_outcome(outcome, on_retry=lambda: st.session_state.pop("view:dashboard:recent", None), retry_key="view:dashboard:recent:retry"):
            return
        for row in recent_product_rows(outcome.items):
            left, right = st.columns([3, 2])
            left.markdown(f"**{row['name']}**  \n<span class='card-muted'>{html.escape(str(row['category']))}</span>", unsafe_allow_html=True)
            right.markdown(f"**{row['price']}**  \n{row['rating']}")


def render_top_performers():
    client = get_client()
    top = view_state("dashboard:top", lambda: run(load_top_performers(client)))

    def retry_top():
        st.session_state.pop("view:dashboard:top", None)

    cols = st.columns(2)
    with cols[0]:
        with card("Top Sellers"):
            if render_outcome(top.sellers, on_retry=retry_top, retry_key="view:dashboard:top:sellers:retry"):
                render_ranked_rows(rank_rows("sellers", top.sellers.items, TOP_PERFORMERS_LIMIT))
    with cols[1]:
        with card("Top Customers"):
            if render_outcome(top.customers, on_retry=retry_top, retry_key="view:dashboard:top:customers:retry"):
                render_ranked_rows(rank_rows("customers", top.customers.items, TOP_PERFORMERS_LIMIT, sort_by="spent"))


def render_api_tester():
    with card("API Connection Tester"):
        if st.button("Test All Endpoints", key="view:dashboard:probe:run", use_container_width=True):
            with st.spinner("Testing…"):
                st.session_state["view:dashboard:probe"] = run(run_probe(get_client()))
        report = st.session_state.get("view:dashboard:probe")
        if report is None:
            return
        st.markdown("**Test Results:**")
        for result in report.results:
            left, right = st.columns([3, 2])
            left.write(result.name)
            right.write("✓ Success" if result.success else f"✗ Failed: {result.error}")
        if report.any_success:
            st.success("API is working! You can now browse the different sections.")


def render_dashboard_page():
    render_page_header("Dashboard Overview", "Home / Dashboard", ["Welcome to your e-commerce analytics dashboard"])
    render_quick_stats()
    left, right = st.columns([1, 2])
    with left:
        render_recent_products()
        render_api_tester()
    with right:
        render_top_performers()


# ---------- UI setup ----------
st.set_page_config(page_title="E-Commerce Dashboard", layout="wide")
inject_base_styles()

if "api_status" not in st.session_state:
    st.session_state["api_status"] = run(check_api_status(get_client()))
api_status = st.session_state["api_status"]

header_cols = st.columns([6, 2])
header_cols[0].title("E-Commerce Dashboard")
status_label = {API_CONNECTED: ":green[Connected]", API_ERROR: ":red[Error]"}.get(api_status, ":orange[Checking...]")
header_cols[1].markdown(f"API Status: {status_label}")

with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio(
        "Navigate",
        VIEWS,
        index=0,
        format_func=lambda v: f"{VIEW_ICONS[v]} {v}",
        label_visibility="collapsed",
    )
    st.markdown("---")
    if st.button("Re-check API", use_container_width=True):
        st.session_state["api_status"] = run(check_api_status(get_client()))
        st.rerun()

if api_status == API_ERROR:
    st.warning(
        f"**API Connection Issue**  \nUnable to connect to the API at {get_client().base_url}. "
        "Please ensure the API server is running."
    )

activate_view(nav_choice)

if nav_choice == "Dashboard":
    render_dashboard_page()
elif nav_choice == "Products":
    render_products_page()
elif nav_choice == "Sellers":
    render_sellers_page()
else:
    render_customers_page()
