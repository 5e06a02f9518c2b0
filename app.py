import logging
from contextlib import contextmanager
from typing import Optional

import pandas as pd
import streamlit as st

from homicide.colors import RateColorScale
from homicide.config import get_settings
from homicide.data import YEARS, FetchError, YearDataset, load_country_detail
from homicide.filters import ALL_REGIONS, SORT_FIELDS, ListFilters, normalize_filters, region_options, toggle_sort
from homicide.logs import configure_logging
from homicide.routing import LIST_PATH, country_path, parse_route
from homicide.view_detail import compute_detail_view
from homicide.view_list import compute_list_view

settings = get_settings()
configure_logging(level=settings.log_level, json_logs=settings.log_json, force=False)
logger = logging.getLogger(__name__)

SORT_LABELS = {
    "name": "Country",
    "region": "Region",
    "population": "Population",
    "homicide_rate": "Homicide Rate",
}
# Reset when leaving the list view; the selected year survives navigation.
LIST_STATE_KEYS = ("search_term", "region", "sort")


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
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .rate-badge {display: inline-block;font-weight: 700;padding: 10px 20px;border-radius: 8px;font-size: 1.5rem;}
        .no-data {border: 2px dashed #cbd5e1;border-radius: 8px;padding: 24px;text-align: center;color: #475569;}
        .muted {color: #64748b;font-style: italic;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container(border=True)
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    with container:
        yield container


def render_page_header(title: str, breadcrumb: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
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


def render_error_panel(title: str, message: str, action_label: str, key: str) -> bool:
    with card(title):
        st.error(message)
        return st.button(action_label, key=key)


# ---------- Routing ----------
def current_path() -> str:
    return st.query_params.get("path", LIST_PATH)


def navigate(path: str):
    if parse_route(path).view == "country":
        for key in LIST_STATE_KEYS:
            st.session_state.pop(key, None)
    # A fresh table key drops the row selection that triggered navigation.
    st.session_state["table_nonce"] = st.session_state.get("table_nonce", 0) + 1
    st.query_params["path"] = path
    st.rerun()


# ---------- Session ----------
def init_session():
    if "selected_year" not in st.session_state:
        st.session_state["selected_year"] = settings.default_year if settings.default_year in YEARS else YEARS[0]
    if "dataset" not in st.session_state:
        st.session_state["dataset"] = YearDataset()
    if "sort" not in st.session_state:
        st.session_state["sort"] = ListFilters()


# ---------- Views ----------
def _on_sort_click(field: str):
    st.session_state["sort"] = toggle_sort(st.session_state["sort"], field)


def render_sort_controls() -> ListFilters:
    current: ListFilters = st.session_state["sort"]
    cols = st.columns(len(SORT_FIELDS))
    for col, field in zip(cols, SORT_FIELDS):
        arrow = ""
        if current.sort_field == field:
            arrow = " ▼" if current.sort_order == "desc" else " ▲"
        col.button(
            f"{SORT_LABELS[field]}{arrow}",
            key=f"sort_{field}",
            on_click=_on_sort_click,
            args=(field,),
            width="stretch",
        )
    return current


def render_list_view():
    inject_base_styles()
    st.title("Global Homicide Rate Dashboard")
    st.caption("Intentional homicides per 100,000 people (World Bank data)")

    dataset: YearDataset = st.session_state["dataset"]
    year = st.selectbox("Year", YEARS, index=YEARS.index(st.session_state["selected_year"]))
    st.session_state["selected_year"] = year

    try:
        with st.spinner("Loading homicide data... Fetching data from World Bank & REST Countries APIs"):
            df = dataset.ensure(year)
    except FetchError as exc:
        if render_error_panel("Error Loading Data", str(exc), "Retry", key="retry_list"):
            dataset.invalidate()
            st.rerun()
        return

    regions = region_options(df)
    if st.session_state.get("region") not in regions:
        st.session_state["region"] = ALL_REGIONS

    c1, c2, c3 = st.columns([5, 3, 2])
    search_term = c1.text_input("Search countries...", key="search_term")
    region = c2.selectbox("Region", regions, key="region")

    sort = render_sort_controls()
    filters = normalize_filters(
        {"search_term": search_term, "region": region, "sort_field": sort.sort_field, "sort_order": sort.sort_order}
    )
    payload = compute_list_view(filters, df, year=year)
    c3.markdown(f"Showing **{payload['shown']}** of **{payload['total']}** countries")

    rows = payload["rows"]
    table = pd.DataFrame(rows, columns=["rank", "name", "region", "population", "homicide_rate", "code", "color", "text_color"])
    render_page_header(
        f"Homicide rates, {year}",
        "Home / Countries",
        export_df=table[["rank", "name", "code", "region", "population", "homicide_rate"]],
        export_name=f"homicide_rates_{year}.csv",
    )

    if table.empty:
        with card("No countries found"):
            st.info("Try adjusting your search term or filters.")
        return

    display = table[["rank", "name", "region", "population", "homicide_rate"]].rename(
        columns={"rank": "Rank", "name": "Country", "region": "Region", "population": "Population", "homicide_rate": "Homicide Rate"}
    )
    scale = RateColorScale(domain_max=payload["max_rate"])
    rate_css = [scale.cell_style(r["homicide_rate"]) for r in rows]
    styler = (
        display.style.apply(lambda _: rate_css, subset=["Homicide Rate"], axis=0)
        .format({"Population": "{:,}", "Homicide Rate": "{:.2f}"})
    )
    event = st.dataframe(
        styler,
        hide_index=True,
        width="stretch",
        on_select="rerun",
        selection_mode="single-row",
        key=f"country_table_{st.session_state.get('table_nonce', 0)}",
    )
    selected = event.selection.rows if event is not None else []
    if selected:
        navigate(country_path(rows[selected[0]]["code"]))

    if payload["chart"] is not None:
        with card("Highest rates in view"):
            st.vega_lite_chart(payload["chart"], width="stretch")

    st.caption(
        "Color intensity shows homicide rate (green = low, red = high). Select different years to view "
        "historical data. Select any row to view country details. Countries with population < 1M excluded "
        "for clarity. Data sources: World Bank & REST Countries API."
    )


def render_detail_view(code: str):
    inject_base_styles()
    year = st.session_state["selected_year"]
    if st.button("← Back to Dashboard", key="back_top"):
        navigate(LIST_PATH)

    try:
        with st.spinner("Loading country details..."):
            detail = load_country_detail(code, year)
    except FetchError as exc:
        if render_error_panel("Error Loading Country", str(exc), "Back to Dashboard", key="back_error"):
            navigate(LIST_PATH)
        return

    payload = compute_detail_view(detail, year=year, domain_max=settings.detail_max_rate)
    country = payload["country"]

    if country["flag_url"]:
        st.image(country["flag_url"], width="stretch")
    st.title(country["common_name"])
    st.subheader(country["official_name"])

    c1, c2 = st.columns(2)
    with c1:
        with card("Region"):
            st.markdown(f"### {country['region'] or 'N/A'}")
        with card("Population"):
            st.markdown(f"### {country['population']:,}")
    with c2:
        with card("Subregion"):
            if country["subregion"]:
                st.markdown(f"### {country['subregion']}")
            else:
                st.markdown("<span class='muted'>Not available</span>", unsafe_allow_html=True)
        with card("Capital City"):
            capitals = country["capitals"]
            if not capitals or capitals[0] == "N/A":
                st.markdown("<span class='muted'>Not available</span>", unsafe_allow_html=True)
            else:
                st.markdown(f"### {', '.join(capitals)}")

    with card(f"Homicide Rate ({year})"):
        if payload["has_data"]:
            st.markdown(
                f"<div class='rate-badge' style='background-color: {payload['color']}; color: {payload['text_color']};'>"
                f"{country['homicide_rate']:.2f} per 100,000 people</div>",
                unsafe_allow_html=True,
            )
        else:
            st.markdown(
                f"<div class='no-data'><b>No homicide data available</b><br/>for {year}</div>",
                unsafe_allow_html=True,
            )

    with card("ISO Country Code"):
        st.code(country["code"], language=None)


# ---------- UI setup ----------
st.set_page_config(page_title="Global Homicide Rate Dashboard", layout="wide")
init_session()

route = parse_route(current_path())
if route.view == "country":
    render_detail_view(route.code)
else:
    render_list_view()
