from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional

import pandas as pd


ALL_REGIONS = "All"
SORT_FIELDS = ("name", "region", "population", "homicide_rate")
SORT_ORDERS = ("asc", "desc")
STRING_SORT_FIELDS = {"name", "region"}

DEFAULT_SORT_FIELD = "homicide_rate"
DEFAULT_SORT_ORDER = "desc"


@dataclass(frozen=True)
class ListFilters:
    search_term: str = ""
    region: str = ALL_REGIONS
    sort_field: str = DEFAULT_SORT_FIELD
    sort_order: str = DEFAULT_SORT_ORDER


def normalize_filters(raw: Optional[dict]) -> ListFilters:
    raw = raw or {}

    search_term = raw.get("search_term") or ""
    if not isinstance(search_term, str):
        search_term = str(search_term)

    region = raw.get("region") or ALL_REGIONS
    region = str(region)

    sort_field = raw.get("sort_field") or DEFAULT_SORT_FIELD
    if sort_field not in SORT_FIELDS:
        sort_field = DEFAULT_SORT_FIELD

    sort_order = str(raw.get("sort_order") or DEFAULT_SORT_ORDER).lower()
    if sort_order not in SORT_ORDERS:
        sort_order = DEFAULT_SORT_ORDER

    return ListFilters(search_term=search_term, region=region, sort_field=sort_field, sort_order=sort_order)


def toggle_sort(filters: ListFilters, field: str) -> ListFilters:
    """Same field flips the order; a new field is selected descending."""
    if field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {field!r}")
    if filters.sort_field == field:
        order = "asc" if filters.sort_order == "desc" else "desc"
        return replace(filters, sort_order=order)
    return replace(filters, sort_field=field, sort_order="desc")


def _sort_key(series: pd.Series) -> pd.Series:
    if series.name in STRING_SORT_FIELDS:
        return series.astype(str).str.lower()
    return series


def apply_filters(df: pd.DataFrame, filters: ListFilters) -> pd.DataFrame:
    if df.empty:
        return df.copy()

    result = df
    if filters.search_term:
        needle = filters.search_term.lower()
        result = result[result["name"].astype(str).str.lower().str.contains(needle, regex=False, na=False)]

    if filters.region != ALL_REGIONS:
        result = result[result["region"] == filters.region]

    # Descending is the exact reverse of the stable ascending order, so flipping
    # the order always reverses the rows, ties included.
    result = result.sort_values(filters.sort_field, key=_sort_key, kind="mergesort")
    if filters.sort_order == "desc":
        result = result.iloc[::-1]
    return result.reset_index(drop=True)


def region_options(df: pd.DataFrame) -> List[str]:
    if df.empty or "region" not in df.columns:
        return [ALL_REGIONS]
    regions = sorted(str(r) for r in df["region"].dropna().unique())
    return [ALL_REGIONS] + regions
