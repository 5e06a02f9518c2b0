from __future__ import annotations

import pandas as pd
import pytest

from homicide.filters import ListFilters, apply_filters, normalize_filters, region_options, toggle_sort


@pytest.fixture
def frame() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"name": "United States", "code": "USA", "region": "Americas", "population": 331_000_000, "flag_url": "", "homicide_rate": 4.96},
            {"name": "brazil", "code": "BRA", "region": "Americas", "population": 212_000_000, "flag_url": "", "homicide_rate": 22.38},
            {"name": "Germany", "code": "DEU", "region": "Europe", "population": 83_000_000, "flag_url": "", "homicide_rate": 0.98},
            {"name": "United Kingdom", "code": "GBR", "region": "Europe", "population": 67_000_000, "flag_url": "", "homicide_rate": 0.98},
            {"name": "South Africa", "code": "ZAF", "region": "Africa", "population": 59_000_000, "flag_url": "", "homicide_rate": 41.87},
        ]
    )


def test_defaults_sort_by_rate_descending():
    f = normalize_filters({})
    assert f == ListFilters(search_term="", region="All", sort_field="homicide_rate", sort_order="desc")


def test_normalize_filters_falls_back_on_unknown_values():
    f = normalize_filters({"sort_field": "gdp", "sort_order": "sideways", "region": None, "search_term": None})
    assert f.sort_field == "homicide_rate"
    assert f.sort_order == "desc"
    assert f.region == "All"
    assert f.search_term == ""


def test_toggle_same_field_flips_order():
    f = ListFilters(sort_field="name", sort_order="desc")
    assert toggle_sort(f, "name").sort_order == "asc"
    assert toggle_sort(toggle_sort(f, "name"), "name").sort_order == "desc"


def test_toggle_new_field_resets_to_descending():
    f = ListFilters(sort_field="name", sort_order="asc")
    toggled = toggle_sort(f, "population")
    assert toggled.sort_field == "population"
    assert toggled.sort_order == "desc"


def test_toggle_rejects_unknown_field():
    with pytest.raises(ValueError):
        toggle_sort(ListFilters(), "flag_url")


def test_search_is_case_insensitive_substring(frame):
    result = apply_filters(frame, ListFilters(search_term="UNITED"))
    assert sorted(result["code"]) == ["GBR", "USA"]
    assert result["name"].str.lower().str.contains("united").all()


def test_search_is_literal_not_regex(frame):
    assert apply_filters(frame, ListFilters(search_term="(")).empty
    assert apply_filters(frame, ListFilters(search_term=".")).empty


def test_region_filter_and_all_passthrough(frame):
    europe = apply_filters(frame, ListFilters(region="Europe"))
    assert set(europe["region"]) == {"Europe"}
    assert len(apply_filters(frame, ListFilters(region="All"))) == len(frame)


def test_combined_filters(frame):
    result = apply_filters(frame, ListFilters(search_term="united", region="Europe"))
    assert result["code"].tolist() == ["GBR"]


def test_string_sort_ignores_case(frame):
    result = apply_filters(frame, ListFilters(sort_field="name", sort_order="asc"))
    assert result["name"].tolist() == ["brazil", "Germany", "South Africa", "United Kingdom", "United States"]


def test_numeric_sort_descending(frame):
    result = apply_filters(frame, ListFilters(sort_field="population", sort_order="desc"))
    assert result["code"].tolist() == ["USA", "BRA", "DEU", "GBR", "ZAF"]


@pytest.mark.parametrize("field", ["name", "region", "population", "homicide_rate"])
def test_toggling_reverses_the_list(frame, field):
    first = toggle_sort(ListFilters(sort_field="name" if field != "name" else "region"), field)
    second = toggle_sort(first, field)

    a = apply_filters(frame, first)["code"].tolist()
    b = apply_filters(frame, second)["code"].tolist()
    assert b == list(reversed(a))


def test_filtering_does_not_mutate_input(frame):
    before = frame.copy()
    apply_filters(frame, ListFilters(search_term="a", region="Europe", sort_field="name"))
    pd.testing.assert_frame_equal(frame, before)


def test_region_options(frame):
    assert region_options(frame) == ["All", "Africa", "Americas", "Europe"]
    assert region_options(pd.DataFrame()) == ["All"]
