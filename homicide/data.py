from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import requests

from homicide.config import get_settings


logger = logging.getLogger(__name__)

INDICATOR_CODE = "VC.IHR.PSRC.P5"
YEARS = tuple(str(y) for y in range(2022, 2009, -1))
POPULATION_THRESHOLD = 1_000_000
NOT_AVAILABLE = "N/A"

LIST_FIELDS = "name,cca3,region,population,flags"
DETAIL_FIELDS = "name,cca3,region,subregion,population,capital,flags"
LIST_PER_PAGE = 300
DETAIL_PER_PAGE = 10

RECORD_COLUMNS = ["name", "code", "region", "population", "flag_url", "homicide_rate"]

LIST_ERROR_MESSAGE = "Failed to fetch data"
DETAIL_ERROR_MESSAGE = "Failed to fetch country details"


class FetchError(Exception):
    """Network or parsing failure on either upstream source."""


@dataclass(frozen=True)
class CountryDetail:
    official_name: str
    common_name: str
    flag_url: Optional[str]
    region: Optional[str]
    subregion: Optional[str]
    population: int
    capitals: List[str] = field(default_factory=lambda: [NOT_AVAILABLE])
    code: str = ""
    homicide_rate: Optional[float] = None


def normalize_year(year: object) -> str:
    s = str(year).strip() if year is not None else ""
    if s not in YEARS:
        raise ValueError(f"Unsupported year {year!r}; expected one of {', '.join(YEARS)}")
    return s


# ---------- HTTP ----------

def _get_json(url: str, params: Optional[Dict[str, Any]] = None) -> Any:
    settings = get_settings()
    try:
        resp = requests.get(url, params=params, timeout=settings.http_timeout)
        resp.raise_for_status()
        return resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise FetchError(f"GET {url} failed: {exc}") from exc


def fetch_countries() -> List[Dict[str, Any]]:
    settings = get_settings()
    data = _get_json(f"{settings.countries_api_base}/all", params={"fields": LIST_FIELDS})
    if not isinstance(data, list):
        raise FetchError("Countries API returned an unexpected payload")
    return data


def fetch_country(code: str) -> Dict[str, Any]:
    settings = get_settings()
    data = _get_json(f"{settings.countries_api_base}/alpha/{code}", params={"fields": DETAIL_FIELDS})
    # The alpha endpoint answers with a bare object or a one-element list.
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        raise FetchError(f"Countries API returned no entry for {code!r}")
    return data


def fetch_indicator(year: str, code: str = "all") -> Any:
    settings = get_settings()
    per_page = LIST_PER_PAGE if code == "all" else DETAIL_PER_PAGE
    return _get_json(
        f"{settings.worldbank_api_base}/country/{code}/indicator/{INDICATOR_CODE}",
        params={"format": "json", "per_page": per_page, "date": year},
    )


# ---------- Pipeline ----------

def indicator_observations(payload: Any) -> List[Dict[str, Any]]:
    """Second element of the World Bank envelope, or [] for error/empty envelopes."""
    if not isinstance(payload, list) or len(payload) < 2:
        return []
    observations = payload[1]
    if not isinstance(observations, list):
        return []
    return [o for o in observations if isinstance(o, dict)]


def build_rate_lookup(payload: Any) -> Dict[str, float]:
    lookup: Dict[str, float] = {}
    for item in indicator_observations(payload):
        value = item.get("value")
        code = item.get("countryiso3code")
        if value is None or not code:
            continue
        lookup[code] = float(value)
    return lookup


def _flag_url(flags: Any) -> Optional[str]:
    if not isinstance(flags, dict):
        return None
    return flags.get("svg") or flags.get("png")


def _common_name(entry: Dict[str, Any]) -> str:
    name = entry.get("name")
    if isinstance(name, dict):
        return str(name.get("common") or "")
    return str(name or "")


def merge_countries(
    countries: List[Dict[str, Any]],
    indicator_payload: Any,
    population_threshold: int = POPULATION_THRESHOLD,
) -> pd.DataFrame:
    """Join country metadata with the year's homicide rates.

    Keeps entries that declare a region and whose population exceeds the
    threshold, then drops every code without a non-null indicator value.
    Rows keep the metadata order.
    """
    lookup = build_rate_lookup(indicator_payload)

    records = []
    seen = set()
    for c in countries:
        population = c.get("population") or 0
        if not c.get("region") or population <= population_threshold:
            continue
        code = c.get("cca3")
        if not code or code in seen:
            continue
        seen.add(code)
        records.append(
            {
                "name": _common_name(c),
                "code": code,
                "region": c["region"],
                "population": int(population),
                "flag_url": _flag_url(c.get("flags")),
                "homicide_rate": lookup.get(code, 0.0),
            }
        )

    merged = pd.DataFrame.from_records(records, columns=RECORD_COLUMNS)
    merged = merged[merged["code"].isin(lookup.keys())].reset_index(drop=True)
    merged["population"] = merged["population"].astype("int64")
    merged["homicide_rate"] = merged["homicide_rate"].astype(float)
    return merged


def parse_country_detail(country: Any, indicator_payload: Any) -> CountryDetail:
    if isinstance(country, list):
        country = country[0] if country else {}
    if not isinstance(country, dict) or not isinstance(country.get("name"), dict):
        raise FetchError("Country entry is missing its name block")

    rate = None
    observations = indicator_observations(indicator_payload)
    if observations and observations[0].get("value") is not None:
        rate = float(observations[0]["value"])

    capitals = country.get("capital") or [NOT_AVAILABLE]
    return CountryDetail(
        official_name=str(country["name"].get("official") or ""),
        common_name=str(country["name"].get("common") or ""),
        flag_url=_flag_url(country.get("flags")),
        region=country.get("region"),
        subregion=country.get("subregion") or None,
        population=int(country.get("population") or 0),
        capitals=[str(c) for c in capitals],
        code=str(country.get("cca3") or ""),
        homicide_rate=rate,
    )


def load_country_list(year: str) -> pd.DataFrame:
    year = normalize_year(year)
    settings = get_settings()
    try:
        countries = fetch_countries()
        indicator = fetch_indicator(year)
        merged = merge_countries(countries, indicator, population_threshold=settings.population_threshold)
    except FetchError as exc:
        logger.error("country list fetch failed for %s: %s", year, exc)
        raise FetchError(LIST_ERROR_MESSAGE) from exc
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        logger.exception("country list payload could not be merged for %s", year)
        raise FetchError(LIST_ERROR_MESSAGE) from exc
    logger.info("loaded %d countries with homicide data for %s", len(merged), year)
    return merged


def load_country_detail(code: str, year: str) -> CountryDetail:
    year = normalize_year(year)
    code = (code or "").strip().upper()
    try:
        country = fetch_country(code)
        indicator = fetch_indicator(year, code=code)
        detail = parse_country_detail(country, indicator)
    except FetchError as exc:
        logger.error("country detail fetch failed for %s/%s: %s", code, year, exc)
        raise FetchError(DETAIL_ERROR_MESSAGE) from exc
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        logger.exception("country detail payload could not be parsed for %s/%s", code, year)
        raise FetchError(DETAIL_ERROR_MESSAGE) from exc
    logger.info("loaded detail for %s (%s): rate=%s", code, year, detail.homicide_rate)
    return detail


# ---------- Session dataset ----------

class YearDataset:
    """Merged list for the currently selected year.

    Fetches only when the year changes. Every load takes a generation token and
    its result is kept only while that token is still the newest one. A single
    Streamlit session runs its script serially, so there the token never goes
    stale; it guards callers that share one dataset across threads, where a
    slower response for a superseded year must not overwrite a newer one.
    """

    def __init__(self, loader: Callable[[str], pd.DataFrame] = load_country_list):
        self._loader = loader
        self._generation = 0
        self.year: Optional[str] = None
        self.frame: Optional[pd.DataFrame] = None
        self.error: Optional[str] = None

    def begin(self) -> int:
        self._generation += 1
        return self._generation

    def commit(self, token: int, year: str, frame: Optional[pd.DataFrame] = None, error: Optional[str] = None) -> bool:
        if token != self._generation:
            logger.info("discarding stale result for %s (token %d, current %d)", year, token, self._generation)
            return False
        self.year = year
        self.frame = frame
        self.error = error
        return True

    def invalidate(self) -> None:
        self.year = None
        self.frame = None
        self.error = None

    def ensure(self, year: str) -> pd.DataFrame:
        if self.year == year:
            if self.error is not None:
                raise FetchError(self.error)
            return self.frame
        token = self.begin()
        try:
            frame = self._loader(year)
        except FetchError as exc:
            self.commit(token, year, error=str(exc))
            raise
        self.commit(token, year, frame=frame)
        return frame
