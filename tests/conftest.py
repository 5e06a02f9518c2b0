"""
Pytest configuration for the homicide dashboard.

Provides fixtures for:
- Sample REST Countries / World Bank payloads
- A fake ``requests.get`` that serves those payloads by URL
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest
import requests

from homicide.config import get_settings


def country(code: str, name: str, region: str, population: int, **extra: Any) -> Dict[str, Any]:
    entry = {
        "name": {"common": name, "official": extra.pop("official", f"Republic of {name}")},
        "cca3": code,
        "region": region,
        "population": population,
        "flags": {"svg": f"https://flagcdn.com/{code.lower()}.svg", "png": f"https://flagcdn.com/{code.lower()}.png"},
    }
    entry.update(extra)
    return entry


def observation(code: str, value: Optional[float], year: str = "2022") -> Dict[str, Any]:
    return {
        "indicator": {"id": "VC.IHR.PSRC.P5", "value": "Intentional homicides (per 100,000 people)"},
        "country": {"id": code[:2], "value": code},
        "countryiso3code": code,
        "date": year,
        "value": value,
        "unit": "",
        "obs_status": "",
        "decimal": 1,
    }


def envelope(observations: List[Dict[str, Any]]) -> List[Any]:
    return [{"page": 1, "pages": 1, "per_page": 300, "total": len(observations)}, observations]


@pytest.fixture
def sample_countries() -> List[Dict[str, Any]]:
    return [
        country("USA", "United States", "Americas", 331_000_000),
        country("BRA", "Brazil", "Americas", 212_000_000),
        country("DEU", "Germany", "Europe", 83_000_000),
        country("JPN", "Japan", "Asia", 125_000_000),
        country("ISL", "Iceland", "Europe", 370_000),
        country("ZAF", "South Africa", "Africa", 59_000_000),
        country("ATA", "Antarctica", "", 2_000_000),
        country("FRA", "France", "Europe", 67_000_000),
    ]


@pytest.fixture
def sample_indicator() -> List[Any]:
    return envelope(
        [
            observation("USA", 4.96),
            observation("BRA", 22.38),
            observation("DEU", 0.98),
            observation("JPN", 0.23),
            observation("ISL", 1.1),
            observation("ZAF", 41.87),
            observation("FRA", None),
        ]
    )


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, invalid_json: bool = False):
        self._payload = payload
        self.status_code = status_code
        self._invalid_json = invalid_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> Callable[..., List[Dict[str, Any]]]:
    """Route ``requests.get`` by URL substring; returns the list of recorded calls."""

    def install(routes: Dict[str, Any]) -> List[Dict[str, Any]]:
        calls: List[Dict[str, Any]] = []

        def fake_get(url: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None):
            calls.append({"url": url, "params": params or {}, "timeout": timeout})
            for fragment, result in routes.items():
                if fragment in url:
                    if isinstance(result, Exception):
                        raise result
                    if isinstance(result, FakeResponse):
                        return result
                    return FakeResponse(result)
            return FakeResponse(None, status_code=404)

        monkeypatch.setattr("homicide.data.requests.get", fake_get)
        return calls

    return install


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
