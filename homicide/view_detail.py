from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from homicide.colors import detail_scale
from homicide.data import CountryDetail


def compute_detail_view(detail: CountryDetail, *, year: str, domain_max: float = 50.0) -> Dict[str, Any]:
    scale = detail_scale(domain_max)
    rate = detail.homicide_rate
    return {
        "year": year,
        "country": asdict(detail),
        "has_data": rate is not None,
        "max_rate": scale.domain_max,
        "color": scale.color(rate),
        "text_color": scale.text_color(rate),
    }
