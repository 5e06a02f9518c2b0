from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import matplotlib
from matplotlib.colors import to_hex

import pandas as pd


LIGHT_TEXT = "white"
DARK_TEXT = "black"
COLORMAP_NAME = "RdYlGn"


def observed_max_rate(rates: Iterable[float]) -> float:
    """Largest rate in the list, falling back to 1 for empty or all-zero data."""
    values = [float(r) for r in rates if r is not None and not pd.isna(r)]
    top = max(values) if values else 0.0
    return top or 1.0


@dataclass(frozen=True)
class RateColorScale:
    """Diverging red -> yellow -> green scale over the domain [domain_max, 0].

    ``domain_max`` maps to red, 0 maps to green; values outside are clamped.
    """

    domain_max: float

    def position(self, rate: float) -> float:
        if self.domain_max <= 0:
            return 1.0
        t = 1.0 - float(rate) / self.domain_max
        return min(1.0, max(0.0, t))

    def color(self, rate: Optional[float]) -> Optional[str]:
        if rate is None or pd.isna(rate):
            return None
        cmap = matplotlib.colormaps[COLORMAP_NAME]
        return to_hex(cmap(self.position(rate)))

    def text_color(self, rate: Optional[float]) -> Optional[str]:
        if rate is None or pd.isna(rate):
            return None
        return LIGHT_TEXT if float(rate) > self.domain_max / 2 else DARK_TEXT

    def cell_style(self, rate: Optional[float]) -> str:
        """CSS for a pandas Styler cell."""
        bg = self.color(rate)
        if bg is None:
            return ""
        return f"background-color: {bg}; color: {self.text_color(rate)}; font-weight: 700"


def list_scale(rates: Iterable[float]) -> RateColorScale:
    return RateColorScale(domain_max=observed_max_rate(rates))


def detail_scale(domain_max: float = 50.0) -> RateColorScale:
    return RateColorScale(domain_max=domain_max)
