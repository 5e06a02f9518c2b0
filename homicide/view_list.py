from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from homicide.charts import homicide_rate_bars, to_vega_spec
from homicide.colors import list_scale
from homicide.filters import ListFilters, apply_filters, region_options


def compute_list_view(filters: ListFilters, df: pd.DataFrame, *, year: str) -> Dict[str, Any]:
    """Filtered, sorted and colored rows for the country table.

    The color domain is taken from the full year's data, not the filtered
    subset, so a country keeps its color while the user narrows the table.
    """
    scale = list_scale(df["homicide_rate"] if not df.empty else [])
    table = apply_filters(df, filters)

    rows = []
    for rank, row in enumerate(table.to_dict(orient="records"), start=1):
        rate = float(row["homicide_rate"])
        rows.append(
            {
                "rank": rank,
                "name": row["name"],
                "code": row["code"],
                "region": row["region"],
                "population": int(row["population"]),
                "flag_url": row["flag_url"],
                "homicide_rate": rate,
                "color": scale.color(rate),
                "text_color": scale.text_color(rate),
            }
        )

    chart = None
    if not table.empty:
        chart = to_vega_spec(homicide_rate_bars(table, domain_max=scale.domain_max))

    return {
        "year": year,
        "filters": asdict(filters),
        "total": int(len(df)),
        "shown": int(len(table)),
        "max_rate": scale.domain_max,
        "regions": region_options(df),
        "rows": rows,
        "chart": chart,
    }
