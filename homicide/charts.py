from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def homicide_rate_bars(df: pd.DataFrame, *, domain_max: float, top_n: int = 25) -> alt.Chart:
    """Horizontal bars for the first ``top_n`` rows, in the order given."""
    data = df.head(top_n)[["name", "region", "homicide_rate"]].copy()
    order = data["name"].tolist()
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            y=alt.Y("name:N", title=None, sort=order),
            x=alt.X("homicide_rate:Q", title="Homicides per 100,000"),
            color=alt.Color(
                "homicide_rate:Q",
                scale=alt.Scale(scheme="redyellowgreen", domain=[domain_max, 0], clamp=True),
                legend=None,
            ),
            tooltip=[
                alt.Tooltip("name:N", title="Country"),
                alt.Tooltip("region:N", title="Region"),
                alt.Tooltip("homicide_rate:Q", title="Rate", format=".2f"),
            ],
        )
        .properties(height=max(120, 18 * len(data)))
    )
