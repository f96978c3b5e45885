from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Sequence

import altair as alt
import pandas as pd

from core.metrics_analytics import MONTHS
from core.metrics_charts import Segment, TrendPoint

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def trend_chart(trend: Sequence[TrendPoint]) -> Dict[str, Any]:
    df = pd.DataFrame([asdict(p) for p in trend], columns=["month", "revenue", "users"])
    long_df = df.melt(id_vars="month", value_vars=["revenue", "users"], var_name="metric", value_name="value")
    hover = alt.selection_point(fields=["metric"], on="mouseover", empty="all")
    line = (
        alt.Chart(long_df)
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("month:O", title="Month", sort=list(MONTHS), axis=alt.Axis(grid=False)),
            y=alt.Y("value:Q", axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("metric:N", title="Metric"),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=["month", "metric", alt.Tooltip("value:Q", format=",")],
        )
        .add_params(hover)
        .properties(height=260)
    )
    return to_vega_spec(line)


def _segment_frame(segments: Sequence[Segment]) -> pd.DataFrame:
    return pd.DataFrame([asdict(s) for s in segments], columns=["name", "value", "fill"])


def device_chart(devices: Sequence[Segment]) -> Dict[str, Any]:
    df = _segment_frame(devices)
    bar = (
        alt.Chart(df)
        .mark_bar(cornerRadius=4)
        .encode(
            x=alt.X("name:N", title="Device", sort=None),
            y=alt.Y("value:Q", title="Users"),
            tooltip=["name", alt.Tooltip("value:Q", format=",")],
        )
        .properties(height=260)
    )
    return to_vega_spec(bar)


def distribution_chart(distribution: Sequence[Segment]) -> Dict[str, Any]:
    df = _segment_frame(distribution)
    pie = (
        alt.Chart(df)
        .mark_arc(innerRadius=50)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("name:N", title="Segment", sort=None),
            tooltip=["name", alt.Tooltip("value:Q", format=",")],
        )
        .properties(height=260)
    )
    return to_vega_spec(pie)
