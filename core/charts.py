from __future__ import annotations

from typing import Any, Dict, Sequence

import altair as alt
import pandas as pd

from core.models import GroupCount, TimeSeriesPoint

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _group_frame(groups: Sequence[GroupCount], label_col: str) -> pd.DataFrame:
    return pd.DataFrame([{label_col: g.label, "count": g.count} for g in groups], columns=[label_col, "count"])


def _bar_chart(df: pd.DataFrame, label_col: str, title: str) -> alt.Chart:
    # Keep first-occurrence order on the x axis.
    order = df[label_col].tolist()
    return (
        alt.Chart(df)
        .mark_bar(cornerRadiusTopLeft=4, cornerRadiusTopRight=4)
        .encode(
            x=alt.X(f"{label_col}:N", title=title, sort=order, axis=alt.Axis(labelAngle=-30)),
            y=alt.Y("count:Q", title="Tickets", axis=alt.Axis(format="d", gridDash=[3, 3])),
            tooltip=[label_col, alt.Tooltip("count:Q", format=",")],
        )
        .properties(height=260)
    )


def team_chart(groups: Sequence[GroupCount]) -> alt.Chart:
    return _bar_chart(_group_frame(groups, "team"), "team", "Team")


def status_chart(groups: Sequence[GroupCount]) -> alt.Chart:
    return _bar_chart(_group_frame(groups, "status"), "status", "Status")


def time_series_frame(points: Sequence[TimeSeriesPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"date": p.date.isoformat(), "tickets": p.tickets, "cumulative": p.cumulative} for p in points],
        columns=["date", "tickets", "cumulative"],
    )


def time_series_chart(points: Sequence[TimeSeriesPoint]) -> alt.Chart:
    long = time_series_frame(points).melt(
        id_vars="date", value_vars=["tickets", "cumulative"], var_name="series", value_name="value"
    )
    hover = alt.selection_point(fields=["series"], on="mouseover", empty="all")
    return (
        alt.Chart(long)
        .mark_line(point={"filled": True, "size": 50})
        .encode(
            x=alt.X("date:T", title="Date", axis=alt.Axis(format="%b %d", grid=False)),
            y=alt.Y("value:Q", title="Tickets", axis=alt.Axis(format="d", gridDash=[3, 3])),
            color=alt.Color("series:N", title=None),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.3)),
            tooltip=["date:T", "series:N", alt.Tooltip("value:Q", format=",")],
        )
        .add_params(hover)
        .properties(height=280)
    )
