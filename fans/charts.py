from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

STATUS_SCALE = alt.Scale(domain=["good", "bad", "neutral"], range=["#22c55e", "#ef4444", "#9ca3af"])


def facility_variance_chart(breakdown: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(breakdown, columns=["metric", "variance_pct", "status"]).dropna(subset=["variance_pct"])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            y=alt.Y("metric:N", title=None, sort=None),
            x=alt.X("variance_pct:Q", title="Variance vs Peer Median", axis=alt.Axis(format="+.0f")),
            color=alt.Color("status:N", scale=STATUS_SCALE, legend=None),
            tooltip=["metric", alt.Tooltip("variance_pct:Q", title="Variance %", format="+.1f")],
        )
        .properties(height=220)
    )


def facility_band_chart(breakdown: List[Dict[str, Any]]) -> alt.Chart:
    """Actual value against the peer min/mid/max band per metric."""
    df = pd.DataFrame(breakdown, columns=["metric", "actual", "peer_min", "peer_mid", "peer_max"])
    long_df = df.melt(id_vars="metric", var_name="series", value_name="value").dropna(subset=["value"])
    return (
        alt.Chart(long_df)
        .mark_bar()
        .encode(
            y=alt.Y("metric:N", title=None, sort=None),
            yOffset="series:N",
            x=alt.X("value:Q", title="$ per patient day", axis=alt.Axis(format="$,.0f")),
            color=alt.Color("series:N", title=None),
            tooltip=["metric", "series", alt.Tooltip("value:Q", format="$,.2f")],
        )
        .properties(height=260)
    )


def system_comparison_chart(systems: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(systems, columns=["name", "avg_aoe_variance", "facility_count"])
    df["status"] = df["avg_aoe_variance"].apply(lambda v: "good" if v <= 0 else "bad")
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            y=alt.Y("name:N", title=None, sort=None),
            x=alt.X("avg_aoe_variance:Q", title="Avg AOE Variance %", axis=alt.Axis(format="+.0f")),
            color=alt.Color("status:N", scale=STATUS_SCALE, legend=None),
            tooltip=[
                alt.Tooltip("name:N", title="Health System"),
                alt.Tooltip("facility_count:Q", title="Facilities"),
                alt.Tooltip("avg_aoe_variance:Q", title="Avg Variance", format="+.1f"),
            ],
        )
        .properties(height=max(120, 28 * len(df)))
    )
