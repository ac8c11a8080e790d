from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd

from fans.data import METRICS, frame_to_records, metric_value

DAYS_PER_YEAR = 365
OVERVIEW_COLUMNS = ["daily_census", *METRICS.keys(), "productive_ftes"]


def _mean(series: Optional[pd.Series]) -> float:
    """Mean over non-null values, 0.0 when there are none."""
    if series is None:
        return 0.0
    values = pd.to_numeric(series, errors="coerce").dropna()
    if values.empty:
        return 0.0
    return float(values.mean())


def compute_overview(records: pd.DataFrame) -> Dict[str, Any]:
    if records.empty:
        return {
            "record_count": 0,
            "facility_count": 0,
            "health_system_count": 0,
            "averages": {col: 0.0 for col in OVERVIEW_COLUMNS},
        }
    return {
        "record_count": int(len(records)),
        "facility_count": int(records["facility_name"].nunique(dropna=True)),
        "health_system_count": int(records["health_system"].nunique(dropna=True)),
        "averages": {col: _mean(records.get(col)) for col in OVERVIEW_COLUMNS},
    }


def compute_portfolio_metrics(variance_records: pd.DataFrame) -> Dict[str, Any]:
    """Peer-comparison KPIs over AOE variance.

    Exactly-zero variance counts as above median. Potential savings annualize
    the AOE excess over the peer median; a missing census contributes nothing.
    """
    empty = {
        "avg_variance": 0.0,
        "below_median": 0,
        "above_median": 0,
        "pct_below_median": 0.0,
        "potential_savings": 0.0,
        "top_performer": None,
    }
    if variance_records.empty or "aoe_variance_pct" not in variance_records.columns:
        return empty
    valid = variance_records[variance_records["aoe_variance_pct"].notna()]
    if valid.empty:
        return empty

    pct = valid["aoe_variance_pct"]
    below = int((pct < 0).sum())
    above = int((pct >= 0).sum())

    excess = valid[valid["aoe_variance"] > 0]
    savings = (excess["aoe_variance"] * excess["daily_census"].fillna(0) * DAYS_PER_YEAR).sum()

    top = valid.iloc[[int(pct.to_numpy().argmin())]]
    return {
        "avg_variance": float(pct.mean()),
        "below_median": below,
        "above_median": above,
        "pct_below_median": below / max(1, below + above) * 100,
        "potential_savings": float(savings),
        "top_performer": frame_to_records(top)[0],
    }


def compute_system_comparison(variance_records: pd.DataFrame) -> List[Dict[str, Any]]:
    """Per health system rollup, best (lowest mean AOE variance) first."""
    if variance_records.empty or "aoe_variance_pct" not in variance_records.columns:
        return []

    rows: List[Dict[str, Any]] = []
    for name, group in variance_records.groupby("health_system", sort=False, dropna=False):
        valid = group[group["aoe_variance_pct"].notna()]
        below = int((valid["aoe_variance_pct"] < 0).sum())
        count = int(len(valid))
        rows.append(
            {
                "name": metric_value(name),
                "facility_count": count,
                "avg_aoe_variance": _mean(valid["aoe_variance_pct"]),
                "avg_labor_variance": _mean(valid.get("labor_variance_pct")),
                "avg_cogs_variance": _mean(valid.get("cogs_variance_pct")),
                "below_median_count": below,
                "below_median_pct": below / count * 100 if count else 0.0,
            }
        )
    return sorted(rows, key=lambda r: r["avg_aoe_variance"])
