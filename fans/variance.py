from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

import pandas as pd

from fans.data import COST_METRICS, METRIC_LABELS, METRICS, metric_value, peer_column

Status = Literal["good", "bad", "neutral"]

VARIANCE_COLUMNS = [
    col for prefix in METRICS.values() for col in (f"{prefix}_variance", f"{prefix}_variance_pct")
] + ["total_variance", "performance_score"]


def _variance_pair(actual: Any, peer_mid: Any) -> tuple[Optional[float], Optional[float]]:
    actual = metric_value(actual)
    peer_mid = metric_value(peer_mid)
    if actual is None or peer_mid is None:
        return None, None
    variance = float(actual) - float(peer_mid)
    pct = variance / float(peer_mid) * 100 if peer_mid != 0 else None
    return variance, pct


def compute_variance(record: Dict[str, Any]) -> Dict[str, Any]:
    """Single-record variance against peer medians.

    Returns a copy of ``record`` with ``<prefix>_variance`` and
    ``<prefix>_variance_pct`` for every metric, plus ``total_variance`` and
    ``performance_score``.
    """
    out = dict(record)
    for metric, prefix in METRICS.items():
        variance, pct = _variance_pair(record.get(metric), record.get(peer_column(metric)))
        out[f"{prefix}_variance"] = variance
        out[f"{prefix}_variance_pct"] = pct
    # total_variance is the AOE variance, not a cross-metric sum
    out["total_variance"] = out["aoe_variance"]
    out["performance_score"] = -out["aoe_variance_pct"] if out["aoe_variance_pct"] is not None else None
    return out


def compute_variance_frame(records: pd.DataFrame) -> pd.DataFrame:
    df = records.copy()
    for metric, prefix in METRICS.items():
        actual = pd.to_numeric(df.get(metric, pd.Series(index=df.index, dtype=float)), errors="coerce")
        mid = pd.to_numeric(df.get(peer_column(metric), pd.Series(index=df.index, dtype=float)), errors="coerce")
        variance = actual - mid
        df[f"{prefix}_variance"] = variance
        df[f"{prefix}_variance_pct"] = variance / mid.where(mid != 0) * 100
    df["total_variance"] = df["aoe_variance"]
    df["performance_score"] = -df["aoe_variance_pct"]
    return df


def facilities_with_variance(records: pd.DataFrame) -> pd.DataFrame:
    """Variance-augmented records that have both an AOE actual and an AOE peer median.

    Imported records never carry peer medians, so they drop out here.
    """
    df = compute_variance_frame(records)
    if df.empty:
        return df
    keep = df["aoe_ppd"].notna() & df[peer_column("aoe_ppd")].notna()
    return df[keep].copy()


def variance_status(metric: str, variance: Optional[float]) -> Status:
    """Color class for a variance: over the median is bad for costs, good for revenue."""
    variance = metric_value(variance)
    if variance is None or variance == 0:
        return "neutral"
    if metric in COST_METRICS:
        return "good" if variance < 0 else "bad"
    return "good" if variance > 0 else "bad"


def facility_breakdown(variance_records: pd.DataFrame, facility_name: str) -> List[Dict[str, Any]]:
    if variance_records.empty:
        return []
    match = variance_records[variance_records["facility_name"] == facility_name]
    if match.empty:
        return []
    row = match.iloc[0]
    rows: List[Dict[str, Any]] = []
    for metric, prefix in METRICS.items():
        variance = metric_value(row.get(f"{prefix}_variance"))
        rows.append(
            {
                "metric": METRIC_LABELS[metric],
                "actual": metric_value(row.get(metric)),
                "peer_min": metric_value(row.get(peer_column(metric, "min"))),
                "peer_mid": metric_value(row.get(peer_column(metric, "mid"))),
                "peer_max": metric_value(row.get(peer_column(metric, "max"))),
                "variance": variance,
                "variance_pct": metric_value(row.get(f"{prefix}_variance_pct")),
                "status": variance_status(metric, variance),
            }
        )
    return rows
