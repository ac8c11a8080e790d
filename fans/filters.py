from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

ALL = "all"


@dataclass(frozen=True)
class DashboardFilters:
    health_system: str = ALL
    period: str = ALL
    # None disables the census test entirely
    census_range: Optional[Tuple[float, float]] = None


def _as_choice(value: Any) -> str:
    if value is None:
        return ALL
    s = str(value).strip()
    if not s or s.lower() == ALL:
        return ALL
    return s


def _as_range(value: Any) -> Optional[Tuple[float, float]]:
    if not value:
        return None
    try:
        lo, hi = (float(v) for v in value)
    except (TypeError, ValueError):
        return None
    if pd.isna(lo) or pd.isna(hi):
        return None
    return (lo, hi) if lo <= hi else (hi, lo)


def normalize_filters(raw: Dict[str, Any]) -> DashboardFilters:
    return DashboardFilters(
        health_system=_as_choice(raw.get("health_system")),
        period=_as_choice(raw.get("period")),
        census_range=_as_range(raw.get("census_range")),
    )


def filter_records(records: pd.DataFrame, filters: DashboardFilters) -> pd.DataFrame:
    """Reduce records by health system, period and census range.

    Relative order is preserved. A record with unknown census is never
    excluded by the census range.
    """
    if records.empty:
        return records.copy()

    mask = pd.Series(True, index=records.index)
    if filters.health_system != ALL:
        mask &= records["health_system"] == filters.health_system
    if filters.period != ALL:
        mask &= records["period"] == filters.period
    if filters.census_range is not None:
        lo, hi = filters.census_range
        census = records["daily_census"]
        mask &= census.isna() | census.between(lo, hi)
    return records[mask].copy()


def _sorted_unique(series: pd.Series) -> List[str]:
    return sorted({str(v) for v in series.dropna().tolist()})


def filter_options(records: pd.DataFrame) -> Dict[str, Any]:
    """Selector values: unique systems, periods and facilities plus census bounds."""
    if records.empty:
        return {"health_systems": [], "periods": [], "facilities": [], "census_bounds": None}
    census = records["daily_census"].dropna()
    bounds = (float(census.min()), float(census.max())) if not census.empty else None
    return {
        "health_systems": _sorted_unique(records["health_system"]),
        "periods": _sorted_unique(records["period"]),
        "facilities": _sorted_unique(records["facility_name"]),
        "census_bounds": bounds,
    }
