from __future__ import annotations

from enum import Enum
from typing import Callable, Literal, Tuple, Union

import pandas as pd

Direction = Literal["asc", "desc"]


class SortField(str, Enum):
    AOE_PPD = "aoe_ppd"
    AOE_VARIANCE_PCT = "aoe_variance_pct"
    LABOR_VARIANCE_PCT = "labor_variance_pct"
    COGS_VARIANCE_PCT = "cogs_variance_pct"
    REVENUE_VARIANCE_PCT = "revenue_variance_pct"
    DAILY_CENSUS = "daily_census"
    PERFORMANCE_SCORE = "performance_score"
    TOTAL_VARIANCE = "total_variance"

    @property
    def accessor(self) -> Callable[[pd.DataFrame], pd.Series]:
        column = self.value

        def _get(df: pd.DataFrame) -> pd.Series:
            if column not in df.columns:
                return pd.Series(float("nan"), index=df.index)
            return pd.to_numeric(df[column], errors="coerce")

        return _get


DEFAULT_SORT = SortField.AOE_VARIANCE_PCT
DEFAULT_DIRECTION: Direction = "desc"


def rank_records(
    records: pd.DataFrame,
    sort_field: Union[SortField, str] = DEFAULT_SORT,
    direction: Direction = DEFAULT_DIRECTION,
) -> pd.DataFrame:
    """Stable sort on one numeric field; nulls sink to the bottom either way.

    The caller's frame is left untouched.
    """
    field = SortField(sort_field)
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {direction!r}")
    if records.empty:
        return records.copy()
    df = records.reset_index(drop=True)
    key = field.accessor(df)
    order = key.sort_values(ascending=direction == "asc", na_position="last", kind="mergesort").index
    return df.loc[order].reset_index(drop=True)


def next_sort(current: Union[SortField, str], direction: Direction, clicked: Union[SortField, str]) -> Tuple[SortField, Direction]:
    current, clicked = SortField(current), SortField(clicked)
    if current == clicked:
        return current, "asc" if direction == "desc" else "desc"
    return clicked, "asc"
