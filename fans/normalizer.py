from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import pandas as pd

from fans.column_mapper import ColumnMapping

UNKNOWN_FACILITY = "Unknown"
IMPORTED_LABEL = "Imported"
NUMERIC_FIELDS = ("daily_census", "aoe_ppd", "labor_ppd", "cogs_ppd", "revenue_ppd", "productive_ftes")
LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class ImportedRow:
    facility_name: str
    health_system: str
    period: str
    daily_census: Optional[float] = None
    aoe_ppd: Optional[float] = None
    labor_ppd: Optional[float] = None
    cogs_ppd: Optional[float] = None
    revenue_ppd: Optional[float] = None
    productive_ftes: Optional[float] = None


def _is_missing(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    try:
        # None, NaN, pd.NA, NaT
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_number(value: Any) -> Optional[float]:
    """Coerce a cell to float; blanks and unparsable text become None."""
    if _is_missing(value):
        return None
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        out = float(value)
    else:
        # leading number only: "45.50 PPD" -> 45.5, "12%" -> 12
        match = LEADING_NUMBER.match(str(value).replace("$", "").replace(",", ""))
        if match is None:
            return None
        out = float(match.group(0))
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def _text(value: Any, fallback: str) -> str:
    if _is_missing(value):
        return fallback
    # spreadsheet years arrive as 2024.0 when the column has blanks
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def normalize_row(raw_row: Mapping[str, Any], mapping: ColumnMapping) -> ImportedRow:
    def cell(field: str) -> Any:
        header = mapping.get(field)
        return raw_row.get(header) if header is not None else None

    return ImportedRow(
        facility_name=_text(cell("facility_name"), UNKNOWN_FACILITY),
        health_system=_text(cell("health_system"), IMPORTED_LABEL),
        period=_text(cell("period"), IMPORTED_LABEL),
        **{field: parse_number(cell(field)) for field in NUMERIC_FIELDS},
    )
