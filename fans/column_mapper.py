from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

ColumnMapping = Dict[str, str]

# Accepted header aliases per canonical field, highest priority first.
COLUMN_MAPPINGS: Dict[str, List[str]] = {
    "facility_name": ["Facility Name", "Facility", "Hospital Name", "Hospital", "Name", "Site"],
    "health_system": ["Health System", "System", "Source", "Organization", "Parent"],
    "period": ["Period", "Time Period", "Date Range", "Fiscal Year", "Year"],
    "daily_census": ["Daily Census", "Census", "ADC", "Average Daily Census", "Avg Census"],
    "aoe_ppd": ["AOE PPD", "AOE", "Operating Expense PPD", "Total AOE PPD"],
    "labor_ppd": ["Labor PPD", "Labor", "Labor Cost PPD", "Total Labor PPD"],
    "cogs_ppd": ["COGS PPD", "COGS", "Food Cost PPD", "Cost of Goods PPD"],
    "revenue_ppd": ["Revenue PPD", "Revenue", "Total Revenue PPD", "Sales PPD"],
    "productive_ftes": ["Productive FTEs", "FTEs", "FTE", "Productive FTE", "Total FTEs"],
}

REQUIRED_FIELDS: Dict[str, str] = {"facility_name": "Facility Name"}


def _norm_header(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def find_column_match(headers: Sequence[object], field: str) -> Optional[str]:
    """Return the header matching one of the field's aliases, or None.

    Matching is exact after trimming and lower-casing; aliases are tried in
    priority order, so the first alias present wins regardless of header order.
    """
    normalized = [_norm_header(h) for h in headers]
    for alias in COLUMN_MAPPINGS.get(field, []):
        target = _norm_header(alias)
        if target in normalized:
            return str(headers[normalized.index(target)])
    return None


def resolve_mapping(headers: Sequence[object]) -> Tuple[ColumnMapping, List[str]]:
    mapping: ColumnMapping = {}
    warnings: List[str] = []
    for field in COLUMN_MAPPINGS:
        match = find_column_match(headers, field)
        if match is not None:
            mapping[field] = match
        elif field in REQUIRED_FIELDS:
            warnings.append(f'Required column "{REQUIRED_FIELDS[field]}" not found')
    return mapping, warnings
