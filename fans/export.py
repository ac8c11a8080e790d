from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

import pandas as pd

from fans.data import metric_value, round_half_up

View = Literal["overview", "peer_comparison"]


def _quoted(value: Any) -> str:
    value = metric_value(value)
    if value is None:
        return ""
    return '"' + str(value).replace('"', '""') + '"'


def _fixed(decimals: int) -> Callable[[Any], str]:
    def fmt(value: Any) -> str:
        value = round_half_up(value, decimals)
        if value is None:
            return ""
        # halves already rounded up, so the format only pads
        return f"{value:.{decimals}f}"

    return fmt


EXPORT_COLUMNS: Dict[str, List[Tuple[str, str, Callable[[Any], str]]]] = {
    "overview": [
        ("Facility", "facility_name", _quoted),
        ("Health System", "health_system", _quoted),
        ("Period", "period", _quoted),
        ("Census", "daily_census", _fixed(0)),
        ("AOE PPD", "aoe_ppd", _fixed(2)),
        ("Labor PPD", "labor_ppd", _fixed(2)),
        ("COGS PPD", "cogs_ppd", _fixed(2)),
        ("Revenue PPD", "revenue_ppd", _fixed(2)),
    ],
    "peer_comparison": [
        ("Facility", "facility_name", _quoted),
        ("Health System", "health_system", _quoted),
        ("Period", "period", _quoted),
        ("Census", "daily_census", _fixed(0)),
        ("AOE PPD", "aoe_ppd", _fixed(2)),
        ("Peer Median", "aoe_peer_mid", _fixed(2)),
        ("Variance %", "aoe_variance_pct", _fixed(1)),
        ("Labor PPD", "labor_ppd", _fixed(2)),
        ("COGS PPD", "cogs_ppd", _fixed(2)),
    ],
}


def export_csv(rows: pd.DataFrame, view: View = "overview") -> str:
    """Render already-derived rows as CSV text for download."""
    if view not in EXPORT_COLUMNS:
        raise ValueError(f"Unknown export view: {view!r}")
    columns = EXPORT_COLUMNS[view]
    lines = [",".join(label for label, _, _ in columns)]
    for record in rows.to_dict(orient="records"):
        lines.append(",".join(fmt(record.get(col)) for _, col, fmt in columns))
    return "\n".join(lines)


def export_filename(view: View, day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"fans_{view}_{day.isoformat()}.csv"
