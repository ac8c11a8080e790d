from __future__ import annotations

import json
import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from fans.schemas import BenchmarkRecordModel, SummaryModel


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
BENCHMARKS_PATH = DATA_DIR / "benchmarks.json"
SUMMARY_PATH = DATA_DIR / "summary.json"

# metric column -> prefix of its peer columns
METRICS: Dict[str, str] = {
    "aoe_ppd": "aoe",
    "labor_ppd": "labor",
    "cogs_ppd": "cogs",
    "revenue_ppd": "revenue",
}
METRIC_LABELS: Dict[str, str] = {
    "aoe_ppd": "AOE",
    "labor_ppd": "Labor",
    "cogs_ppd": "COGS",
    "revenue_ppd": "Revenue",
}
COST_METRICS = ("aoe_ppd", "labor_ppd", "cogs_ppd")

ID_COLUMNS = ["facility_name", "display_name", "health_system", "period"]
PEER_COLUMNS = [f"{prefix}_peer_{band}" for prefix in METRICS.values() for band in ("min", "mid", "max")]
NUMERIC_COLUMNS = ["daily_census", *METRICS.keys(), *PEER_COLUMNS, "productive_ftes"]
RECORD_COLUMNS = [
    *ID_COLUMNS,
    "daily_census",
    "aoe_ppd",
    "aoe_peer_min",
    "aoe_peer_mid",
    "aoe_peer_max",
    "revenue_ppd",
    "revenue_peer_min",
    "revenue_peer_mid",
    "revenue_peer_max",
    "cogs_ppd",
    "cogs_peer_min",
    "cogs_peer_mid",
    "cogs_peer_max",
    "labor_ppd",
    "labor_peer_min",
    "labor_peer_mid",
    "labor_peer_max",
    "productive_ftes",
]


def peer_column(metric: str, band: str = "mid") -> str:
    return f"{METRICS[metric]}_peer_{band}"


def file_signature(files: Iterable[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files)


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
    return df


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col].astype("string").str.strip()
            series = series.replace({"nan": pd.NA, "None": pd.NA, "": pd.NA})
            df[col] = pd.Series([None if pd.isna(v) else str(v) for v in series], index=df.index, dtype=object)
    return df


def empty_records() -> pd.DataFrame:
    return numericize(pd.DataFrame(columns=RECORD_COLUMNS), NUMERIC_COLUMNS)


def records_to_frame(rows: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    """Build a canonical record frame from already-validated dicts."""
    df = pd.DataFrame(list(rows), columns=RECORD_COLUMNS)
    if df.empty:
        return empty_records()
    df = coerce_str_safe(df, ID_COLUMNS)
    return numericize(df, NUMERIC_COLUMNS)


def combine_records(base: pd.DataFrame, imported: Optional[pd.DataFrame]) -> pd.DataFrame:
    """Base records followed by session imports; neither input is modified."""
    if imported is None or imported.empty:
        return base.copy()
    if base.empty:
        return imported.copy()
    return pd.concat([base, imported], ignore_index=True)


def metric_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        out = float(value)
        return None if math.isnan(out) or math.isinf(out) else out
    if value is pd.NA:
        return None
    return value


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    value = metric_value(value)
    if value is None:
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def frame_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a frame into JSON-friendly dicts, NaN becomes None."""
    if df is None or df.empty:
        return []
    return [{k: metric_value(v) for k, v in row.items()} for row in df.to_dict(orient="records")]


# ---------------- Loaders ----------------
def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


@lru_cache(maxsize=4)
def _load_benchmarks_cached(files_sig: Tuple[Tuple[str, float], ...]) -> pd.DataFrame:
    path = Path(files_sig[0][0])
    raw = _read_json(path)
    if not isinstance(raw, list):
        raise ValueError(f"{path.name}: expected a list of benchmark records")
    models = [BenchmarkRecordModel.model_validate(item) for item in raw]
    df = records_to_frame(m.model_dump() for m in models)
    logger.info("Loaded %d benchmark records from %s", len(df), path.name)
    return df


@lru_cache(maxsize=4)
def _load_summary_cached(files_sig: Tuple[Tuple[str, float], ...]) -> SummaryModel:
    path = Path(files_sig[0][0])
    summary = SummaryModel.model_validate(_read_json(path))
    logger.info("Loaded summary with %d peer benchmarks from %s", len(summary.peer_benchmarks), path.name)
    return summary


def load_benchmarks(path: Optional[Path] = None) -> pd.DataFrame:
    path = Path(path or BENCHMARKS_PATH)
    if not path.exists():
        raise FileNotFoundError(f"Benchmark dataset not found: {path}")
    # Cached frame is shared; callers get their own copy.
    return _load_benchmarks_cached(file_signature([path])).copy()


def load_summary(path: Optional[Path] = None) -> SummaryModel:
    path = Path(path or SUMMARY_PATH)
    if not path.exists():
        raise FileNotFoundError(f"Summary dataset not found: {path}")
    return _load_summary_cached(file_signature([path])).model_copy(deep=True)


def load_dashboard_data(
    benchmarks_path: Optional[Path] = None,
    summary_path: Optional[Path] = None,
) -> Dict[str, object]:
    return {
        "benchmarks": load_benchmarks(benchmarks_path),
        "summary": load_summary(summary_path),
    }
