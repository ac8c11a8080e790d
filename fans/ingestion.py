"""Spreadsheet import: read a workbook, map its headers, preview, commit.

The pipeline walks ``upload -> preview -> result``. Reading and mapping happen
in :meth:`ImportPipeline.process_file`; nothing reaches the session until
:meth:`ImportPipeline.confirm` appends the previewed rows to an
:class:`ImportedRecordStore` in one step. Imported records never carry peer
fields, so they show up in overview listings but not in variance views.
"""

from __future__ import annotations

import io
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterable, List, Literal, Optional, Tuple, Union

import pandas as pd

from fans.column_mapper import ColumnMapping, resolve_mapping
from fans.data import PEER_COLUMNS, combine_records, empty_records, records_to_frame
from fans.normalizer import ImportedRow, normalize_row


logger = logging.getLogger(__name__)

Step = Literal["upload", "preview", "result"]
FileContent = Union[bytes, bytearray, BinaryIO]


@dataclass(frozen=True)
class ImportSettings:
    preview_limit: int = 100
    accepted_extensions: Tuple[str, ...] = (".xlsx", ".xls", ".csv")


@dataclass
class ImportResult:
    success: bool
    records_imported: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class ImportedRecordStore:
    """Append-only, session-scoped frame of imported benchmark records."""

    def __init__(self) -> None:
        self._frame = empty_records()

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame

    def __len__(self) -> int:
        return len(self._frame)

    def append(self, batch: pd.DataFrame) -> None:
        if batch.empty:
            return
        # single assignment: readers see either the old or the new frame
        self._frame = combine_records(self._frame, batch)


def build_records(rows: Iterable[ImportedRow]) -> pd.DataFrame:
    """Promote imported rows to full benchmark records with null peer fields."""
    records = []
    for row in rows:
        rec = asdict(row)
        rec["display_name"] = row.facility_name
        rec.update({col: None for col in PEER_COLUMNS})
        records.append(rec)
    return records_to_frame(records)


def read_first_sheet(content: FileContent, filename: str) -> pd.DataFrame:
    """First sheet of a workbook (or the CSV body) with the first row as header."""
    ext = Path(filename).suffix.lower()
    buf = io.BytesIO(bytes(content)) if isinstance(content, (bytes, bytearray)) else content
    if ext == ".csv":
        try:
            # text in, so "NA" stays a name and "0012" keeps its zeros
            df = pd.read_csv(buf, dtype=str, keep_default_na=False, na_values=[""])
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
    else:
        df = pd.read_excel(buf, sheet_name=0)
    df.columns = [str(c) for c in df.columns]
    return df.dropna(how="all").reset_index(drop=True)


class ImportPipeline:
    def __init__(self, settings: Optional[ImportSettings] = None) -> None:
        self.settings = settings or ImportSettings()
        self.step: Step = "upload"
        self.preview: List[ImportedRow] = []
        self.mapping: ColumnMapping = {}
        self.result: Optional[ImportResult] = None
        self.total_rows = 0
        self.is_processing = False

    def accepts(self, filename: str) -> bool:
        return Path(filename or "").suffix.lower() in self.settings.accepted_extensions

    def reset(self) -> None:
        self.step = "upload"
        self.preview = []
        self.mapping = {}
        self.result = None
        self.total_rows = 0

    def _fail(self, message: str) -> Step:
        self.preview = []
        self.mapping = {}
        self.result = ImportResult(success=False, records_imported=0, errors=[message])
        self.step = "result"
        return self.step

    def process_file(self, content: FileContent, filename: str) -> Step:
        if self.is_processing:
            logger.warning("Ignoring %s: another import is still being processed", filename)
            return self.step
        self.is_processing = True
        self.result = None
        try:
            return self._process(content, filename)
        except Exception as exc:
            logger.exception("Import of %s failed", filename)
            return self._fail(f"Error: {exc}")
        finally:
            self.is_processing = False

    def _process(self, content: FileContent, filename: str) -> Step:
        if not self.accepts(filename):
            return self._fail(f"Unsupported file type: {Path(filename or '').suffix or filename}")

        raw = read_first_sheet(content, filename)
        if raw.empty:
            return self._fail("No data found")

        mapping, warnings = resolve_mapping(list(raw.columns))
        limit = self.settings.preview_limit
        self.total_rows = int(len(raw))
        if self.total_rows > limit:
            warnings.append(f"Only the first {limit} of {self.total_rows} rows were loaded")

        rows = raw.head(limit).to_dict(orient="records")
        self.mapping = mapping
        self.preview = [normalize_row(row, mapping) for row in rows]
        self.step = "preview"
        if warnings:
            self.result = ImportResult(success=True, records_imported=0, warnings=warnings)
        logger.info(
            "Import preview for %s: %d of %d rows, %d mapped columns, %d warnings",
            filename,
            len(self.preview),
            self.total_rows,
            len(mapping),
            len(warnings),
        )
        return self.step

    @property
    def warnings(self) -> List[str]:
        return list(self.result.warnings) if self.result is not None else []

    def confirm(self, store: ImportedRecordStore) -> ImportResult:
        if self.step != "preview":
            raise RuntimeError(f"Nothing to import: pipeline is in the {self.step!r} step")
        batch = build_records(self.preview)
        store.append(batch)
        self.result = ImportResult(success=True, records_imported=int(len(batch)))
        self.step = "result"
        logger.info("Imported %d records (session total %d)", len(batch), len(store))
        return self.result
