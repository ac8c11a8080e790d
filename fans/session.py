from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from fans.aggregation import compute_overview, compute_portfolio_metrics, compute_system_comparison
from fans.data import combine_records, frame_to_records, load_dashboard_data
from fans.filters import DashboardFilters, filter_options, filter_records, normalize_filters
from fans.ingestion import FileContent, ImportedRecordStore, ImportPipeline, ImportResult, Step
from fans.ranking import DEFAULT_DIRECTION, DEFAULT_SORT, Direction, SortField, next_sort, rank_records
from fans.schemas import SummaryModel
from fans.variance import facilities_with_variance, facility_breakdown


@dataclass
class DashboardSession:
    """Everything one dashboard session owns.

    Base records are never modified; imports land in ``imported``. Every
    derived view is recomputed from scratch on request.
    """

    base: pd.DataFrame
    summary: SummaryModel = field(default_factory=SummaryModel)
    imported: ImportedRecordStore = field(default_factory=ImportedRecordStore)
    filters: DashboardFilters = field(default_factory=DashboardFilters)
    sort_field: SortField = DEFAULT_SORT
    sort_direction: Direction = DEFAULT_DIRECTION
    pipeline: ImportPipeline = field(default_factory=ImportPipeline)
    selected_facility: Optional[str] = None

    @classmethod
    def from_reference_data(cls, **paths: Any) -> "DashboardSession":
        data_ctx = load_dashboard_data(**paths)
        return cls(base=data_ctx["benchmarks"], summary=data_ctx["summary"])

    # ---------------- state changes ----------------
    def set_filters(self, raw: Dict[str, Any]) -> DashboardFilters:
        self.filters = normalize_filters(raw)
        return self.filters

    def toggle_sort(self, clicked: SortField | str) -> None:
        self.sort_field, self.sort_direction = next_sort(self.sort_field, self.sort_direction, clicked)

    def process_upload(self, content: FileContent, filename: str) -> Optional[Step]:
        """Hand a picked or dropped file to the import pipeline.

        Files without an accepted extension are skipped and ``None`` returned.
        """
        if not self.pipeline.accepts(filename):
            return None
        return self.pipeline.process_file(content, filename)

    def confirm_import(self) -> ImportResult:
        return self.pipeline.confirm(self.imported)

    def close_import(self) -> None:
        self.pipeline.reset()

    # ---------------- derived views ----------------
    def records(self) -> pd.DataFrame:
        return combine_records(self.base, self.imported.frame)

    def filtered(self) -> pd.DataFrame:
        return filter_records(self.records(), self.filters)

    def with_variance(self) -> pd.DataFrame:
        return facilities_with_variance(self.filtered())

    def options(self) -> Dict[str, Any]:
        opts = filter_options(self.records())
        # facility picker follows the active filters
        opts["facilities"] = filter_options(self.filtered())["facilities"]
        return opts

    def current_facility(self) -> Optional[str]:
        facilities = self.options()["facilities"]
        if self.selected_facility in facilities:
            return self.selected_facility
        return facilities[0] if facilities else None

    def overview(self) -> Dict[str, Any]:
        return compute_overview(self.filtered())

    def portfolio(self) -> Dict[str, Any]:
        return compute_portfolio_metrics(self.with_variance())

    def rankings(self) -> pd.DataFrame:
        return rank_records(self.with_variance(), self.sort_field, self.sort_direction)

    def system_comparison(self) -> List[Dict[str, Any]]:
        return compute_system_comparison(self.with_variance())

    def facility_detail(self) -> Dict[str, Any]:
        name = self.current_facility()
        variance = self.with_variance()
        record = variance[variance["facility_name"] == name] if name is not None else variance.iloc[0:0]
        return {
            "facility_name": name,
            "record": frame_to_records(record.head(1))[0] if not record.empty else None,
            "breakdown": facility_breakdown(variance, name) if name is not None else [],
        }
