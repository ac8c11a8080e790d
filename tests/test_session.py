"""End-to-end tests for the dashboard session context."""

import pandas as pd
import pytest

from conftest import csv_bytes
from fans.data import empty_records
from fans.ranking import SortField
from fans.session import DashboardSession


@pytest.fixture
def session(records: pd.DataFrame) -> DashboardSession:
    return DashboardSession(base=records)


class TestDerivedViews:
    """Tests for recomputed views."""

    def test_filters_flow_into_views(self, session: DashboardSession) -> None:
        """Changing filters changes every derived view."""
        session.set_filters({"health_system": "Beta Care"})

        assert session.overview()["record_count"] == 3
        assert [s["name"] for s in session.system_comparison()] == ["Beta Care"]
        assert session.rankings()["facility_name"].tolist() == ["West", "Central", "East"]

    def test_toggle_sort(self, session: DashboardSession) -> None:
        """Header clicks change the ranking order."""
        session.toggle_sort(SortField.AOE_VARIANCE_PCT)

        assert session.sort_direction == "asc"
        assert session.rankings().iloc[0]["facility_name"] == "South"

    def test_default_facility(self, session: DashboardSession) -> None:
        """The first facility in the filtered set is selected by default."""
        detail = session.facility_detail()

        assert detail["facility_name"] == "Central"
        assert detail["record"]["aoe_variance_pct"] == 0.0
        assert len(detail["breakdown"]) == 4

    def test_facility_without_peer_data(self, session: DashboardSession) -> None:
        """Facilities outside the variance set have no detail record."""
        session.selected_facility = "Imported Site"

        detail = session.facility_detail()

        assert detail["record"] is None
        assert detail["breakdown"] == []

    def test_empty_session(self) -> None:
        """An empty dataset never crashes any view."""
        session = DashboardSession(base=empty_records())

        assert session.overview()["record_count"] == 0
        assert session.portfolio()["top_performer"] is None
        assert session.system_comparison() == []
        assert session.rankings().empty
        assert session.facility_detail()["facility_name"] is None


class TestImportFlow:
    """Tests for importing into a session."""

    def test_import_appends_without_touching_base(self, session: DashboardSession, records: pd.DataFrame) -> None:
        """Imported rows show up in overview but not in variance views."""
        content = csv_bytes(["Facility", "System", "AOE PPD"], [["New Site", "New System", 42.0]])

        assert session.process_upload(content, "new.csv") == "preview"
        result = session.confirm_import()

        assert result.records_imported == 1
        assert len(session.base) == len(records)
        assert session.records()["facility_name"].iloc[-1] == "New Site"
        assert session.overview()["record_count"] == len(records) + 1
        assert "New Site" not in session.with_variance()["facility_name"].tolist()
        assert "New System" in session.options()["health_systems"]

    def test_unsupported_upload_is_skipped(self, session: DashboardSession) -> None:
        """Files with other extensions never reach the pipeline."""
        assert session.process_upload(b"hello", "notes.txt") is None
        assert session.pipeline.step == "upload"
        assert session.pipeline.result is None

    def test_close_resets_pipeline(self, session: DashboardSession) -> None:
        """Closing the dialog discards the preview."""
        session.process_upload(csv_bytes(["Facility"], [["A"]]), "a.csv")

        session.close_import()

        assert session.pipeline.step == "upload"
        assert len(session.imported) == 0
