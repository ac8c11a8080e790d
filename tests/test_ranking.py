"""Tests for ranking by a sortable field."""

import pandas as pd
import pytest

from fans.ranking import SortField, next_sort, rank_records
from fans.variance import facilities_with_variance


@pytest.fixture
def variance_records(records: pd.DataFrame) -> pd.DataFrame:
    return facilities_with_variance(records)


class TestRankRecords:
    """Tests for rank_records."""

    def test_default_is_worst_first(self, variance_records: pd.DataFrame) -> None:
        """Default sort is AOE variance pct descending."""
        out = rank_records(variance_records)
        assert out["facility_name"].tolist() == ["West", "North", "Central", "East", "South"]

    def test_ascending(self, variance_records: pd.DataFrame) -> None:
        """Ascending puts the best performer first."""
        out = rank_records(variance_records, SortField.AOE_VARIANCE_PCT, "asc")
        assert out["facility_name"].tolist() == ["South", "East", "Central", "North", "West"]

    @pytest.mark.parametrize("direction", ["asc", "desc"])
    @pytest.mark.parametrize("field", list(SortField))
    def test_nulls_sink(self, variance_records: pd.DataFrame, field: SortField, direction: str) -> None:
        """Null values come after every non-null value in both directions."""
        out = rank_records(variance_records, field, direction)
        is_null = out[field.value].isna().tolist()
        assert is_null == sorted(is_null)

    def test_revenue_nulls_last(self, variance_records: pd.DataFrame) -> None:
        """The only facility with revenue data leads either way."""
        for direction in ("asc", "desc"):
            out = rank_records(variance_records, "revenue_variance_pct", direction)
            assert out.iloc[0]["facility_name"] == "West"
            assert out.iloc[1:]["revenue_variance_pct"].isna().all()

    def test_stable_ties(self, variance_records: pd.DataFrame) -> None:
        """Equal keys keep their input order."""
        out = rank_records(variance_records, "cogs_variance_pct", "asc")
        assert out["facility_name"].tolist() == ["East", "North", "South", "West", "Central"]

    def test_does_not_mutate(self, variance_records: pd.DataFrame) -> None:
        """The caller's frame keeps its order."""
        before = variance_records.copy()
        rank_records(variance_records, SortField.DAILY_CENSUS, "asc")
        pd.testing.assert_frame_equal(variance_records, before)

    def test_unknown_field(self, variance_records: pd.DataFrame) -> None:
        """Only enumerated fields can be sorted on."""
        with pytest.raises(ValueError):
            rank_records(variance_records, "facility_name")

    def test_unknown_direction(self, variance_records: pd.DataFrame) -> None:
        """Direction must be asc or desc."""
        with pytest.raises(ValueError):
            rank_records(variance_records, SortField.AOE_PPD, "sideways")


class TestNextSort:
    """Tests for header-click sort toggling."""

    def test_same_field_toggles(self) -> None:
        """Clicking the active column flips direction."""
        assert next_sort(SortField.AOE_PPD, "desc", "aoe_ppd") == (SortField.AOE_PPD, "asc")
        assert next_sort(SortField.AOE_PPD, "asc", "aoe_ppd") == (SortField.AOE_PPD, "desc")

    def test_new_field_starts_ascending(self) -> None:
        """A new column starts ascending."""
        assert next_sort(SortField.AOE_PPD, "desc", SortField.DAILY_CENSUS) == (SortField.DAILY_CENSUS, "asc")
