"""Tests for reference data loading."""

import json
from pathlib import Path

import pandas as pd
import pytest
from pydantic import ValidationError

from fans.data import (
    BENCHMARKS_PATH,
    RECORD_COLUMNS,
    combine_records,
    frame_to_records,
    load_benchmarks,
    load_dashboard_data,
    load_summary,
    records_to_frame,
    round_half_up,
)


def write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestLoadBenchmarks:
    """Tests for load_benchmarks."""

    def test_bundled_dataset(self) -> None:
        """The shipped dataset loads with canonical columns."""
        df = load_benchmarks()

        assert BENCHMARKS_PATH.exists()
        assert list(df.columns) == RECORD_COLUMNS
        assert not df.empty

    def test_nulls_tolerated(self, tmp_path: Path) -> None:
        """Only facility_name is required; display_name defaults to it."""
        path = write_json(tmp_path / "b.json", [{"facility_name": "Solo", "aoe_ppd": None}])

        df = load_benchmarks(path)

        assert df.loc[0, "display_name"] == "Solo"
        assert pd.isna(df.loc[0, "aoe_ppd"])
        assert df.loc[0, "health_system"] is None

    def test_missing_facility_name_fails(self, tmp_path: Path) -> None:
        """A record without facility_name is rejected loudly."""
        path = write_json(tmp_path / "b.json", [{"facility_name": "Ok"}, {"health_system": "X"}])

        with pytest.raises(ValidationError):
            load_benchmarks(path)

    def test_not_a_list(self, tmp_path: Path) -> None:
        """The benchmark file must hold a list."""
        path = write_json(tmp_path / "b.json", {"facility_name": "Solo"})

        with pytest.raises(ValueError):
            load_benchmarks(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_benchmarks(tmp_path / "nope.json")

    def test_returns_copy(self, tmp_path: Path) -> None:
        """Mutating a loaded frame does not leak into the cache."""
        path = write_json(tmp_path / "b.json", [{"facility_name": "Solo"}])

        first = load_benchmarks(path)
        first.loc[0, "facility_name"] = "Changed"

        assert load_benchmarks(path).loc[0, "facility_name"] == "Solo"


class TestLoadSummary:
    """Tests for load_summary."""

    def test_bundled_summary(self) -> None:
        """Peer benchmark bands parse into models."""
        summary = load_summary()

        assert summary.total_health_systems == 3
        band = summary.peer_benchmarks[0].aoe_ppd
        assert band.p25 <= band.p50 <= band.p75

    def test_dashboard_data(self) -> None:
        """Both datasets load together."""
        ctx = load_dashboard_data()
        assert set(ctx) == {"benchmarks", "summary"}


class TestFrameHelpers:
    """Tests for frame conversion helpers."""

    def test_frame_to_records_nulls(self) -> None:
        """NaN becomes None in exported dicts."""
        rows = frame_to_records(records_to_frame([{"facility_name": "A", "aoe_ppd": 1.5}]))

        assert rows[0]["aoe_ppd"] == 1.5
        assert rows[0]["labor_ppd"] is None

    def test_combine_keeps_base_first(self) -> None:
        """Imported rows follow the base rows."""
        base = records_to_frame([{"facility_name": "A"}])
        imported = records_to_frame([{"facility_name": "B"}])

        out = combine_records(base, imported)

        assert out["facility_name"].tolist() == ["A", "B"]
        assert base["facility_name"].tolist() == ["A"]

    @pytest.mark.parametrize(
        ("value", "ndigits", "expected"),
        [(182.5, 0, 183.0), (-182.5, 0, -183.0), (1.125, 2, 1.13), (11.04, 1, 11.0)],
    )
    def test_round_half_up(self, value: float, ndigits: int, expected: float) -> None:
        """Halves round away from zero."""
        assert round_half_up(value, ndigits) == expected

    @pytest.mark.parametrize("value", [None, float("nan"), pd.NA])
    def test_round_half_up_missing(self, value: object) -> None:
        """Missing values stay missing."""
        assert round_half_up(value) is None
