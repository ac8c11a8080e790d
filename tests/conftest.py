"""Shared fixtures for the dashboard core tests."""

import io
from typing import Any

import pandas as pd
import pytest

from fans.data import records_to_frame


def make_record(name: str, **fields: Any) -> dict[str, Any]:
    rec: dict[str, Any] = {
        "facility_name": name,
        "display_name": name,
        "health_system": "Alpha Health",
        "period": "FY2024",
        "daily_census": 100.0,
    }
    rec.update(fields)
    return rec


@pytest.fixture
def records() -> pd.DataFrame:
    """Five curated records plus one imported-style record without peer data."""
    return records_to_frame(
        [
            make_record("North", aoe_ppd=100.0, aoe_peer_mid=90.0, labor_ppd=50.0, labor_peer_mid=40.0, daily_census=200.0),
            make_record("South", aoe_ppd=80.0, aoe_peer_mid=90.0, labor_ppd=30.0, labor_peer_mid=40.0, daily_census=50.0),
            make_record("East", health_system="Beta Care", period="FY2023", aoe_ppd=45.0, aoe_peer_mid=50.0, cogs_ppd=12.0, cogs_peer_mid=10.0),
            make_record("West", health_system="Beta Care", aoe_ppd=60.0, aoe_peer_mid=50.0, revenue_ppd=55.0, revenue_peer_mid=50.0, daily_census=None),
            make_record("Central", health_system="Beta Care", period="FY2023", aoe_ppd=50.0, aoe_peer_mid=50.0, daily_census=400.0),
            make_record("Imported Site", health_system="Imported", period="Imported", aoe_ppd=70.0, daily_census=10.0),
        ]
    )


def csv_bytes(headers: list[str], rows: list[list[Any]]) -> bytes:
    return pd.DataFrame(rows, columns=headers).to_csv(index=False).encode("utf-8")


def xlsx_bytes(sheets: dict[str, pd.DataFrame]) -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, df in sheets.items():
            df.to_excel(writer, sheet_name=name, index=False)
    return buf.getvalue()
