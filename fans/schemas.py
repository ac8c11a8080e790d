from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class BenchmarkRecordModel(BaseModel):
    facility_name: str
    display_name: Optional[str] = None
    health_system: Optional[str] = None
    period: Optional[str] = None
    daily_census: Optional[float] = None
    aoe_ppd: Optional[float] = None
    aoe_peer_min: Optional[float] = None
    aoe_peer_mid: Optional[float] = None
    aoe_peer_max: Optional[float] = None
    labor_ppd: Optional[float] = None
    labor_peer_min: Optional[float] = None
    labor_peer_mid: Optional[float] = None
    labor_peer_max: Optional[float] = None
    cogs_ppd: Optional[float] = None
    cogs_peer_min: Optional[float] = None
    cogs_peer_mid: Optional[float] = None
    cogs_peer_max: Optional[float] = None
    revenue_ppd: Optional[float] = None
    revenue_peer_min: Optional[float] = None
    revenue_peer_mid: Optional[float] = None
    revenue_peer_max: Optional[float] = None
    productive_ftes: Optional[float] = None

    @model_validator(mode="after")
    def _default_display_name(self) -> "BenchmarkRecordModel":
        if self.display_name is None:
            self.display_name = self.facility_name
        return self


class PercentileBand(BaseModel):
    p25: Optional[float] = None
    p50: Optional[float] = None
    p75: Optional[float] = None


class PeerBenchmarkModel(BaseModel):
    census_label: str
    count: int = 0
    aoe_ppd: PercentileBand = Field(default_factory=PercentileBand)
    labor_ppd: PercentileBand = Field(default_factory=PercentileBand)
    cogs_ppd: PercentileBand = Field(default_factory=PercentileBand)
    revenue_ppd: PercentileBand = Field(default_factory=PercentileBand)


class HealthSystemCount(BaseModel):
    name: str
    facilities: int = 0
    records: int = 0


class PeriodCount(BaseModel):
    label: str
    records: int = 0


class SummaryModel(BaseModel):
    total_facilities: int = 0
    total_health_systems: int = 0
    total_periods: int = 0
    total_records: int = 0
    health_systems: List[HealthSystemCount] = Field(default_factory=list)
    periods: List[PeriodCount] = Field(default_factory=list)
    peer_benchmarks: List[PeerBenchmarkModel] = Field(default_factory=list)
