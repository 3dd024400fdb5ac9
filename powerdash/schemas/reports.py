from __future__ import annotations

from pydantic import BaseModel, Field


class EnrichedRowRead(BaseModel):
    bucket_start: str
    bucket_end: str
    channel: int
    raw_value: float | None = None
    channel_name: str | None = None
    multiplied_value: float | None = None
    error: str | None = None


class ReportResponse(BaseModel):
    sequence: int = Field(ge=1)
    applied: bool
    rows: list[EnrichedRowRead] = Field(default_factory=list)
    error: str | None = None


class RawRowRead(BaseModel):
    recorded_time: str
    channel: int
    measured_value: float | None = None
    channel_name: str | None = None
    error: str | None = None


class RawReportResponse(BaseModel):
    sequence: int = Field(ge=1)
    applied: bool
    rows: list[RawRowRead] = Field(default_factory=list)
    error: str | None = None


class FieldError(BaseModel):
    kind: str
    field: str | None = None
    message: str


class FormErrorDetail(BaseModel):
    message: str
    errors: list[FieldError] = Field(default_factory=list)


class StatisticsRowRead(BaseModel):
    asset_name: str | None = None
    power_meter_name: str | None = None
    channel_name: str | None = None
    avg: float
    sum: float


class StatisticsSummaryRead(BaseModel):
    asset_name: str
    rows: list[StatisticsRowRead] = Field(default_factory=list)
    total_average: float
    total_sum: float
