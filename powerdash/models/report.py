from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class Granularity(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"


class StatisticsDetails(str, Enum):
    ONE_HOUR = "1h"
    ONE_DAY = "1d"
    THIRTY_DAYS = "30d"


ALL_CHANNELS = "all"


@dataclass(frozen=True)
class ReportRequest:
    """Raw form input. Any field may still be missing or malformed."""

    from_date: date | str | None
    to_date: date | str | None
    target_address: str | None
    granularity: Granularity | str | None
    channel_filter: int | str | None = ALL_CHANNELS
    multiplier: float | str | None = None


@dataclass(frozen=True)
class RawReportRequest:
    """Raw-data form input: no details and no multiplier."""

    from_date: date | str | None
    to_date: date | str | None
    target_address: str | None
    channel_filter: int | str | None = ALL_CHANNELS


@dataclass(frozen=True)
class ValidReportRequest:
    from_date: date
    to_date: date
    target_address: str
    granularity: Granularity
    channel_filter: int | None = None
    multiplier: float | None = None


@dataclass(frozen=True)
class ValidRawRequest:
    from_date: date
    to_date: date
    target_address: str
    channel_filter: int | None = None


@dataclass(frozen=True)
class ChannelDescriptor:
    channel_number: int
    channel_name: str
    owner_device_id: int


@dataclass(frozen=True)
class MeasurementRow:
    bucket_start: str
    bucket_end: str
    channel_number: int
    raw_value: float | None
    error: str | None = None


@dataclass(frozen=True)
class EnrichedRow:
    bucket_start: str
    bucket_end: str
    channel_number: int
    raw_value: float | None
    error: str | None = None
    channel_name: str | None = None
    multiplied_value: float | None = None


@dataclass(frozen=True)
class RawMeasurementRow:
    recorded_time: str
    channel_number: int
    measured_value: float | None
    error: str | None = None
    channel_name: str | None = None


@dataclass(frozen=True)
class StatisticsRow:
    asset_name: str | None = None
    power_meter_name: str | None = None
    channel_name: str | None = None
    avg: float = 0.0
    sum: float = 0.0


@dataclass(frozen=True)
class StatisticsSummary:
    asset_name: str
    per_channel_rows: list[StatisticsRow] = field(default_factory=list)
    total_average: float = 0.0
    total_sum: float = 0.0


@dataclass(frozen=True)
class ReportOutcome:
    sequence: int
    request: ValidReportRequest | ValidRawRequest
    rows: list[EnrichedRow] | list[RawMeasurementRow]
    error: str | None = None
    applied: bool = False
