from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from powerdash.core.errors import ReportError, TransportError
from powerdash.models.inventory import Asset, AssetName, Channel, PowerMeter
from powerdash.models.report import (
    MeasurementRow,
    RawMeasurementRow,
    StatisticsDetails,
    StatisticsRow,
    ValidRawRequest,
    ValidReportRequest,
)


@dataclass
class FakePowerMeterBackend:
    power_meters: list[PowerMeter] = field(default_factory=list)
    channels: list[Channel] = field(default_factory=list)
    assets: list[Asset] = field(default_factory=list)
    asset_names: list[AssetName] = field(default_factory=list)
    report_rows: list[MeasurementRow] = field(default_factory=list)
    report_err: str | None = None
    raw_rows: list[RawMeasurementRow] = field(default_factory=list)
    raw_err: str | None = None
    statistics_rows: list[StatisticsRow] = field(default_factory=list)
    unavailable: bool = False
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def close(self) -> None:
        return None

    def ping(self) -> None:
        self._record("ping")

    def fetch_report(self, request: ValidReportRequest) -> list[MeasurementRow]:
        self._record("fetch_report", request=request)
        if self.report_err is not None:
            raise ReportError(self.report_err)
        return list(self.report_rows)

    def fetch_raw_data(self, request: ValidRawRequest) -> list[RawMeasurementRow]:
        self._record("fetch_raw_data", request=request)
        if self.raw_err is not None:
            raise ReportError(self.raw_err)
        return list(self.raw_rows)

    def fetch_statistics(
        self, *, asset_name_id: int, details: StatisticsDetails
    ) -> list[StatisticsRow]:
        self._record("fetch_statistics", asset_name_id=asset_name_id, details=details)
        return list(self.statistics_rows)

    def list_power_meters(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[PowerMeter]:
        self._record("list_power_meters", first=first, rowcount=rowcount, filters=filters)
        return _page(self.power_meters, first, rowcount)

    def count_power_meters(self, *, filters: dict[str, Any] | None = None) -> int:
        self._record("count_power_meters", filters=filters)
        return len(self.power_meters)

    def list_channels(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Channel]:
        self._record("list_channels", first=first, rowcount=rowcount, filters=filters)
        rows = self.channels
        if filters and "power_meter_id" in filters:
            rows = [c for c in rows if c.power_meter_id == filters["power_meter_id"]]
        return _page(rows, first, rowcount)

    def count_channels(self, *, filters: dict[str, Any] | None = None) -> int:
        self._record("count_channels", filters=filters)
        return len(self.channels)

    def list_assets(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Asset]:
        self._record("list_assets", first=first, rowcount=rowcount, filters=filters)
        return _page(self.assets, first, rowcount)

    def count_assets(self, *, filters: dict[str, Any] | None = None) -> int:
        self._record("count_assets", filters=filters)
        return len(self.assets)

    def list_asset_names(self) -> list[AssetName]:
        self._record("list_asset_names")
        return list(self.asset_names)

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _record(self, name: str, **kwargs: Any) -> None:
        if self.unavailable:
            raise TransportError("Connection refused")
        self.calls.append((name, kwargs))


def _page(rows: list, first: int | None, rowcount: int | None) -> list:
    start = first or 0
    if rowcount is None:
        return list(rows[start:])
    return list(rows[start : start + rowcount])


def sample_backend() -> FakePowerMeterBackend:
    return FakePowerMeterBackend(
        power_meters=[
            PowerMeter(id=1, power_meter_name="Main building", ip_address="10.0.0.5",
                       port=502, time_zone="Europe/Budapest", enabled=True),
            PowerMeter(id=2, power_meter_name="Workshop", ip_address="10.0.0.6",
                       port=502, time_zone="Europe/Budapest", enabled=False),
        ],
        channels=[
            Channel(id=11, power_meter_id=1, channel=1, channel_name="Lighting"),
            Channel(id=12, power_meter_id=1, channel=2, channel_name="HVAC"),
            Channel(id=21, power_meter_id=2, channel=1, channel_name="Compressor"),
            Channel(id=99, power_meter_id=7, channel=3, channel_name="Orphan"),
        ],
        assets=[
            Asset(id=1, asset_name_id=5, channel_id=11, asset_name="Office",
                  power_meter_name="Main building", channel_name="Lighting"),
        ],
        asset_names=[AssetName(id=5, name="Office")],
        report_rows=[
            MeasurementRow("2024-01-01 00:00", "2024-01-02 00:00", 1, 100.0),
            MeasurementRow("2024-01-01 00:00", "2024-01-02 00:00", 2, 40.0),
            MeasurementRow("2024-01-01 00:00", "2024-01-02 00:00", 4, 7.5),
        ],
        raw_rows=[
            RawMeasurementRow("2024-01-01 00:00:00", 1, 12.5),
            RawMeasurementRow("2024-01-01 00:00:00", 2, 3.25),
            RawMeasurementRow("2024-01-01 00:15:00", 9, None, error="timeout"),
        ],
        statistics_rows=[
            StatisticsRow(asset_name="Office", power_meter_name="Main building",
                          channel_name="Lighting", avg=2.12346, sum=10.5),
            StatisticsRow(asset_name="Office", power_meter_name="Main building",
                          channel_name="HVAC", avg=3.0, sum=5.25),
        ],
    )
