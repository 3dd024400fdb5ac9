from __future__ import annotations

from typing import Any, Protocol

from powerdash.models.inventory import Asset, AssetName, Channel, PowerMeter
from powerdash.models.report import (
    MeasurementRow,
    RawMeasurementRow,
    StatisticsDetails,
    StatisticsRow,
    ValidRawRequest,
    ValidReportRequest,
)


class PowerMeterBackend(Protocol):
    def close(self) -> None: ...

    def ping(self) -> None: ...

    def fetch_report(self, request: ValidReportRequest) -> list[MeasurementRow]: ...

    def fetch_raw_data(self, request: ValidRawRequest) -> list[RawMeasurementRow]: ...

    def fetch_statistics(
        self, *, asset_name_id: int, details: StatisticsDetails
    ) -> list[StatisticsRow]: ...

    def list_power_meters(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[PowerMeter]: ...

    def count_power_meters(self, *, filters: dict[str, Any] | None = None) -> int: ...

    def list_channels(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Channel]: ...

    def count_channels(self, *, filters: dict[str, Any] | None = None) -> int: ...

    def list_assets(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Asset]: ...

    def count_assets(self, *, filters: dict[str, Any] | None = None) -> int: ...

    def list_asset_names(self) -> list[AssetName]: ...
