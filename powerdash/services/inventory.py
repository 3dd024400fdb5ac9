from __future__ import annotations

import dataclasses
from typing import Any

from powerdash.clients.base import PowerMeterBackend
from powerdash.models.inventory import Asset, AssetName, Channel, PowerMeter
from powerdash.models.report import ChannelDescriptor
from powerdash.services.reports import ChannelLookup


class InventoryService:
    def __init__(
        self,
        *,
        backend: PowerMeterBackend,
        channel_lookup: ChannelLookup | None = None,
        default_page_size: int = 100,
    ) -> None:
        self._backend = backend
        self._channel_lookup = channel_lookup or ChannelLookup()
        self._default_page_size = default_page_size

    def list_power_meters(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[PowerMeter]:
        if first is None and rowcount is None and filters is None:
            return self._backend.list_power_meters()
        return self._backend.list_power_meters(
            first=first or 0,
            rowcount=rowcount or self._default_page_size,
            filters=filters or {},
        )

    def count_power_meters(self, *, filters: dict[str, Any] | None = None) -> int:
        return self._backend.count_power_meters(filters=filters or {})

    def channel_descriptors(self, power_meter_id: int) -> list[ChannelDescriptor]:
        return self._channel_lookup.for_device(self._backend, power_meter_id)

    def list_channels(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Channel]:
        channels = self._backend.list_channels(
            first=first or 0,
            rowcount=rowcount or self._default_page_size,
            filters=filters or {},
        )
        meters = self._backend.list_power_meters()
        return join_power_meter_names(channels, meters)

    def count_channels(self, *, filters: dict[str, Any] | None = None) -> int:
        return self._backend.count_channels(filters=filters or {})

    def list_assets(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Asset]:
        return self._backend.list_assets(
            first=first or 0,
            rowcount=rowcount or self._default_page_size,
            filters=filters or {},
        )

    def count_assets(self, *, filters: dict[str, Any] | None = None) -> int:
        return self._backend.count_assets(filters=filters or {})

    def list_asset_names(self) -> list[AssetName]:
        return self._backend.list_asset_names()


def join_power_meter_names(
    channels: list[Channel], meters: list[PowerMeter]
) -> list[Channel]:
    names: dict[int, str] = {}
    for meter in meters:
        names.setdefault(meter.id, meter.power_meter_name)
    return [
        dataclasses.replace(
            channel,
            power_meter_name=names.get(channel.power_meter_id, channel.power_meter_name),
            enabled=bool(channel.enabled),
        )
        for channel in channels
    ]
