from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PowerMeter:
    id: int
    power_meter_name: str
    ip_address: str
    port: int | None = None
    time_zone: str | None = None
    enabled: bool = True


@dataclass(frozen=True)
class Channel:
    id: int
    power_meter_id: int
    channel: int
    channel_name: str
    enabled: bool = True
    power_meter_name: str | None = None


@dataclass(frozen=True)
class Asset:
    id: int
    asset_name_id: int | None = None
    channel_id: int | None = None
    asset_name: str | None = None
    power_meter_name: str | None = None
    channel_name: str | None = None


@dataclass(frozen=True)
class AssetName:
    id: int
    name: str
