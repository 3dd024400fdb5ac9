from __future__ import annotations

from pydantic import BaseModel, Field


class PowerMeterRead(BaseModel):
    id: int
    power_meter_name: str
    ip_address: str
    port: int | None = None
    time_zone: str | None = None
    enabled: bool


class ChannelRead(BaseModel):
    id: int
    power_meter_id: int
    channel: int
    channel_name: str
    enabled: bool
    power_meter_name: str | None = None


class ChannelDescriptorRead(BaseModel):
    channel_number: int
    channel_name: str
    owner_device_id: int


class AssetRead(BaseModel):
    id: int
    asset_name_id: int | None = None
    channel_id: int | None = None
    asset_name: str | None = None
    power_meter_name: str | None = None
    channel_name: str | None = None


class AssetNameRead(BaseModel):
    id: int
    name: str


class CountRead(BaseModel):
    count: int = Field(ge=0)
