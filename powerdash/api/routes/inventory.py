from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from powerdash.api.deps import Filters, get_inventory_service
from powerdash.core.errors import TransportError
from powerdash.schemas.inventory import (
    AssetNameRead,
    AssetRead,
    ChannelDescriptorRead,
    ChannelRead,
    CountRead,
    PowerMeterRead,
)
from powerdash.services.inventory import InventoryService

router = APIRouter()

Service = Annotated[InventoryService, Depends(get_inventory_service)]
First = Annotated[int | None, Query(ge=0)]
RowCount = Annotated[int | None, Query(ge=1, le=1000)]


def _backend_unavailable(e: TransportError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=e.message,
    )


@router.get("/power-meters", response_model=list[PowerMeterRead], tags=["power meters"])
def list_power_meters(
    service: Service,
    filters: Filters,
    first: First = None,
    rowcount: RowCount = None,
) -> list[PowerMeterRead]:
    try:
        rows = service.list_power_meters(first=first, rowcount=rowcount, filters=filters)
    except TransportError as e:
        raise _backend_unavailable(e) from e
    return [PowerMeterRead.model_validate(r.__dict__) for r in rows]


@router.get("/power-meters/count", response_model=CountRead, tags=["power meters"])
def count_power_meters(service: Service, filters: Filters) -> CountRead:
    try:
        return CountRead(count=service.count_power_meters(filters=filters))
    except TransportError as e:
        raise _backend_unavailable(e) from e


@router.get(
    "/power-meters/{power_meter_id}/channels",
    response_model=list[ChannelDescriptorRead],
    tags=["power meters"],
)
def power_meter_channels(service: Service, power_meter_id: int) -> list[ChannelDescriptorRead]:
    try:
        rows = service.channel_descriptors(power_meter_id)
    except TransportError as e:
        raise _backend_unavailable(e) from e
    return [ChannelDescriptorRead.model_validate(r.__dict__) for r in rows]


@router.get("/channels", response_model=list[ChannelRead], tags=["channels"])
def list_channels(
    service: Service,
    filters: Filters,
    first: First = None,
    rowcount: RowCount = None,
) -> list[ChannelRead]:
    try:
        rows = service.list_channels(first=first, rowcount=rowcount, filters=filters)
    except TransportError as e:
        raise _backend_unavailable(e) from e
    return [ChannelRead.model_validate(r.__dict__) for r in rows]


@router.get("/channels/count", response_model=CountRead, tags=["channels"])
def count_channels(service: Service, filters: Filters) -> CountRead:
    try:
        return CountRead(count=service.count_channels(filters=filters))
    except TransportError as e:
        raise _backend_unavailable(e) from e


@router.get("/assets", response_model=list[AssetRead], tags=["assets"])
def list_assets(
    service: Service,
    filters: Filters,
    first: First = None,
    rowcount: RowCount = None,
) -> list[AssetRead]:
    try:
        rows = service.list_assets(first=first, rowcount=rowcount, filters=filters)
    except TransportError as e:
        raise _backend_unavailable(e) from e
    return [AssetRead.model_validate(r.__dict__) for r in rows]


@router.get("/assets/count", response_model=CountRead, tags=["assets"])
def count_assets(service: Service, filters: Filters) -> CountRead:
    try:
        return CountRead(count=service.count_assets(filters=filters))
    except TransportError as e:
        raise _backend_unavailable(e) from e


@router.get("/assets/names", response_model=list[AssetNameRead], tags=["assets"])
def list_asset_names(service: Service) -> list[AssetNameRead]:
    try:
        rows = service.list_asset_names()
    except TransportError as e:
        raise _backend_unavailable(e) from e
    return [AssetNameRead.model_validate(r.__dict__) for r in rows]
