from __future__ import annotations

import json
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Query, Request, status

from powerdash.clients.base import PowerMeterBackend
from powerdash.core.config import Settings
from powerdash.services.inventory import InventoryService
from powerdash.services.reports import (
    ChannelLookup,
    ReportSequencer,
    ReportService,
    ReportView,
    StatisticsService,
)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_backend(request: Request) -> PowerMeterBackend:
    return request.app.state.backend


def get_channel_lookup(request: Request) -> ChannelLookup:
    lookup = getattr(request.app.state, "channel_lookup", None)
    if not isinstance(lookup, ChannelLookup):
        lookup = ChannelLookup()
        request.app.state.channel_lookup = lookup
    return lookup


def get_report_sequencer(request: Request) -> ReportSequencer:
    return request.app.state.report_sequencer


def get_report_view(request: Request) -> ReportView:
    return request.app.state.report_view


def get_raw_report_view(request: Request) -> ReportView:
    return request.app.state.raw_report_view


def get_report_service(
    backend: Annotated[PowerMeterBackend, Depends(get_backend)],
    lookup: Annotated[ChannelLookup, Depends(get_channel_lookup)],
    sequencer: Annotated[ReportSequencer, Depends(get_report_sequencer)],
    view: Annotated[ReportView, Depends(get_report_view)],
    raw_view: Annotated[ReportView, Depends(get_raw_report_view)],
) -> ReportService:
    return ReportService(
        backend=backend,
        channel_lookup=lookup,
        sequencer=sequencer,
        view=view,
        raw_view=raw_view,
    )


def get_statistics_service(
    backend: Annotated[PowerMeterBackend, Depends(get_backend)],
) -> StatisticsService:
    return StatisticsService(backend=backend)


def get_inventory_service(
    backend: Annotated[PowerMeterBackend, Depends(get_backend)],
    lookup: Annotated[ChannelLookup, Depends(get_channel_lookup)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> InventoryService:
    return InventoryService(
        backend=backend,
        channel_lookup=lookup,
        default_page_size=settings.default_page_size,
    )


def parse_filter(
    filter_: Annotated[str | None, Query(alias="filter", max_length=2048)] = None,
) -> dict[str, Any] | None:
    if filter_ is None or not filter_.strip():
        return None
    try:
        value = json.loads(filter_)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'filter' must be a JSON object",
        ) from e
    if not isinstance(value, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'filter' must be a JSON object",
        )
    return value


Filters = Annotated[dict[str, Any] | None, Depends(parse_filter)]
