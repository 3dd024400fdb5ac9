from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Callable

from powerdash.clients.base import PowerMeterBackend
from powerdash.core.errors import MissingField, ReportError, TransportError
from powerdash.models.report import (
    ChannelDescriptor,
    RawReportRequest,
    ReportOutcome,
    ReportRequest,
    StatisticsDetails,
    StatisticsSummary,
    ValidRawRequest,
    ValidReportRequest,
)
from powerdash.services.enrichment import enrich, enrich_raw, summarize
from powerdash.services.validation import (
    current_year,
    validate_raw_request,
    validate_report_request,
)

logger = logging.getLogger(__name__)


class ReportSequencer:
    """Hands out strictly increasing submission numbers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    @property
    def last(self) -> int:
        with self._lock:
            return self._last

    def next(self) -> int:
        with self._lock:
            self._last += 1
            return self._last


class ReportView:
    """The report currently on display.

    An outcome is applied only when its sequence number is higher than every
    sequence applied before it, so a slow stale response can never overwrite
    the result of a later submission.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: ReportOutcome | None = None

    def offer(self, outcome: ReportOutcome) -> ReportOutcome:
        with self._lock:
            if self._current is not None and outcome.sequence <= self._current.sequence:
                logger.info(
                    "Discarding stale report #%d (showing #%d)",
                    outcome.sequence,
                    self._current.sequence,
                )
                return dataclasses.replace(outcome, applied=False)
            applied = dataclasses.replace(outcome, applied=True)
            self._current = applied
            return applied

    def current(self) -> ReportOutcome | None:
        with self._lock:
            return self._current


class ChannelLookup:
    """Channel descriptors of the currently selected device.

    Only one device is cached at a time. Selecting another device drops the
    previous set and fetches the new one. The address-to-device mapping is
    kept alongside and the power-meter list is reloaded only when an address
    is not in it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._device_id: int | None = None
        self._descriptors: list[ChannelDescriptor] = []
        self._device_ids: dict[str, int] = {}

    @property
    def device_id(self) -> int | None:
        with self._lock:
            return self._device_id

    def for_device(
        self, backend: PowerMeterBackend, power_meter_id: int
    ) -> list[ChannelDescriptor]:
        with self._lock:
            if self._device_id == power_meter_id:
                return list(self._descriptors)

        channels = backend.list_channels(filters={"power_meter_id": power_meter_id})
        descriptors = [
            ChannelDescriptor(
                channel_number=c.channel,
                channel_name=c.channel_name,
                owner_device_id=c.power_meter_id,
            )
            for c in channels
        ]
        logger.info(
            "Loaded %d channel(s) for power meter %d", len(descriptors), power_meter_id
        )
        with self._lock:
            self._device_id = power_meter_id
            self._descriptors = descriptors
        return list(descriptors)

    def for_address(self, backend: PowerMeterBackend, address: str) -> list[ChannelDescriptor]:
        with self._lock:
            power_meter_id = self._device_ids.get(address)

        if power_meter_id is None:
            device_ids: dict[str, int] = {}
            for meter in backend.list_power_meters():
                device_ids.setdefault(meter.ip_address, meter.id)
            with self._lock:
                self._device_ids = device_ids
            power_meter_id = device_ids.get(address)
            if power_meter_id is None:
                return []
        return self.for_device(backend, power_meter_id)


class PendingReport:
    """A submitted report that has not been fetched yet.

    ``resolve`` runs the fetch at most once. Later calls return the first
    outcome (or re-raise the first transport failure) without touching the
    network again.
    """

    def __init__(
        self,
        *,
        sequence: int,
        request: ValidReportRequest | ValidRawRequest,
        execute: Callable[[PendingReport], ReportOutcome],
    ) -> None:
        self.sequence = sequence
        self.request = request
        self._execute = execute
        self._lock = threading.Lock()
        self._outcome: ReportOutcome | None = None
        self._failure: TransportError | None = None

    @property
    def resolved(self) -> bool:
        return self._outcome is not None or self._failure is not None

    def resolve(self) -> ReportOutcome:
        with self._lock:
            if self._failure is not None:
                raise self._failure
            if self._outcome is None:
                try:
                    self._outcome = self._execute(self)
                except TransportError as e:
                    self._failure = e
                    raise
            return self._outcome


class ReportService:
    """Validate, fetch and enrich measurement reports.

    Aggregated reports and raw-data reports draw sequence numbers from the
    same sequencer but are displayed in separate views.
    """

    def __init__(
        self,
        *,
        backend: PowerMeterBackend,
        channel_lookup: ChannelLookup,
        sequencer: ReportSequencer,
        view: ReportView,
        raw_view: ReportView | None = None,
        now_year: int | None = None,
    ) -> None:
        self._backend = backend
        self._channels = channel_lookup
        self._sequencer = sequencer
        self._view = view
        self._raw_view = raw_view or ReportView()
        self._now_year = now_year

    def submit(self, request: ReportRequest) -> PendingReport:
        now_year = self._now_year if self._now_year is not None else current_year()
        valid = validate_report_request(request, now_year=now_year)
        sequence = self._sequencer.next()
        logger.info(
            "Report #%d submitted: ip=%s %s..%s details=%s",
            sequence,
            valid.target_address,
            valid.from_date.isoformat(),
            valid.to_date.isoformat(),
            valid.granularity.value,
        )
        return PendingReport(sequence=sequence, request=valid, execute=self._execute)

    def submit_raw(self, request: RawReportRequest) -> PendingReport:
        valid = validate_raw_request(request)
        sequence = self._sequencer.next()
        logger.info(
            "Raw report #%d submitted: ip=%s %s..%s",
            sequence,
            valid.target_address,
            valid.from_date.isoformat(),
            valid.to_date.isoformat(),
        )
        return PendingReport(sequence=sequence, request=valid, execute=self._execute_raw)

    def run(self, request: ReportRequest) -> ReportOutcome:
        return self.submit(request).resolve()

    def run_raw(self, request: RawReportRequest) -> ReportOutcome:
        return self.submit_raw(request).resolve()

    def current(self) -> ReportOutcome | None:
        return self._view.current()

    def current_raw(self) -> ReportOutcome | None:
        return self._raw_view.current()

    def _execute(self, pending: PendingReport) -> ReportOutcome:
        request = pending.request
        try:
            rows = self._backend.fetch_report(request)
        except ReportError as e:
            outcome = ReportOutcome(
                sequence=pending.sequence, request=request, rows=[], error=e.message
            )
            return self._view.offer(outcome)

        channels = self._channel_descriptors(request.target_address)
        outcome = ReportOutcome(
            sequence=pending.sequence,
            request=request,
            rows=enrich(rows, channels, multiplier=request.multiplier),
        )
        return self._view.offer(outcome)

    def _execute_raw(self, pending: PendingReport) -> ReportOutcome:
        request = pending.request
        try:
            rows = self._backend.fetch_raw_data(request)
        except ReportError as e:
            outcome = ReportOutcome(
                sequence=pending.sequence, request=request, rows=[], error=e.message
            )
            return self._raw_view.offer(outcome)

        channels = self._channel_descriptors(request.target_address)
        outcome = ReportOutcome(
            sequence=pending.sequence, request=request, rows=enrich_raw(rows, channels)
        )
        return self._raw_view.offer(outcome)

    def _channel_descriptors(self, address: str) -> list[ChannelDescriptor]:
        try:
            return self._channels.for_address(self._backend, address)
        except TransportError:
            logger.warning("Channel names unavailable for %s", address, exc_info=True)
            return []


class StatisticsService:
    def __init__(self, *, backend: PowerMeterBackend) -> None:
        self._backend = backend

    def summarize(
        self,
        *,
        asset_name_id: int | str | None,
        details: StatisticsDetails | str | None,
    ) -> StatisticsSummary:
        if asset_name_id is None or asset_name_id == "":
            raise MissingField("Asset is required.", field="asset_name_id")
        try:
            asset = int(asset_name_id)
        except ValueError as e:
            raise MissingField("Asset must be a number.", field="asset_name_id") from e
        if details is None or details == "":
            raise MissingField("Interval is required.", field="details")
        try:
            interval = StatisticsDetails(details)
        except ValueError as e:
            raise MissingField("Interval must be one of 1h, 1d, 30d.", field="details") from e
        rows = self._backend.fetch_statistics(asset_name_id=asset, details=interval)
        return summarize(rows)
