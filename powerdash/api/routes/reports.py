from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from powerdash.api.deps import get_report_service, get_statistics_service
from powerdash.core.errors import (
    GENERIC_FORM_MESSAGE,
    ReportValidationError,
    TransportError,
)
from powerdash.models.report import (
    ALL_CHANNELS,
    RawReportRequest,
    ReportOutcome,
    ReportRequest,
)
from powerdash.schemas.reports import (
    EnrichedRowRead,
    FieldError,
    FormErrorDetail,
    RawReportResponse,
    RawRowRead,
    ReportResponse,
    StatisticsRowRead,
    StatisticsSummaryRead,
)
from powerdash.services.reports import ReportService, StatisticsService

router = APIRouter(prefix="/reports")

# Form fields stay plain strings; the validators reject unreadable values.
FormField = Annotated[str | None, Query()]


def _form_error(e: ReportValidationError) -> HTTPException:
    detail = FormErrorDetail(message=GENERIC_FORM_MESSAGE, errors=[FieldError(**e.as_dict())])
    return HTTPException(
        status_code=422,
        detail=detail.model_dump(),
    )


def _backend_unavailable(e: TransportError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=e.message,
    )


def _report_response(outcome: ReportOutcome) -> ReportResponse:
    return ReportResponse(
        sequence=outcome.sequence,
        applied=outcome.applied,
        error=outcome.error,
        rows=[
            EnrichedRowRead(
                bucket_start=r.bucket_start,
                bucket_end=r.bucket_end,
                channel=r.channel_number,
                raw_value=r.raw_value,
                channel_name=r.channel_name,
                multiplied_value=r.multiplied_value,
                error=r.error,
            )
            for r in outcome.rows
        ],
    )


def _raw_report_response(outcome: ReportOutcome) -> RawReportResponse:
    return RawReportResponse(
        sequence=outcome.sequence,
        applied=outcome.applied,
        error=outcome.error,
        rows=[
            RawRowRead(
                recorded_time=r.recorded_time,
                channel=r.channel_number,
                measured_value=r.measured_value,
                channel_name=r.channel_name,
                error=r.error,
            )
            for r in outcome.rows
        ],
    )


@router.get(
    "/measurements",
    response_model=ReportResponse,
    response_model_exclude_none=True,
)
def measurement_report(
    service: Annotated[ReportService, Depends(get_report_service)],
    fromdate: FormField = None,
    todate: FormField = None,
    ip: FormField = None,
    details: FormField = None,
    channel: FormField = ALL_CHANNELS,
    multiplier: FormField = None,
) -> ReportResponse:
    request = ReportRequest(
        from_date=fromdate,
        to_date=todate,
        target_address=ip,
        granularity=details,
        channel_filter=channel,
        multiplier=multiplier,
    )
    try:
        outcome = service.run(request)
    except ReportValidationError as e:
        raise _form_error(e) from e
    except TransportError as e:
        raise _backend_unavailable(e) from e
    return _report_response(outcome)


@router.get(
    "/measurements/current",
    response_model=ReportResponse,
    response_model_exclude_none=True,
)
def current_report(
    service: Annotated[ReportService, Depends(get_report_service)],
) -> ReportResponse:
    outcome = service.current()
    if outcome is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No report yet")
    return _report_response(outcome)


@router.get(
    "/raw",
    response_model=RawReportResponse,
    response_model_exclude_none=True,
)
def raw_report(
    service: Annotated[ReportService, Depends(get_report_service)],
    fromdate: FormField = None,
    todate: FormField = None,
    ip: FormField = None,
    channel: FormField = ALL_CHANNELS,
) -> RawReportResponse:
    request = RawReportRequest(
        from_date=fromdate,
        to_date=todate,
        target_address=ip,
        channel_filter=channel,
    )
    try:
        outcome = service.run_raw(request)
    except ReportValidationError as e:
        raise _form_error(e) from e
    except TransportError as e:
        raise _backend_unavailable(e) from e
    return _raw_report_response(outcome)


@router.get(
    "/raw/current",
    response_model=RawReportResponse,
    response_model_exclude_none=True,
)
def current_raw_report(
    service: Annotated[ReportService, Depends(get_report_service)],
) -> RawReportResponse:
    outcome = service.current_raw()
    if outcome is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No raw report yet")
    return _raw_report_response(outcome)


@router.get("/statistics", response_model=StatisticsSummaryRead)
def statistics(
    service: Annotated[StatisticsService, Depends(get_statistics_service)],
    asset_name_id: FormField = None,
    details: FormField = None,
) -> StatisticsSummaryRead:
    try:
        summary = service.summarize(asset_name_id=asset_name_id, details=details)
    except ReportValidationError as e:
        raise _form_error(e) from e
    except TransportError as e:
        raise _backend_unavailable(e) from e
    return StatisticsSummaryRead(
        asset_name=summary.asset_name,
        total_average=summary.total_average,
        total_sum=summary.total_sum,
        rows=[StatisticsRowRead.model_validate(r.__dict__) for r in summary.per_channel_rows],
    )
