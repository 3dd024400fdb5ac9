from __future__ import annotations

import ipaddress
import math
from datetime import date

from powerdash.core.errors import (
    CrossYearRange,
    GranularityTooFine,
    InvalidAddress,
    InvalidMultiplier,
    InvertedRange,
    MissingField,
    ReportValidationError,
)
from powerdash.models.report import (
    ALL_CHANNELS,
    Granularity,
    RawReportRequest,
    ReportRequest,
    ValidRawRequest,
    ValidReportRequest,
)

REQUIRED_FIELDS = ("from_date", "to_date", "target_address", "granularity")
RAW_REQUIRED_FIELDS = ("from_date", "to_date", "target_address")


def current_year() -> int:
    return date.today().year


def is_ipv4_address(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def validate_report_request(request: ReportRequest, *, now_year: int) -> ValidReportRequest:
    """Check a report form before it is sent.

    Rules run in a fixed order and the first failure is raised:

    1. required fields present and readable (``MissingField``)
    2. target address is a dotted-quad IPv4 address (``InvalidAddress``)
    3. a range starting before ``now_year`` needs monthly details
       (``GranularityTooFine``)
    4. both dates in the same calendar year (``CrossYearRange``)
    5. ``to_date`` not before ``from_date`` (``InvertedRange``)

    Channel filter and multiplier are checked last.
    """
    _require(request, REQUIRED_FIELDS)
    from_date = _parse_date(request.from_date, "from_date")
    to_date = _parse_date(request.to_date, "to_date")
    granularity = _granularity(request.granularity)
    address = _address(request.target_address)

    if from_date.year < now_year and granularity is not Granularity.MONTHLY:
        raise GranularityTooFine(
            "Details must be monthly when the requested year is before the current year.",
            field="granularity",
        )
    _check_range(from_date, to_date)

    return ValidReportRequest(
        from_date=from_date,
        to_date=to_date,
        target_address=address,
        granularity=granularity,
        channel_filter=_channel_filter(request.channel_filter),
        multiplier=_multiplier(request.multiplier),
    )


def validate_raw_request(request: RawReportRequest) -> ValidRawRequest:
    """Check a raw-data form: the report rules without details or multiplier."""
    _require(request, RAW_REQUIRED_FIELDS)
    from_date = _parse_date(request.from_date, "from_date")
    to_date = _parse_date(request.to_date, "to_date")
    address = _address(request.target_address)
    _check_range(from_date, to_date)
    return ValidRawRequest(
        from_date=from_date,
        to_date=to_date,
        target_address=address,
        channel_filter=_channel_filter(request.channel_filter),
    )


def _require(request: ReportRequest | RawReportRequest, names: tuple[str, ...]) -> None:
    for name in names:
        value = getattr(request, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingField(f"{name.replace('_', ' ')} is required.", field=name)


def _parse_date(value: date | str, name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise MissingField(
            f"{name.replace('_', ' ')} must be a date (YYYY-MM-DD).", field=name
        ) from e


def _granularity(value: Granularity | str) -> Granularity:
    if isinstance(value, Granularity):
        return value
    try:
        return Granularity(value.strip().lower())
    except ValueError as e:
        raise MissingField(
            "Details must be one of hourly, daily, monthly.", field="granularity"
        ) from e


def _address(value: str) -> str:
    address = str(value).strip()
    if not is_ipv4_address(address):
        raise InvalidAddress("Invalid IPv4 address.", field="target_address")
    return address


def _check_range(from_date: date, to_date: date) -> None:
    if from_date.year != to_date.year:
        raise CrossYearRange(
            "'From date' and 'To date' must be in the same year.", field="to_date"
        )
    if to_date < from_date:
        raise InvertedRange("'To date' must not be before 'From date'.", field="to_date")


def _channel_filter(value: int | str | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, str):
        if value.strip().lower() in ("", ALL_CHANNELS):
            return None
        try:
            value = int(value)
        except ValueError as e:
            raise ReportValidationError(
                "Channel must be a number or 'all'.", field="channel_filter"
            ) from e
    if value <= 0:
        return None
    return value


def _multiplier(value: float | str | None) -> float | None:
    if value is None:
        return None
    if isinstance(value, str):
        if value.strip().lower() in ("", "null"):
            return None
        try:
            value = float(value)
        except ValueError as e:
            raise InvalidMultiplier("Multiplier must be a number.", field="multiplier") from e
    number = float(value)
    if not math.isfinite(number):
        raise InvalidMultiplier("Multiplier must be a finite number.", field="multiplier")
    return number
