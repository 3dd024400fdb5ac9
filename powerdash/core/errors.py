from __future__ import annotations

GENERIC_FORM_MESSAGE = "Please fill form as needed. Read tooltips on red marked fields."


class PowerdashError(Exception):
    """Base class for every error raised by the report pipeline."""


class ReportValidationError(PowerdashError, ValueError):
    """A report request failed a pre-flight rule.

    ``kind`` identifies the rule, ``field`` the form field a tooltip should
    be attached to. The user-facing summary is always ``GENERIC_FORM_MESSAGE``.
    """

    kind = "invalid"

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def as_dict(self) -> dict[str, str | None]:
        return {"kind": self.kind, "field": self.field, "message": self.message}


class MissingField(ReportValidationError):
    kind = "missing_field"


class InvalidAddress(ReportValidationError):
    kind = "invalid_address"


class GranularityTooFine(ReportValidationError):
    kind = "granularity_too_fine"


class CrossYearRange(ReportValidationError):
    kind = "cross_year_range"


class InvertedRange(ReportValidationError):
    kind = "inverted_range"


class InvalidMultiplier(ReportValidationError):
    kind = "invalid_multiplier"


class TransportError(PowerdashError):
    """Network failure, non-2xx status or unreadable body from the backend."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ReportError(PowerdashError):
    """The backend answered a report query with an ``{"err": ...}`` payload."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
