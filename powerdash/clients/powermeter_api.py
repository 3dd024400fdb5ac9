from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any

import httpx

from powerdash.core.errors import ReportError, TransportError
from powerdash.models.inventory import Asset, AssetName, Channel, PowerMeter
from powerdash.models.report import (
    MeasurementRow,
    RawMeasurementRow,
    StatisticsDetails,
    StatisticsRow,
    ValidRawRequest,
    ValidReportRequest,
)

logger = logging.getLogger(__name__)

REPORT_PATH = "/api/measurements/report"
RAW_DATA_PATH = "/api/measurements/getrawdata"
STATISTICS_PATH = "/api/measurements/statistics"
POWER_METER_PATH = "/api/admin/crud/power_meter"
CHANNELS_PATH = "/api/admin/crud/channels"
ASSETS_PATH = "/api/admin/crud/assets"
ASSET_NAMES_PATH = "/api/admin/crud/assets/asset_names"


def format_multiplier(value: float | None) -> str:
    if value is None:
        return "null"
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _range_params(request: ValidReportRequest | ValidRawRequest) -> dict[str, str]:
    # The backend treats the range as [fromdate, todate).
    return {
        "fromdate": request.from_date.isoformat(),
        "todate": (request.to_date + timedelta(days=1)).isoformat(),
        "ip": request.target_address,
    }


def _add_channel(params: dict[str, str], channel_filter: int | None) -> dict[str, str]:
    if channel_filter is not None and channel_filter > 0:
        params["channel"] = str(channel_filter)
    return params


def build_report_params(request: ValidReportRequest) -> dict[str, str]:
    params = _range_params(request)
    params["details"] = request.granularity.value
    params["multiplier"] = format_multiplier(request.multiplier)
    return _add_channel(params, request.channel_filter)


def build_raw_data_params(request: ValidRawRequest) -> dict[str, str]:
    return _add_channel(_range_params(request), request.channel_filter)


def build_listing_params(
    *,
    first: int | None = None,
    rowcount: int | None = None,
    filters: dict[str, Any] | None = None,
) -> dict[str, str]:
    params: dict[str, str] = {}
    if first is not None:
        params["first"] = str(first)
    if rowcount is not None:
        params["rowcount"] = str(rowcount)
    if filters is not None:
        params["filter"] = json.dumps(filters, separators=(",", ":"))
    return params


class PowerMeterApiClient:
    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        user_agent: str = "powerdash/0.1",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            headers={
                "User-Agent": user_agent,
                "Accept": "application/json",
            },
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def ping(self) -> None:
        self._get_json(f"{POWER_METER_PATH}/count")

    def fetch_report(self, request: ValidReportRequest) -> list[MeasurementRow]:
        payload = self._get_json(REPORT_PATH, params=build_report_params(request))
        if isinstance(payload, dict) and payload.get("err"):
            logger.warning(
                "Report backend returned err=%r for ip=%s", payload["err"], request.target_address
            )
            raise ReportError(str(payload["err"]))
        rows = _expect_list(payload, what="report")
        return [_measurement_row(item) for item in rows]

    def fetch_raw_data(self, request: ValidRawRequest) -> list[RawMeasurementRow]:
        payload = self._get_json(RAW_DATA_PATH, params=build_raw_data_params(request))
        if isinstance(payload, dict) and payload.get("err"):
            logger.warning(
                "Raw data backend returned err=%r for ip=%s", payload["err"], request.target_address
            )
            raise ReportError(str(payload["err"]))
        rows = _expect_list(payload, what="raw data")
        return [_raw_measurement_row(item) for item in rows]

    def fetch_statistics(
        self, *, asset_name_id: int, details: StatisticsDetails
    ) -> list[StatisticsRow]:
        payload = self._get_json(
            STATISTICS_PATH,
            params={"asset_name_id": str(asset_name_id), "details": details.value},
        )
        rows = _expect_list(payload, what="statistics")
        return [_statistics_row(item) for item in rows]

    def list_power_meters(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[PowerMeter]:
        payload = self._get_json(
            POWER_METER_PATH,
            params=build_listing_params(first=first, rowcount=rowcount, filters=filters),
        )
        return [_power_meter(item) for item in _expect_list(payload, what="power_meter")]

    def count_power_meters(self, *, filters: dict[str, Any] | None = None) -> int:
        return self._count(POWER_METER_PATH, filters)

    def list_channels(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Channel]:
        payload = self._get_json(
            CHANNELS_PATH,
            params=build_listing_params(first=first, rowcount=rowcount, filters=filters),
        )
        return [_channel(item) for item in _expect_list(payload, what="channels")]

    def count_channels(self, *, filters: dict[str, Any] | None = None) -> int:
        return self._count(CHANNELS_PATH, filters)

    def list_assets(
        self,
        *,
        first: int | None = None,
        rowcount: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Asset]:
        payload = self._get_json(
            ASSETS_PATH,
            params=build_listing_params(first=first, rowcount=rowcount, filters=filters),
        )
        return [_asset(item) for item in _expect_list(payload, what="assets")]

    def count_assets(self, *, filters: dict[str, Any] | None = None) -> int:
        return self._count(ASSETS_PATH, filters)

    def list_asset_names(self) -> list[AssetName]:
        payload = self._get_json(ASSET_NAMES_PATH)
        return [
            AssetName(id=int(item["id"]), name=str(item["name"]))
            for item in _expect_list(payload, what="asset_names")
        ]

    def _count(self, path: str, filters: dict[str, Any] | None) -> int:
        payload = self._get_json(f"{path}/count", params=build_listing_params(filters=filters))
        if not isinstance(payload, dict) or "count" not in payload:
            raise TransportError(f"Unexpected count response from {path}")
        return int(payload["count"])

    def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        try:
            resp = self._client.get(path, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("Backend %s answered HTTP %d", path, e.response.status_code)
            raise TransportError(str(e), status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning("Backend %s unreachable: %s", path, e)
            raise TransportError(str(e) or type(e).__name__) from e
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(f"Backend {path} returned invalid JSON") from e


def _expect_list(payload: Any, *, what: str) -> list[dict[str, Any]]:
    if not isinstance(payload, list):
        raise TransportError(f"Unexpected {what} response shape")
    if not all(isinstance(item, dict) for item in payload):
        raise TransportError(f"Unexpected {what} entry shape")
    return payload


def _measurement_row(item: dict[str, Any]) -> MeasurementRow:
    try:
        channel = int(item["channel"])
    except (KeyError, TypeError, ValueError) as e:
        raise TransportError("Report row without a channel number") from e
    return MeasurementRow(
        bucket_start=_str_or_empty(item.get("from_unix_time")),
        bucket_end=_str_or_empty(item.get("to_unix_time")),
        channel_number=channel,
        raw_value=_float_or_none(item.get("diff")),
        error=_str_or_none(item.get("error")),
    )


def _raw_measurement_row(item: dict[str, Any]) -> RawMeasurementRow:
    try:
        channel = int(item["channel"])
    except (KeyError, TypeError, ValueError) as e:
        raise TransportError("Raw data row without a channel number") from e
    return RawMeasurementRow(
        recorded_time=_str_or_empty(item.get("recorded_time")),
        channel_number=channel,
        measured_value=_float_or_none(item.get("measured_value")),
        error=_str_or_none(item.get("error")),
    )


def _statistics_row(item: dict[str, Any]) -> StatisticsRow:
    return StatisticsRow(
        asset_name=_str_or_none(item.get("asset_name")),
        power_meter_name=_str_or_none(item.get("power_meter_name")),
        channel_name=_str_or_none(item.get("channel_name")),
        avg=_float_or_none(item.get("avg")) or 0.0,
        sum=_float_or_none(item.get("sum")) or 0.0,
    )


def _power_meter(item: dict[str, Any]) -> PowerMeter:
    return PowerMeter(
        id=int(item["id"]),
        power_meter_name=str(item.get("power_meter_name") or ""),
        ip_address=str(item.get("ip_address") or ""),
        port=_int_or_none(item.get("port")),
        time_zone=_str_or_none(item.get("time_zone")),
        enabled=bool(item.get("enabled", True)),
    )


def _channel(item: dict[str, Any]) -> Channel:
    return Channel(
        id=int(item["id"]),
        power_meter_id=int(item["power_meter_id"]),
        channel=int(item["channel"]),
        channel_name=str(item.get("channel_name") or ""),
        enabled=bool(item.get("enabled", True)),
        power_meter_name=_str_or_none(item.get("power_meter_name")),
    )


def _asset(item: dict[str, Any]) -> Asset:
    return Asset(
        id=int(item["id"]),
        asset_name_id=_int_or_none(item.get("asset_name_id")),
        channel_id=_int_or_none(item.get("channel_id")),
        asset_name=_str_or_none(item.get("asset_name")),
        power_meter_name=_str_or_none(item.get("power_meter_name")),
        channel_name=_str_or_none(item.get("channel_name")),
    )


def _float_or_none(v: Any) -> float | None:
    try:
        if v is None:
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


def _int_or_none(v: Any) -> int | None:
    try:
        if v is None:
            return None
        return int(v)
    except (TypeError, ValueError):
        return None


def _str_or_none(v: Any) -> str | None:
    if v is None:
        return None
    if isinstance(v, str):
        return v
    return str(v)


def _str_or_empty(v: Any) -> str:
    return _str_or_none(v) or ""
