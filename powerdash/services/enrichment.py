from __future__ import annotations

import dataclasses
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from powerdash.models.report import (
    ChannelDescriptor,
    EnrichedRow,
    MeasurementRow,
    RawMeasurementRow,
    StatisticsRow,
    StatisticsSummary,
)

TOTALS_QUANTUM = Decimal("0.0001")


def round_half_away_from_zero(value: float, quantum: Decimal = TOTALS_QUANTUM) -> float:
    # Decimal's ROUND_HALF_UP rounds ties away from zero; go through repr so
    # 0.00005 is not seen as 0.0000499999...
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def channel_names_by_number(channels: Iterable[ChannelDescriptor]) -> dict[int, str]:
    names: dict[int, str] = {}
    for descriptor in channels:
        # First descriptor wins when a number repeats.
        names.setdefault(descriptor.channel_number, descriptor.channel_name)
    return names


def enrich(
    rows: Sequence[MeasurementRow],
    channels: Iterable[ChannelDescriptor],
    *,
    multiplier: float | None = None,
) -> list[EnrichedRow]:
    """Attach channel names and multiplied values to raw report rows.

    Output has the same length and order as ``rows``. A row whose channel
    number matches no descriptor keeps ``channel_name`` unset. Without a
    multiplier ``multiplied_value`` stays unset on every row.
    """
    names = channel_names_by_number(channels)
    enriched: list[EnrichedRow] = []
    for row in rows:
        multiplied: float | None = None
        if multiplier is not None and row.raw_value is not None:
            multiplied = row.raw_value * multiplier
        enriched.append(
            EnrichedRow(
                bucket_start=row.bucket_start,
                bucket_end=row.bucket_end,
                channel_number=row.channel_number,
                raw_value=row.raw_value,
                error=row.error,
                channel_name=names.get(row.channel_number),
                multiplied_value=multiplied,
            )
        )
    return enriched


def enrich_raw(
    rows: Sequence[RawMeasurementRow], channels: Iterable[ChannelDescriptor]
) -> list[RawMeasurementRow]:
    names = channel_names_by_number(channels)
    return [
        dataclasses.replace(row, channel_name=names.get(row.channel_number)) for row in rows
    ]


def summarize(rows: Sequence[StatisticsRow]) -> StatisticsSummary:
    """Combine per-channel statistics of one asset.

    ``total_average`` is the plain sum of the per-channel averages, not a
    weighted mean. It only equals the combined average when every channel
    has the same sample count.
    """
    total_sum = sum(row.sum for row in rows)
    total_average = sum(row.avg for row in rows)
    asset_name = ""
    if rows:
        asset_name = rows[0].asset_name or ""
    return StatisticsSummary(
        asset_name=asset_name,
        per_channel_rows=list(rows),
        total_average=round_half_away_from_zero(total_average),
        total_sum=round_half_away_from_zero(total_sum),
    )
