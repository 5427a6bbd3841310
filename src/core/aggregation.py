"""
Sample aggregation and rating bands.

Probe samples are collected as a sequence of Optional[float]; None marks a
failed sample. Aggregation is a pure reduction over the successful samples.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from constants import CPU_RATING_BANDS, DISK_RATING_BANDS, MEMORY_RATING_BANDS
from core.models import AggregatedMetric, DiskSpeed, ProbeStatus, Rating

Sample = Optional[float]


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from zero (13232.5 -> 13233), unlike round()'s banker's rounding.

    Examples:
        >>> round_half_up(13233.333)
        13233
        >>> round_half_up(2.675, 2)
        2.68
    """
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if digits == 0:
        return int(rounded)
    return float(rounded)


def aggregate(samples: Sequence[Sample], unit: str = "ms", digits: int = 0) -> AggregatedMetric:
    """
    Reduce samples to average/min/max/count over the successful ones.

    Args:
        samples: Measured values, None for failed attempts
        unit: Unit label carried into the result
        digits: Decimal places kept in the average

    Returns:
        AggregatedMetric; the unavailable zero record if nothing succeeded
    """
    values = [s for s in samples if s is not None]
    if not values:
        return AggregatedMetric.unavailable(unit)

    average = math.fsum(values) / len(values)
    return AggregatedMetric(
        average=round_half_up(average, digits),
        min=min(values),
        max=max(values),
        sample_count=len(values),
        unit=unit,
    )


def _rate_below(value: float, bands) -> Rating:
    for upper, rating in bands:
        if value < upper:
            return Rating(rating)
    return Rating.POOR


def rate_cpu(average_percent: float, bands=CPU_RATING_BANDS) -> Rating:
    """Rate average CPU usage: <5 Excellent, <15 Good, <30 Fair, else Poor."""
    return _rate_below(average_percent, bands)


def rate_memory(current_bytes: float, total_bytes: float, bands=MEMORY_RATING_BANDS) -> Rating:
    """Rate memory use as a share of the limit: <10% Excellent, <25% Good, <50% Fair."""
    if not total_bytes:
        return Rating.UNKNOWN
    return _rate_below(current_bytes / total_bytes * 100, bands)


def rate_disk(write: DiskSpeed, read: DiskSpeed, bands=DISK_RATING_BANDS) -> Rating:
    """Rate mean throughput: >100 MB/s Excellent, >50 Good, >20 Fair, else Poor."""
    if write.status == ProbeStatus.FAILED or read.status == ProbeStatus.FAILED:
        return Rating.UNKNOWN

    average_speed = (write.speed + read.speed) / 2
    for lower, rating in bands:
        if average_speed > lower:
            return Rating(rating)
    return Rating.POOR
