"""Core pipeline logic: models, lifecycle management and orchestration."""

from core.models import (
    AggregatedMetric,
    PerformanceReport,
    Rating,
    Recommendation,
    ScanReport,
    SeverityTier,
)
from core.exceptions import AcquisitionError, DockprobeException

__all__ = [
    "AggregatedMetric",
    "PerformanceReport",
    "Rating",
    "Recommendation",
    "ScanReport",
    "SeverityTier",
    "AcquisitionError",
    "DockprobeException",
]
