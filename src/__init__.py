"""
dockprobe - Container Image Benchmark & Security Scanner

Measure how a container image builds, starts and behaves at runtime, and scan
it for vulnerable packages, leaked secrets and risky permissions.
"""

__version__ = "1.0.0"
__author__ = "dockprobe contributors"

from core.models import (
    AggregatedMetric,
    PerformanceReport,
    Recommendation,
    ScanReport,
)

__all__ = [
    "AggregatedMetric",
    "PerformanceReport",
    "Recommendation",
    "ScanReport",
]
