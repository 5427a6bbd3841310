"""
Recommendation engine.

Derives prioritized advice from a completed performance report. Evaluation is
a pure function of the report and the thresholds it was constructed with.
"""

import logging
from typing import Optional

from core.config import RecommendationThresholds
from core.models import PerformanceReport, Priority, ProbeStatus, Rating, Recommendation

logger = logging.getLogger(__name__)

BUILD_MESSAGE = "Build time is slow. Consider using Docker layer caching and multi-stage builds."
STARTUP_MESSAGE = "Startup time is slow. Optimize application initialization and consider health checks."
MEMORY_MESSAGE = "Memory usage is high. Profile memory leaks and optimize memory usage."
CPU_MESSAGE = "CPU usage is high. Consider optimizing algorithms and reducing computational overhead."
NETWORK_MESSAGE = "Network latency is higher than expected. Check network configuration."
DISK_MESSAGE = "Disk I/O performance is poor. Consider optimizing file operations and using faster storage."


class RecommendationEngine:
    """Turn performance metrics into recommendations."""

    def __init__(self, thresholds: Optional[RecommendationThresholds] = None):
        self.thresholds = thresholds or RecommendationThresholds()

    def evaluate(self, report: PerformanceReport) -> tuple[Recommendation, ...]:
        """
        Evaluate a performance report against the thresholds.

        Unavailable metrics never trigger a recommendation.

        Args:
            report: Completed performance report

        Returns:
            Recommendations in fixed category order
        """
        limits = self.thresholds
        recommendations = []

        if report.build_time.available and report.build_time.average > limits.build_time_ms:
            recommendations.append(Recommendation("Build", Priority.HIGH, BUILD_MESSAGE))

        if report.startup_time.available and report.startup_time.average > limits.startup_time_ms:
            recommendations.append(Recommendation("Startup", Priority.HIGH, STARTUP_MESSAGE))

        memory = report.memory_usage
        if memory.available and memory.percentage > limits.memory_percent:
            recommendations.append(Recommendation("Memory", Priority.HIGH, MEMORY_MESSAGE))

        cpu = report.cpu_usage
        if cpu.usage.available and cpu.average > limits.cpu_percent:
            recommendations.append(Recommendation("CPU", Priority.MEDIUM, CPU_MESSAGE))

        network = report.network_latency
        if network.status == ProbeStatus.SUCCESS and network.average > limits.network_latency_ms:
            recommendations.append(Recommendation("Network", Priority.LOW, NETWORK_MESSAGE))

        if report.disk_io.overall == Rating.POOR:
            recommendations.append(Recommendation("Disk", Priority.MEDIUM, DISK_MESSAGE))

        logger.debug(f"Generated {len(recommendations)} recommendations for {report.image}")
        return tuple(recommendations)


__all__ = ["RecommendationEngine"]
