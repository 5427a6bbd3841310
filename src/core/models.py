"""
Domain models for image benchmarking and scanning.

This module defines the core data structures used throughout the application.
All models are immutable (frozen dataclasses) to prevent accidental mutation;
collections are stored as tuples. Every model exposes to_dict() for
machine-readable output.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from utils.units import format_binary_size

UNKNOWN = "Unknown"
"""Sentinel rendered in place of a value that could not be measured."""


class Rating(str, Enum):
    """Qualitative rating derived from fixed numeric bands."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    UNKNOWN = "Unknown"


class Priority(str, Enum):
    """Recommendation priority tiers."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ProbeStatus(str, Enum):
    """Outcome of a probe step that either worked or did not."""

    SUCCESS = "Success"
    FAILED = "Failed"


class SeverityTier(str, Enum):
    """Vulnerability severity buckets."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @classmethod
    def ordered_levels(cls) -> list["SeverityTier"]:
        """Return severity tiers in display order."""
        return [cls.CRITICAL, cls.HIGH, cls.MEDIUM, cls.LOW, cls.INFO]

    @classmethod
    def normalize(cls, severity: Optional[str]) -> "SeverityTier":
        """
        Map a scanner-reported severity onto a tier.

        Matching is case-insensitive; anything unrecognized (UNKNOWN,
        negligible, empty) is treated as info.
        """
        try:
            return cls((severity or "").strip().lower())
        except ValueError:
            return cls.INFO


@dataclass(frozen=True)
class AggregatedMetric:
    """
    Summary statistics over the successful samples of a probe.

    Attributes:
        average: Arithmetic mean of successful samples
        min: Smallest successful sample
        max: Largest successful sample
        sample_count: Number of successful samples
        unit: Unit of the samples (e.g. "ms", "%")
    """

    average: float = 0
    min: float = 0
    max: float = 0
    sample_count: int = 0
    unit: str = "ms"

    @property
    def available(self) -> bool:
        """Whether at least one sample was measured."""
        return self.sample_count > 0

    @classmethod
    def unavailable(cls, unit: str = "ms") -> "AggregatedMetric":
        """Zero record used when every sample failed."""
        return cls(average=0, min=0, max=0, sample_count=0, unit=unit)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "average": self.average,
            "min": self.min,
            "max": self.max,
            "samples": self.sample_count,
            "unit": self.unit,
            "available": self.available,
        }


@dataclass(frozen=True)
class MemoryUsage:
    """
    Point-in-time memory usage of a running container.

    Attributes:
        current_bytes: Memory in use (None if unmeasured)
        total_bytes: Memory limit visible to the container (None if unmeasured)
        percentage: Usage percentage as reported by the engine
        efficiency: Rating of current/total
    """

    current_bytes: Optional[int] = None
    total_bytes: Optional[int] = None
    percentage: float = 0.0
    efficiency: Rating = Rating.UNKNOWN

    @property
    def available(self) -> bool:
        return self.current_bytes is not None and self.total_bytes is not None

    @property
    def current(self) -> str:
        if self.current_bytes is None:
            return UNKNOWN
        return format_binary_size(self.current_bytes)

    @property
    def total(self) -> str:
        if self.total_bytes is None:
            return UNKNOWN
        return format_binary_size(self.total_bytes)

    @classmethod
    def unavailable(cls) -> "MemoryUsage":
        return cls()

    def to_dict(self) -> dict:
        return {
            "current": self.current,
            "total": self.total,
            "current_bytes": self.current_bytes,
            "total_bytes": self.total_bytes,
            "percentage": self.percentage,
            "efficiency": self.efficiency.value,
        }


@dataclass(frozen=True)
class CPUUsage:
    """CPU percentage samples of a running container and their rating."""

    usage: AggregatedMetric
    efficiency: Rating = Rating.UNKNOWN

    @property
    def average(self) -> float:
        return self.usage.average

    @classmethod
    def unavailable(cls) -> "CPUUsage":
        return cls(usage=AggregatedMetric.unavailable("%"), efficiency=Rating.UNKNOWN)

    def to_dict(self) -> dict:
        return {
            "average": self.usage.average,
            "min": self.usage.min,
            "max": self.usage.max,
            "samples": self.usage.sample_count,
            "unit": self.usage.unit,
            "efficiency": self.efficiency.value,
        }


@dataclass(frozen=True)
class PingResult:
    """Average round-trip time to one target."""

    target: str
    avg_time: float

    def to_dict(self) -> dict:
        return {"target": self.target, "avg_time": self.avg_time}


@dataclass(frozen=True)
class NetworkLatency:
    """
    Network latency measured from inside a container.

    Targets that did not answer are omitted from `targets`; status is
    Success when at least one target answered.
    """

    average: float = 0.0
    targets: tuple[PingResult, ...] = ()
    unit: str = "ms"
    status: ProbeStatus = ProbeStatus.FAILED

    @classmethod
    def failed(cls) -> "NetworkLatency":
        return cls()

    def to_dict(self) -> dict:
        return {
            "average": self.average,
            "targets": [t.to_dict() for t in self.targets],
            "unit": self.unit,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class DiskSpeed:
    """Throughput of one disk direction (write or read)."""

    speed: float = 0.0
    unit: str = "MB/s"
    status: ProbeStatus = ProbeStatus.FAILED

    @classmethod
    def failed(cls) -> "DiskSpeed":
        return cls()

    def to_dict(self) -> dict:
        return {"speed": self.speed, "unit": self.unit, "status": self.status.value}


@dataclass(frozen=True)
class DiskIO:
    """Sequential write/read throughput inside a container."""

    write: DiskSpeed
    read: DiskSpeed
    overall: Rating = Rating.UNKNOWN

    @classmethod
    def failed(cls) -> "DiskIO":
        return cls(write=DiskSpeed.failed(), read=DiskSpeed.failed(), overall=Rating.UNKNOWN)

    def to_dict(self) -> dict:
        return {
            "write": self.write.to_dict(),
            "read": self.read.to_dict(),
            "overall": self.overall.value,
        }


@dataclass(frozen=True)
class Recommendation:
    """
    Advisory record derived from a completed performance report.

    Attributes:
        category: Area the advice applies to (Build, Startup, Memory, ...)
        priority: High, Medium or Low
        message: Human-readable advice
    """

    category: str
    priority: Priority
    message: str

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "priority": self.priority.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class PerformanceReport:
    """
    Complete performance results for a single image.

    Attributes:
        image: Image reference that was measured
        build_time: Uncached build durations (ms)
        startup_time: Launch-to-ready durations (ms)
        memory_usage: Memory snapshot after warm-up
        cpu_usage: CPU samples after warm-up
        network_latency: Ping latency from inside the container
        disk_io: Sequential disk throughput
        recommendations: Advice derived from the metrics above
    """

    image: str
    build_time: AggregatedMetric
    startup_time: AggregatedMetric
    memory_usage: MemoryUsage
    cpu_usage: CPUUsage
    network_latency: NetworkLatency
    disk_io: DiskIO
    recommendations: tuple[Recommendation, ...] = ()

    def to_dict(self) -> dict:
        return {
            "image": self.image,
            "build_time": self.build_time.to_dict(),
            "startup_time": self.startup_time.to_dict(),
            "memory_usage": self.memory_usage.to_dict(),
            "cpu_usage": self.cpu_usage.to_dict(),
            "network_latency": self.network_latency.to_dict(),
            "disk_io": self.disk_io.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class VulnerabilityFinding:
    """
    A vulnerable package detected in the image.

    Attributes:
        package: Package name
        version: Installed version
        severity: Severity tier
        description: What is wrong with it
        fix: Suggested fix (fixed version or advice)
    """

    package: str
    version: str
    severity: SeverityTier
    description: str = ""
    fix: str = ""

    def to_dict(self) -> dict:
        return {
            "package": self.package,
            "version": self.version,
            "severity": self.severity.value,
            "description": self.description,
            "fix": self.fix,
        }


@dataclass(frozen=True)
class VulnerabilityReport:
    """
    Vulnerability findings of one image, bucketed by severity tier.

    Attributes:
        findings: All findings in the order the scanner reported them
        scanner: Name of the strategy that produced the findings
    """

    findings: tuple[VulnerabilityFinding, ...] = ()
    scanner: str = "heuristic"

    @property
    def total(self) -> int:
        return len(self.findings)

    def by_severity(self, tier: SeverityTier) -> list[VulnerabilityFinding]:
        """Return findings of a single tier."""
        return [f for f in self.findings if f.severity == tier]

    def counts(self) -> dict[str, int]:
        """Number of findings per tier."""
        return {tier.value: len(self.by_severity(tier)) for tier in SeverityTier.ordered_levels()}

    def to_dict(self) -> dict:
        data = {
            tier.value: [f.to_dict() for f in self.by_severity(tier)]
            for tier in SeverityTier.ordered_levels()
        }
        data["total"] = self.total
        data["scanner"] = self.scanner
        return data


@dataclass(frozen=True)
class SecretFinding:
    """Matches of one secret category in one file of the image."""

    file: str
    category: str
    matches: int

    def to_dict(self) -> dict:
        return {"file": self.file, "category": self.category, "matches": self.matches}


@dataclass(frozen=True)
class PermissionFinding:
    """
    Runtime permission posture of the image.

    Attributes:
        running_as_root: Default user is root
        writable_filesystem: /tmp can be written to
        sudo_installed: sudo binary is on the PATH
        issues: Problems found, in check order
        suggestions: Remediation hints, in check order
    """

    running_as_root: bool = False
    writable_filesystem: bool = False
    sudo_installed: bool = False
    issues: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "running_as_root": self.running_as_root,
            "writable_filesystem": self.writable_filesystem,
            "sudo_installed": self.sudo_installed,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


@dataclass(frozen=True)
class LayerRecord:
    """One entry of an image's layer history."""

    command: str
    size_bytes: int
    size: str = ""

    def to_dict(self) -> dict:
        return {"command": self.command, "size": self.size, "size_bytes": self.size_bytes}


@dataclass(frozen=True)
class LayerAnalysis:
    """
    Layer history of an image.

    Attributes:
        layers: Layers in the order reported by the engine history
        largest_layers: Top layers by size, largest first
    """

    layers: tuple[LayerRecord, ...] = ()
    largest_layers: tuple[LayerRecord, ...] = ()

    @property
    def total(self) -> int:
        return len(self.layers)

    @classmethod
    def empty(cls) -> "LayerAnalysis":
        return cls()

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "layers": [layer.to_dict() for layer in self.layers],
            "largest_layers": [layer.to_dict() for layer in self.largest_layers],
        }


@dataclass(frozen=True)
class ScanReport:
    """
    Complete security scan results for a single image.

    Attributes:
        image: Image reference that was scanned
        vulnerabilities: Vulnerability findings by severity
        size: Image size as reported by the engine (or "Unknown")
        size_bytes: Image size in bytes (0 if unknown)
        layers: Layer history analysis
        secrets: Potential secrets found in the application directory
        permissions: Runtime permission posture
    """

    image: str
    vulnerabilities: VulnerabilityReport
    size: str
    size_bytes: int
    layers: LayerAnalysis
    secrets: tuple[SecretFinding, ...]
    permissions: PermissionFinding

    def to_dict(self) -> dict:
        return {
            "image": self.image,
            "vulnerabilities": self.vulnerabilities.to_dict(),
            "size": self.size,
            "size_bytes": self.size_bytes,
            "layers": self.layers.to_dict(),
            "secrets": [s.to_dict() for s in self.secrets],
            "permissions": self.permissions.to_dict(),
        }

    def size_summary(self) -> dict:
        """Image size and layer subset of the report."""
        return {
            "image": self.image,
            "size": self.size,
            "size_bytes": self.size_bytes,
            "layers": self.layers.to_dict(),
        }
