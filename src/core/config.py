"""
Probe and recommendation configuration.

Provides strongly-typed, immutable configuration objects that are passed to
the probes and the recommendation engine at construction time. Defaults come
from constants; a YAML file can override any field.

Example YAML::

    startup_iterations: 3
    ping_targets: [1.1.1.1]
    thresholds:
      build_time_ms: 120000
    vulnerable_packages:
      - {name: lodash, versions: "<4.17.21", severity: high, description: Prototype pollution}
"""

import logging
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from constants import (
    BUILD_ITERATIONS,
    BUILD_TIME_THRESHOLD_MS,
    CPU_PERCENT_THRESHOLD,
    CPU_RATING_BANDS,
    CPU_SAMPLE_INTERVAL,
    CPU_SAMPLES,
    DEFAULT_APP_DIR,
    DEFAULT_IMAGE_PREFIX,
    DISK_RATING_BANDS,
    DISK_READ_MB,
    DISK_WRITE_MB,
    LARGEST_LAYERS_COUNT,
    MEMORY_PERCENT_THRESHOLD,
    MEMORY_RATING_BANDS,
    NETWORK_LATENCY_THRESHOLD_MS,
    PING_COUNT,
    PING_TARGETS,
    PROBE_WARMUP,
    READY_POLL_INTERVAL,
    READY_TIMEOUT,
    SECRET_PATTERNS,
    SECRET_SCAN_EXTENSIONS,
    SECRET_SCAN_SKIP_DIRS,
    STARTUP_ITERATIONS,
    STARTUP_TIME_THRESHOLD_MS,
    STATS_WARMUP,
    VULNERABLE_PACKAGES,
    VULNERABLE_RUNTIMES,
)
from core.exceptions import ConfigurationException
from core.models import Rating
from utils.versions import compare_versions, is_version_in_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VulnerablePackageRule:
    """
    Known-vulnerable package entry for the heuristic scan.

    Attributes:
        name: Package name
        versions: "*" for every version or "<X.Y.Z" for versions below X.Y.Z
        severity: Severity tier name
        description: What is wrong with the affected versions
    """

    name: str
    versions: str
    severity: str
    description: str

    def matches(self, name: str, version: str) -> bool:
        return name == self.name and is_version_in_range(version or "", self.versions)


@dataclass(frozen=True)
class RuntimeVersionRule:
    """
    Vulnerable release line of the Node.js runtime.

    Attributes:
        prefix: Major line, e.g. "v18"
        fixed_version: First safe version on that line; None if the whole line is affected
    """

    prefix: str
    fixed_version: Optional[str] = None

    def matches(self, version: str) -> bool:
        version = version.strip()
        if version != self.prefix and not version.startswith(f"{self.prefix}."):
            return False
        if self.fixed_version is None:
            return True
        return compare_versions(version, self.fixed_version) < 0


@dataclass(frozen=True)
class RecommendationThresholds:
    """Limits above which the recommendation engine raises advice."""

    build_time_ms: float = BUILD_TIME_THRESHOLD_MS
    startup_time_ms: float = STARTUP_TIME_THRESHOLD_MS
    memory_percent: float = MEMORY_PERCENT_THRESHOLD
    cpu_percent: float = CPU_PERCENT_THRESHOLD
    network_latency_ms: float = NETWORK_LATENCY_THRESHOLD_MS


def _default_package_rules() -> tuple[VulnerablePackageRule, ...]:
    return tuple(VulnerablePackageRule(*entry) for entry in VULNERABLE_PACKAGES)


def _default_runtime_rules() -> tuple[RuntimeVersionRule, ...]:
    return tuple(RuntimeVersionRule(*entry) for entry in VULNERABLE_RUNTIMES)


_INT_FIELDS = (
    "build_iterations",
    "startup_iterations",
    "cpu_samples",
    "ping_count",
    "disk_write_mb",
    "disk_read_mb",
    "largest_layers_count",
)
_NUMBER_FIELDS = (
    "ready_timeout",
    "ready_poll_interval",
    "stats_warmup",
    "cpu_sample_interval",
    "probe_warmup",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _pairs(config: "ProbeConfig", name: str) -> list[tuple[Any, Any]]:
    value = getattr(config, name)
    if not isinstance(value, tuple) or not all(isinstance(e, tuple) and len(e) == 2 for e in value):
        raise ConfigurationException(f"{name} must be a list of pairs, got {value!r}")
    return list(value)


@dataclass(frozen=True)
class ProbeConfig:
    """Configuration shared by every probe in a pipeline run."""

    image_prefix: str = DEFAULT_IMAGE_PREFIX
    app_dir: str = DEFAULT_APP_DIR

    build_iterations: int = BUILD_ITERATIONS
    startup_iterations: int = STARTUP_ITERATIONS
    ready_timeout: float = READY_TIMEOUT
    ready_poll_interval: float = READY_POLL_INTERVAL

    stats_warmup: float = STATS_WARMUP
    cpu_samples: int = CPU_SAMPLES
    cpu_sample_interval: float = CPU_SAMPLE_INTERVAL
    probe_warmup: float = PROBE_WARMUP

    ping_targets: tuple[str, ...] = PING_TARGETS
    ping_count: int = PING_COUNT
    disk_write_mb: int = DISK_WRITE_MB
    disk_read_mb: int = DISK_READ_MB
    largest_layers_count: int = LARGEST_LAYERS_COUNT

    secret_patterns: tuple[tuple[str, str], ...] = SECRET_PATTERNS
    secret_extensions: tuple[str, ...] = SECRET_SCAN_EXTENSIONS
    secret_skip_dirs: tuple[str, ...] = SECRET_SCAN_SKIP_DIRS

    vulnerable_packages: tuple[VulnerablePackageRule, ...] = field(default_factory=_default_package_rules)
    vulnerable_runtimes: tuple[RuntimeVersionRule, ...] = field(default_factory=_default_runtime_rules)

    cpu_bands: tuple[tuple[float, str], ...] = CPU_RATING_BANDS
    memory_bands: tuple[tuple[float, str], ...] = MEMORY_RATING_BANDS
    disk_bands: tuple[tuple[float, str], ...] = DISK_RATING_BANDS

    thresholds: RecommendationThresholds = field(default_factory=RecommendationThresholds)

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationException: If a value has the wrong type or is out of range
        """
        self._validate_types()

        for name in ("build_iterations", "startup_iterations", "cpu_samples", "ping_count"):
            if getattr(self, name) < 1:
                raise ConfigurationException(f"{name} must be at least 1")

        for name in ("disk_write_mb", "disk_read_mb"):
            if getattr(self, name) < 1:
                raise ConfigurationException(f"{name} must be at least 1")

        if self.ready_timeout <= 0 or self.ready_poll_interval <= 0:
            raise ConfigurationException("ready_timeout and ready_poll_interval must be positive")

        if self.largest_layers_count < 0:
            raise ConfigurationException("largest_layers_count must not be negative")

    def _validate_types(self) -> None:
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationException(f"{name} must be an integer, got {value!r}")

        for name in _NUMBER_FIELDS:
            if not _is_number(getattr(self, name)):
                raise ConfigurationException(f"{name} must be a number, got {getattr(self, name)!r}")

        for name in ("image_prefix", "app_dir"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationException(f"{name} must be a string, got {getattr(self, name)!r}")

        for name in ("ping_targets", "secret_extensions", "secret_skip_dirs"):
            value = getattr(self, name)
            if not isinstance(value, tuple) or not all(isinstance(item, str) for item in value):
                raise ConfigurationException(f"{name} must be a list of strings, got {value!r}")

        for category, pattern in _pairs(self, "secret_patterns"):
            if not isinstance(category, str) or not isinstance(pattern, str):
                raise ConfigurationException("secret_patterns entries must be [name, regex] strings")
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigurationException(f"Invalid secret pattern {pattern!r}: {e}")

        ratings = {rating.value for rating in Rating}
        for name in ("cpu_bands", "memory_bands", "disk_bands"):
            for upper, rating in _pairs(self, name):
                if not _is_number(upper) or not isinstance(rating, str) or rating not in ratings:
                    raise ConfigurationException(
                        f"{name} entries must be [number, rating], got {[upper, rating]!r}"
                    )

        for limit in fields(RecommendationThresholds):
            value = getattr(self.thresholds, limit.name)
            if not _is_number(value):
                raise ConfigurationException(f"thresholds.{limit.name} must be a number, got {value!r}")

        for rule in self.vulnerable_packages:
            texts = (rule.name, rule.versions, rule.severity, rule.description)
            if not all(isinstance(text, str) for text in texts):
                raise ConfigurationException(f"vulnerable_packages entries must hold strings, got {rule!r}")

        for rule in self.vulnerable_runtimes:
            if not isinstance(rule.prefix, str) or not isinstance(rule.fixed_version, (str, type(None))):
                raise ConfigurationException(f"vulnerable_runtimes entries must hold strings, got {rule!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProbeConfig":
        """
        Create a config from a dictionary, starting from the defaults.

        Raises:
            ConfigurationException: On unknown keys or malformed entries
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationException(f"Unknown configuration keys: {', '.join(unknown)}")

        overrides: dict[str, Any] = {}
        try:
            for key, value in data.items():
                if key == "thresholds":
                    overrides[key] = replace(RecommendationThresholds(), **(value or {}))
                elif key == "vulnerable_packages":
                    overrides[key] = tuple(VulnerablePackageRule(**entry) for entry in value or [])
                elif key == "vulnerable_runtimes":
                    overrides[key] = tuple(RuntimeVersionRule(**entry) for entry in value or [])
                elif key in ("secret_patterns", "cpu_bands", "memory_bands", "disk_bands"):
                    overrides[key] = tuple(tuple(entry) for entry in value or [])
                elif isinstance(value, list):
                    overrides[key] = tuple(value)
                else:
                    overrides[key] = value
        except TypeError as e:
            raise ConfigurationException(f"Invalid configuration entry: {e}")

        config = replace(cls(), **overrides)
        config.validate()
        return config


def load_config(path: Optional[Path] = None) -> ProbeConfig:
    """
    Load probe configuration from a YAML file.

    Args:
        path: YAML file; defaults are returned when None

    Returns:
        Validated ProbeConfig

    Raises:
        ConfigurationException: If the file is missing, unreadable or invalid
    """
    if path is None:
        return ProbeConfig()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationException(f"Cannot read config file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigurationException(f"Invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationException(f"Config file {path} must contain a mapping")

    logger.debug(f"Loaded configuration from {path}: {sorted(data)}")
    return ProbeConfig.from_dict(data)


__all__ = [
    "ProbeConfig",
    "RecommendationThresholds",
    "RuntimeVersionRule",
    "VulnerablePackageRule",
    "load_config",
]
