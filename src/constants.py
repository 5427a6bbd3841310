"""
Centralized configuration constants for dockprobe.

This module provides a single source of truth for default values used by the
probes, the recommendation engine and the container lifecycle helpers.
Everything here is plain immutable data; core.config turns it into the
ProbeConfig that is handed to each component.
"""

# ============================================================================
# Naming
# ============================================================================

DEFAULT_IMAGE_PREFIX = "dockprobe"
"""Prefix for images and containers created by dockprobe."""

DEFAULT_APP_DIR = "/app"
"""Application directory copied out of the image for secret scanning."""

# ============================================================================
# Timeouts (in seconds)
# ============================================================================

BUILD_TIMEOUT = 1800
"""Timeout for a single image build (30 minutes)."""

VERSION_CHECK_TIMEOUT = 5
"""Timeout for tool version checks (5 seconds)."""

ENGINE_COMMAND_TIMEOUT = 60
"""Timeout for general container engine commands (1 minute)."""

EXEC_TIMEOUT = 120
"""Timeout for commands executed inside a probe container (2 minutes)."""

SCANNER_TIMEOUT = 600
"""Timeout for external vulnerability scanners (10 minutes)."""

READY_TIMEOUT = 30.0
"""Maximum time to wait for a container to become ready."""

READY_POLL_INTERVAL = 0.5
"""Interval between container readiness checks."""

# ============================================================================
# Probe Sampling
# ============================================================================

BUILD_ITERATIONS = 3
"""Number of uncached builds timed by the build probe."""

STARTUP_ITERATIONS = 5
"""Number of container launches timed by the startup probe."""

STATS_WARMUP = 5.0
"""Delay before memory and CPU sampling so the workload settles."""

CPU_SAMPLES = 10
"""Number of CPU samples taken by the CPU probe."""

CPU_SAMPLE_INTERVAL = 1.0
"""Delay between CPU samples."""

PROBE_WARMUP = 3.0
"""Delay before network and disk probes start measuring."""

PING_TARGETS = ("8.8.8.8", "1.1.1.1", "google.com")
"""Hosts pinged from inside the container by the network probe."""

PING_COUNT = 3
"""Echo requests sent per ping target."""

DISK_WRITE_MB = 100
"""Size of the file written by the disk probe (fixed, not adapted to limits)."""

DISK_READ_MB = 50
"""Size of the file read back by the disk probe (fixed, not adapted to limits)."""

LARGEST_LAYERS_COUNT = 5
"""Number of largest layers listed in the layer analysis."""

# ============================================================================
# Rating Bands
# ============================================================================

CPU_RATING_BANDS = ((5.0, "Excellent"), (15.0, "Good"), (30.0, "Fair"))
"""Upper bounds (exclusive) of average CPU percentage per rating."""

MEMORY_RATING_BANDS = ((10.0, "Excellent"), (25.0, "Good"), (50.0, "Fair"))
"""Upper bounds (exclusive) of memory use as a percentage of the limit."""

DISK_RATING_BANDS = ((100.0, "Excellent"), (50.0, "Good"), (20.0, "Fair"))
"""Lower bounds (exclusive) of mean disk throughput in MB/s per rating."""

# ============================================================================
# Recommendation Thresholds
# ============================================================================

BUILD_TIME_THRESHOLD_MS = 60000
"""Average build time above which a build recommendation is raised."""

STARTUP_TIME_THRESHOLD_MS = 10000
"""Average startup time above which a startup recommendation is raised."""

MEMORY_PERCENT_THRESHOLD = 80.0
"""Memory percentage above which a memory recommendation is raised."""

CPU_PERCENT_THRESHOLD = 50.0
"""Average CPU percentage above which a CPU recommendation is raised."""

NETWORK_LATENCY_THRESHOLD_MS = 100.0
"""Average ping latency above which a network recommendation is raised."""

# ============================================================================
# Secret Scanning
# ============================================================================

SECRET_PATTERNS = (
    ("password", r"password\s*[:=]\s*['\"]?([^'\"\s]+)"),
    ("secret", r"secret\s*[:=]\s*['\"]?([^'\"\s]+)"),
    ("token", r"token\s*[:=]\s*['\"]?([^'\"\s]+)"),
    ("api_key", r"api[_-]?key\s*[:=]\s*['\"]?([^'\"\s]+)"),
    ("aws_access_key", r"aws[_-]?access[_-]?key\s*[:=]\s*['\"]?([^'\"\s]+)"),
)
"""(category, regex) pairs matched case-insensitively against file contents."""

SECRET_SCAN_EXTENSIONS = (".js", ".json", ".yml", ".yaml", ".env", ".config", ".conf")
"""Only files with one of these suffixes are scanned for secrets."""

SECRET_SCAN_SKIP_DIRS = ("node_modules", ".git", "dist", "build")
"""Directories never descended into by the secret scanner."""

# ============================================================================
# Heuristic Vulnerability Tables
# ============================================================================

VULNERABLE_PACKAGES = (
    ("lodash", "<4.17.21", "high", "Prototype pollution"),
    ("axios", "<0.21.1", "medium", "SSRF vulnerability"),
    ("request", "*", "high", "Deprecated and vulnerable"),
    ("moment", "<2.29.4", "medium", "Path traversal"),
)
"""(package, version range, severity, description) tuples for the heuristic scan."""

VULNERABLE_RUNTIMES = (
    ("v14", None),
    ("v15", None),
    ("v16", None),
    ("v17", None),
    ("v18", "18.17.0"),
    ("v20", "20.5.0"),
)
"""(version prefix, first fixed version) pairs for the Node.js runtime check.

A fixed version of None means every release on that line is vulnerable.
"""
