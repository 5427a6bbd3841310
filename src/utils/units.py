"""
Unit parsing for container engine output.

The engine reports sizes in two different conventions and the two must never
be mixed up:

- image and layer sizes (``docker images``, ``docker history``) use decimal
  suffixes, powers of 1000: B, kB, MB, GB, TB
- live memory statistics (``docker stats``) use binary suffixes, powers of
  1024: B, KiB, MiB, GiB, TiB. ``podman stats`` reports memory with decimal
  suffixes instead

Each parser only accepts its own suffixes and raises ValueError for anything
else, so a string can never be silently interpreted with the wrong base.
"""

import re
from typing import Callable, Optional

DECIMAL_UNITS = {"B": 0, "kB": 1, "MB": 2, "GB": 3, "TB": 4}
BINARY_UNITS = {"B": 0, "KiB": 1, "MiB": 2, "GiB": 3, "TiB": 4}
BINARY_FORMAT_UNITS = ["B", "KiB", "MiB", "GiB"]

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]+)\s*$")
_PERCENT_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*%\s*$")
_PING_SUMMARY_RE = re.compile(
    r"(?:rtt|round-trip)\s+min/avg/max(?:/(?:mdev|stddev))?\s*=\s*"
    r"([\d.]+)/([\d.]+)/([\d.]+)"
)
_PING_AVG_RE = re.compile(r"avg\s*=\s*(\d+(?:\.\d+)?)")


def _parse_size(size_str: str, units: dict[str, int], base: int) -> int:
    match = _SIZE_RE.match(size_str or "")
    if not match:
        raise ValueError(f"Unparseable size: {size_str!r}")

    value, unit = match.groups()
    if unit not in units:
        raise ValueError(f"Unknown unit {unit!r} in {size_str!r}")

    return int(round(float(value) * base ** units[unit]))


def parse_decimal_size(size_str: str) -> int:
    """
    Parse an image/layer size string into bytes using powers of 1000.

    Args:
        size_str: Engine size text such as "1.25GB", "234MB", "45.3kB", "0B"

    Returns:
        Size in bytes

    Raises:
        ValueError: If the string is malformed or uses a non-decimal unit

    Examples:
        >>> parse_decimal_size("45.3kB")
        45300
        >>> parse_decimal_size("1.25GB")
        1250000000
    """
    return _parse_size(size_str, DECIMAL_UNITS, 1000)


def parse_binary_size(size_str: str) -> int:
    """
    Parse a memory statistic string into bytes using powers of 1024.

    Args:
        size_str: Engine memory text such as "128MiB", "2GiB", "512KiB"

    Returns:
        Size in bytes

    Raises:
        ValueError: If the string is malformed or uses a non-binary unit

    Examples:
        >>> parse_binary_size("128MiB")
        134217728
        >>> parse_binary_size("1.5 KiB")
        1536
    """
    return _parse_size(size_str, BINARY_UNITS, 1024)


def format_binary_size(num_bytes: float) -> str:
    """
    Format a byte count with binary units, rounded to 2 decimal places.

    Examples:
        >>> format_binary_size(134217728)
        '128 MiB'
        >>> format_binary_size(1536)
        '1.5 KiB'
    """
    size = float(num_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(BINARY_FORMAT_UNITS) - 1:
        size /= 1024
        unit_index += 1

    text = f"{size:.2f}".rstrip("0").rstrip(".")
    return f"{text} {BINARY_FORMAT_UNITS[unit_index]}"


def parse_memory_usage(
    usage_str: str, size_parser: Callable[[str], int] = parse_binary_size
) -> tuple[int, int]:
    """
    Parse the ``MemUsage`` column of ``docker stats``.

    Args:
        usage_str: Text such as "128MiB / 2GiB"
        size_parser: Parser for each side; podman needs parse_decimal_size

    Returns:
        Tuple of (current_bytes, limit_bytes)

    Raises:
        ValueError: If either side cannot be parsed
    """
    parts = usage_str.split("/")
    if len(parts) != 2:
        raise ValueError(f"Unparseable memory usage: {usage_str!r}")
    return size_parser(parts[0]), size_parser(parts[1])


def parse_percentage(percent_str: str) -> float:
    """
    Parse a percentage column such as "6.00%".

    Raises:
        ValueError: If the text is not a percentage (e.g. "--")
    """
    match = _PERCENT_RE.match(percent_str or "")
    if not match:
        raise ValueError(f"Unparseable percentage: {percent_str!r}")
    return float(match.group(1))


def parse_ping_average(ping_output: str) -> Optional[float]:
    """
    Extract the average round-trip time (ms) from ping output.

    Understands the iputils summary ("rtt min/avg/max/mdev = ...") and the
    busybox one ("round-trip min/avg/max = ...").

    Returns:
        Average in milliseconds, or None if no summary line was found
    """
    match = _PING_SUMMARY_RE.search(ping_output or "")
    if match:
        return float(match.group(2))

    match = _PING_AVG_RE.search(ping_output or "")
    if match:
        return float(match.group(1))

    return None
