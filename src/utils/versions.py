"""
Loose version comparison helpers for the heuristic vulnerability scan.
"""

import re

_LEADING_DIGITS = re.compile(r"^(\d+)")


def _normalize(version: str) -> list[int]:
    parts = []
    for part in version.strip().lstrip("vV").split("."):
        match = _LEADING_DIGITS.match(part)
        parts.append(int(match.group(1)) if match else 0)
    return parts


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two dotted versions numerically.

    A leading "v" is ignored and missing components count as zero; any
    suffix after the digits of a component (e.g. "-beta") is ignored.

    Returns:
        Negative if v1 < v2, zero if equal, positive if v1 > v2

    Examples:
        >>> compare_versions("v18.16.1", "18.17.0") < 0
        True
        >>> compare_versions("4.17.21", "4.17.21")
        0
    """
    a = _normalize(v1)
    b = _normalize(v2)
    for i in range(max(len(a), len(b))):
        diff = (a[i] if i < len(a) else 0) - (b[i] if i < len(b) else 0)
        if diff != 0:
            return diff
    return 0


def is_version_in_range(version: str, version_range: str) -> bool:
    """
    Check a version against a range expression.

    Supported ranges are "*" (any version) and "<X.Y.Z" (strictly below).
    Anything else never matches.
    """
    version_range = version_range.strip()
    if version_range == "*":
        return True
    if version_range.startswith("<"):
        return compare_versions(version, version_range[1:].strip()) < 0
    return False
