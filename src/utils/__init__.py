"""Utility modules for container engine access and unit handling."""

from utils.docker_utils import DockerClient
from utils.units import (
    format_binary_size,
    parse_binary_size,
    parse_decimal_size,
)

__all__ = [
    "DockerClient",
    "format_binary_size",
    "parse_binary_size",
    "parse_decimal_size",
]
