"""
Image size and layer history analysis.

Sizes here come from ``docker images`` and ``docker history`` and therefore
use decimal (power of 1000) units.
"""

import logging

from core.exceptions import DockerCommandError
from core.models import UNKNOWN, LayerAnalysis, LayerRecord
from probes.base import Probe
from utils.units import parse_decimal_size

logger = logging.getLogger(__name__)


def size_to_bytes(size: str) -> int:
    """Decimal size text to bytes, 0 if it cannot be parsed."""
    try:
        return parse_decimal_size(size)
    except ValueError:
        logger.debug(f"Unparseable layer size {size!r}, counting as 0")
        return 0


def largest_layers(layers, count: int) -> tuple[LayerRecord, ...]:
    """Top layers by size, largest first; ties keep build order."""
    return tuple(sorted(layers, key=lambda layer: layer.size_bytes, reverse=True)[:count])


class ImageSizeProbe(Probe):
    """Total image size as listed by the engine."""

    name = "size"

    def run(self, image: str) -> tuple[str, int]:
        """
        Returns:
            Tuple of (size text, size in bytes); ("Unknown", 0) on failure
        """
        try:
            size = self.docker.image_size(image)
        except DockerCommandError as e:
            logger.warning(f"⚠️  Could not get size of {image}: {e.reason}")
            return UNKNOWN, 0

        if not size:
            return UNKNOWN, 0
        return size, size_to_bytes(size)


class LayerAnalysisProbe(Probe):
    """Layer history in build order plus the largest layers."""

    name = "layers"

    def run(self, image: str) -> LayerAnalysis:
        logger.info("📦 Analyzing image layers...")

        try:
            history = self.docker.image_history(image)
        except DockerCommandError as e:
            logger.warning(f"⚠️  Could not read layer history of {image}: {e.reason}")
            return LayerAnalysis.empty()

        # history lists the newest layer first
        layers = tuple(
            LayerRecord(command=command, size_bytes=size_to_bytes(size), size=size)
            for command, size in reversed(history)
        )
        return LayerAnalysis(
            layers=layers,
            largest_layers=largest_layers(layers, self.config.largest_layers_count),
        )
