"""Measurement and scan probes run against the image under test."""

from probes.base import Probe
from probes.layers import ImageSizeProbe, LayerAnalysisProbe
from probes.performance import (
    BuildTimeProbe,
    CPUProbe,
    DiskIOProbe,
    MemoryProbe,
    NetworkLatencyProbe,
    StartupTimeProbe,
)
from probes.permissions import PermissionProbe
from probes.secrets import SecretScanProbe
from probes.vulnerabilities import VulnerabilityProbe, default_providers

__all__ = [
    "Probe",
    "BuildTimeProbe",
    "StartupTimeProbe",
    "MemoryProbe",
    "CPUProbe",
    "NetworkLatencyProbe",
    "DiskIOProbe",
    "VulnerabilityProbe",
    "default_providers",
    "SecretScanProbe",
    "PermissionProbe",
    "ImageSizeProbe",
    "LayerAnalysisProbe",
]
