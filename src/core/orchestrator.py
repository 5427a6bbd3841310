"""
Orchestrates the benchmark and scan pipelines for a single image.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

from core.config import ProbeConfig
from core.lifecycle import AcquiredImage, ContainerLifecycleManager, ImageLifecycleManager
from core.models import PerformanceReport, PermissionFinding, ScanReport, VulnerabilityReport
from core.recommendations import RecommendationEngine
from core.scanner_interface import VulnerabilityProvider
from probes import (
    BuildTimeProbe,
    CPUProbe,
    DiskIOProbe,
    ImageSizeProbe,
    LayerAnalysisProbe,
    MemoryProbe,
    NetworkLatencyProbe,
    PermissionProbe,
    SecretScanProbe,
    StartupTimeProbe,
    VulnerabilityProbe,
    default_providers,
)
from utils.docker_utils import DockerClient
from utils.logging_helpers import log_info_header, log_summary

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """
    Run the probe set against one image and assemble the report.

    The image under test is acquired first (built from the project directory
    when no tag is given) and released when the run ends, whatever happened
    in between. Only a failure to acquire the image aborts a run; every
    probe degrades to a sentinel result on its own.
    """

    def __init__(
        self,
        docker_client: DockerClient,
        config: Optional[ProbeConfig] = None,
        project_path: Optional[Path] = None,
        keep_image: bool = False,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
        providers: Optional[Sequence[VulnerabilityProvider]] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            docker_client: Docker/Podman client
            config: Probe configuration (defaults when omitted)
            project_path: Build context for the image and build-time probe
            keep_image: Keep a system-built image after the run
            clock: Timer used for duration measurements and readiness deadlines
            sleep: Sleep function used for warm-ups and polling
            providers: Vulnerability scanner chain (Scout, Trivy, heuristic by default)
        """
        self.docker = docker_client
        self.config = config or ProbeConfig()
        self.project_path = Path(project_path or Path.cwd())
        self.keep_image = keep_image

        self.images = ImageLifecycleManager(docker_client, self.project_path, self.config.image_prefix)
        self.containers = ContainerLifecycleManager(
            docker_client,
            poll_interval=self.config.ready_poll_interval,
            clock=clock,
            sleep=sleep,
        )

        probe_args = (docker_client, self.containers, self.config)
        probe_kwargs = {"clock": clock, "sleep": sleep}

        self.build_probe = BuildTimeProbe(*probe_args, project_path=self.project_path, **probe_kwargs)
        self.startup_probe = StartupTimeProbe(*probe_args, **probe_kwargs)
        self.memory_probe = MemoryProbe(*probe_args, **probe_kwargs)
        self.cpu_probe = CPUProbe(*probe_args, **probe_kwargs)
        self.network_probe = NetworkLatencyProbe(*probe_args, **probe_kwargs)
        self.disk_probe = DiskIOProbe(*probe_args, **probe_kwargs)

        if providers is None:
            providers = default_providers(docker_client, self.config)
        self.vulnerability_probe = VulnerabilityProbe(providers)
        self.size_probe = ImageSizeProbe(*probe_args, **probe_kwargs)
        self.layer_probe = LayerAnalysisProbe(*probe_args, **probe_kwargs)
        self.secret_probe = SecretScanProbe(*probe_args, **probe_kwargs)
        self.permission_probe = PermissionProbe(*probe_args, **probe_kwargs)

        self.recommendations = RecommendationEngine(self.config.thresholds)

    @contextmanager
    def _acquired(self, tag: Optional[str]) -> Iterator[AcquiredImage]:
        """Acquire the image under test and release it on every exit path."""
        image = self.images.acquire(tag)
        try:
            yield image
        finally:
            if self.keep_image and image.owned:
                logger.info(f"Keeping image {image.tag}")
            else:
                self.images.release(image)

    def run_performance(self, tag: Optional[str] = None) -> PerformanceReport:
        """
        Run the performance probes.

        Args:
            tag: Image to test; the project is built when omitted

        Returns:
            PerformanceReport with recommendations

        Raises:
            AcquisitionError: If the image cannot be built
        """
        with self._acquired(tag) as image:
            log_info_header(f"🚀 Performance benchmark: {image.tag}", logger=logger)

            report = PerformanceReport(
                image=image.tag,
                build_time=self.build_probe.run(image.tag),
                startup_time=self.startup_probe.run(image.tag),
                memory_usage=self.memory_probe.run(image.tag),
                cpu_usage=self.cpu_probe.run(image.tag),
                network_latency=self.network_probe.run(image.tag),
                disk_io=self.disk_probe.run(image.tag),
            )
            report = replace(report, recommendations=self.recommendations.evaluate(report))

        log_summary(
            "Performance summary",
            {
                "Build time": f"{report.build_time.average} ms",
                "Startup time": f"{report.startup_time.average} ms",
                "Memory": f"{report.memory_usage.current} / {report.memory_usage.total}",
                "CPU": f"{report.cpu_usage.average}%",
                "Recommendations": len(report.recommendations),
            },
            logger=logger,
        )
        return report

    def run_scan(self, tag: Optional[str] = None) -> ScanReport:
        """
        Run the security scan probes.

        Args:
            tag: Image to scan; the project is built when omitted

        Returns:
            ScanReport

        Raises:
            AcquisitionError: If the image cannot be built
        """
        with self._acquired(tag) as image:
            log_info_header(f"🔒 Security scan: {image.tag}", logger=logger)

            vulnerabilities = self.vulnerability_probe.run(image.tag)
            size, size_bytes = self.size_probe.run(image.tag)
            report = ScanReport(
                image=image.tag,
                vulnerabilities=vulnerabilities,
                size=size,
                size_bytes=size_bytes,
                layers=self.layer_probe.run(image.tag),
                secrets=self.secret_probe.run(image.tag),
                permissions=self.permission_probe.run(image.tag),
            )

        log_summary(
            "Scan summary",
            {
                "Vulnerabilities": f"{report.vulnerabilities.total} ({report.vulnerabilities.scanner})",
                "Image size": report.size,
                "Layers": report.layers.total,
                "Potential secrets": len(report.secrets),
                "Permission issues": len(report.permissions.issues),
            },
            logger=logger,
        )
        return report

    def run_size(self, tag: Optional[str] = None) -> ScanReport:
        """
        Measure image size and layers only.

        The other scan sections are left empty.
        """
        with self._acquired(tag) as image:
            log_info_header(f"📦 Size analysis: {image.tag}", logger=logger)

            size, size_bytes = self.size_probe.run(image.tag)
            return ScanReport(
                image=image.tag,
                vulnerabilities=VulnerabilityReport(scanner="none"),
                size=size,
                size_bytes=size_bytes,
                layers=self.layer_probe.run(image.tag),
                secrets=(),
                permissions=PermissionFinding(),
            )


__all__ = ["PipelineOrchestrator"]
