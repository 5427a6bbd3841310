"""
Performance probes: build time, startup time, memory, CPU, network and disk.

Each probe works on its own ephemeral container (the build probe works on
throwaway images instead) and degrades to a zero-sample or "Unknown" result
when the engine or the image does not cooperate.
"""

import logging
import math
from pathlib import Path
from typing import Optional

from core.aggregation import aggregate, rate_cpu, rate_disk, rate_memory, round_half_up
from core.exceptions import DockerCommandError, MeasurementError
from core.lifecycle import unique_suffix
from core.models import (
    AggregatedMetric,
    CPUUsage,
    DiskIO,
    DiskSpeed,
    MemoryUsage,
    NetworkLatency,
    PingResult,
    ProbeStatus,
    Rating,
)
from probes.base import LOCAL_ERRORS, Probe
from utils.units import (
    parse_binary_size,
    parse_decimal_size,
    parse_memory_usage,
    parse_percentage,
    parse_ping_average,
)

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float, end: float) -> int:
    return int(round_half_up((end - start) * 1000))


class BuildTimeProbe(Probe):
    """Time full, uncached rebuilds of the project image."""

    name = "build"

    def __init__(self, *args, project_path: Optional[Path] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.project_path = Path(project_path or Path.cwd())

    def run(self, image: str) -> AggregatedMetric:
        """Rebuild the project without cache; the supplied image is not used."""
        logger.info("⏱️  Measuring build time...")

        tag = f"{self.config.image_prefix}-build-test-{unique_suffix()}"
        samples = [self._build_once(tag, i) for i in range(self.config.build_iterations)]
        return aggregate(samples, unit="ms")

    def _build_once(self, tag: str, iteration: int) -> Optional[int]:
        start = self.clock()
        try:
            self.docker.build_image(tag, self.project_path, no_cache=True)
        except DockerCommandError as e:
            logger.warning(f"⚠️  Build test {iteration + 1} failed: {e.reason}")
            return None
        elapsed = _elapsed_ms(start, self.clock())

        try:
            self.docker.remove_image(tag)
        except DockerCommandError as e:
            logger.debug(f"Failed to remove build test image {tag}: {e.reason}")

        return elapsed


class StartupTimeProbe(Probe):
    """Time from launching a detached container until it is ready."""

    name = "startup"

    def run(self, image: str) -> AggregatedMetric:
        logger.info("⏱️  Measuring container startup time...")

        samples = [self._start_once(image, i) for i in range(self.config.startup_iterations)]
        return aggregate(samples, unit="ms")

    def _start_once(self, image: str, iteration: int) -> Optional[int]:
        start = self.clock()
        try:
            with self.containers.ephemeral(
                image,
                self.container_name(f"test-{iteration}"),
                ready_timeout=self.config.ready_timeout,
            ):
                return _elapsed_ms(start, self.clock())
        except LOCAL_ERRORS as e:
            logger.warning(f"⚠️  Startup test {iteration + 1} failed: {e}")
            return None


class MemoryProbe(Probe):
    """Single memory snapshot of a running container after warm-up."""

    name = "memory"

    def run(self, image: str) -> MemoryUsage:
        logger.info("💾 Measuring memory usage...")

        try:
            with self.containers.ephemeral(image, self.container_name()) as container:
                self.sleep(self.config.stats_warmup)
                return self.measure(container)
        except LOCAL_ERRORS as e:
            logger.warning(f"⚠️  Memory usage measurement failed: {e}")
            return MemoryUsage.unavailable()

    def measure(self, container: str) -> MemoryUsage:
        """
        Read memory usage from one stats snapshot.

        Raises:
            MeasurementError: If the stats output cannot be parsed
        """
        stats = self.docker.stats(container, "{{.MemUsage}}\t{{.MemPerc}}")
        # podman reports memory in decimal units
        size_parser = parse_decimal_size if self.docker.runtime == "podman" else parse_binary_size
        try:
            mem_usage, mem_percent = stats.split("\t")
            current, total = parse_memory_usage(mem_usage, size_parser)
            percentage = parse_percentage(mem_percent)
        except ValueError as e:
            raise MeasurementError(
                self.name, f"unexpected {self.docker.runtime} stats output {stats!r}: {e}"
            )

        return MemoryUsage(
            current_bytes=current,
            total_bytes=total,
            percentage=percentage,
            efficiency=rate_memory(current, total, self.config.memory_bands),
        )


class CPUProbe(Probe):
    """CPU percentage sampled at a fixed interval after warm-up."""

    name = "cpu"

    def run(self, image: str) -> CPUUsage:
        logger.info("🔥 Measuring CPU usage...")

        try:
            with self.containers.ephemeral(image, self.container_name()) as container:
                self.sleep(self.config.stats_warmup)
                samples = self.collect_samples(container)
        except LOCAL_ERRORS as e:
            logger.warning(f"⚠️  CPU usage measurement failed: {e}")
            return CPUUsage.unavailable()

        usage = aggregate(samples, unit="%", digits=2)
        if not usage.available:
            logger.warning("⚠️  CPU usage measurement failed: no usable samples")
            return CPUUsage(usage=usage, efficiency=Rating.UNKNOWN)

        return CPUUsage(usage=usage, efficiency=rate_cpu(usage.average, self.config.cpu_bands))

    def collect_samples(self, container: str) -> list[Optional[float]]:
        samples: list[Optional[float]] = []
        for i in range(self.config.cpu_samples):
            if i > 0:
                self.sleep(self.config.cpu_sample_interval)
            try:
                samples.append(parse_percentage(self.docker.stats(container, "{{.CPUPerc}}")))
            except (DockerCommandError, ValueError) as e:
                logger.debug(f"CPU sample {i + 1} failed: {e}")
                samples.append(None)
        return samples


class NetworkLatencyProbe(Probe):
    """Ping a fixed set of targets from inside a container."""

    name = "network"

    def run(self, image: str) -> NetworkLatency:
        logger.info("🌐 Measuring network latency...")

        try:
            with self.containers.ephemeral(image, self.container_name()) as container:
                self.sleep(self.config.probe_warmup)
                results = [r for r in (self.ping(container, t) for t in self.config.ping_targets) if r]
        except LOCAL_ERRORS as e:
            logger.warning(f"⚠️  Network latency measurement failed: {e}")
            return NetworkLatency.failed()

        if not results:
            logger.warning("⚠️  Network latency measurement failed: no target responded")
            return NetworkLatency.failed()

        average = math.fsum(r.avg_time for r in results) / len(results)
        return NetworkLatency(
            average=round_half_up(average, 2),
            targets=tuple(results),
            status=ProbeStatus.SUCCESS,
        )

    def ping(self, container: str, target: str) -> Optional[PingResult]:
        """Ping one target; None if it did not answer."""
        try:
            output = self.docker.exec_in_container(
                container, ["ping", "-c", str(self.config.ping_count), target]
            )
        except DockerCommandError as e:
            logger.debug(f"Ping to {target} failed: {e.reason}")
            return None

        avg_time = parse_ping_average(output)
        if avg_time is None:
            logger.debug(f"No round-trip summary in ping output for {target}")
            return None
        return PingResult(target=target, avg_time=avg_time)


class DiskIOProbe(Probe):
    """
    Sequential write then read of fixed-size files under /tmp.

    The sizes do not adapt to the container's limits, and the read usually
    hits the page cache, so results are only useful for relative comparison.
    """

    name = "disk"

    def run(self, image: str) -> DiskIO:
        logger.info("💿 Measuring disk I/O...")

        try:
            with self.containers.ephemeral(image, self.container_name()) as container:
                self.sleep(self.config.probe_warmup)
                write = self.test_write(container)
                read = self.test_read(container)
        except LOCAL_ERRORS as e:
            logger.warning(f"⚠️  Disk I/O measurement failed: {e}")
            return DiskIO.failed()

        return DiskIO(write=write, read=read, overall=rate_disk(write, read, self.config.disk_bands))

    def _timed_dd(self, container: str, args: list[str], size_mb: int) -> DiskSpeed:
        start = self.clock()
        self.docker.exec_in_container(container, ["dd", *args])
        seconds = max(self.clock() - start, 1e-3)
        return DiskSpeed(speed=round_half_up(size_mb / seconds, 2), status=ProbeStatus.SUCCESS)

    def _remove(self, container: str, path: str) -> None:
        try:
            self.docker.exec_in_container(container, ["rm", "-f", path])
        except DockerCommandError as e:
            logger.debug(f"Failed to remove {path} in {container[:12]}: {e.reason}")

    def test_write(self, container: str) -> DiskSpeed:
        size_mb = self.config.disk_write_mb
        path = "/tmp/dockprobe_write"
        try:
            return self._timed_dd(
                container, ["if=/dev/zero", f"of={path}", "bs=1M", f"count={size_mb}"], size_mb
            )
        except DockerCommandError as e:
            logger.debug(f"Disk write test failed: {e.reason}")
            return DiskSpeed.failed()
        finally:
            self._remove(container, path)

    def test_read(self, container: str) -> DiskSpeed:
        size_mb = self.config.disk_read_mb
        path = "/tmp/dockprobe_read"
        try:
            self.docker.exec_in_container(
                container, ["dd", "if=/dev/zero", f"of={path}", "bs=1M", f"count={size_mb}"]
            )
            return self._timed_dd(container, [f"if={path}", "of=/dev/null", "bs=1M"], size_mb)
        except DockerCommandError as e:
            logger.debug(f"Disk read test failed: {e.reason}")
            return DiskSpeed.failed()
        finally:
            self._remove(container, path)
