"""
Pytest fixtures and configuration for dockprobe tests.

Provides a mocked container engine, a fake clock and fast probe settings so
that no test touches a real engine or sleeps.
"""

import pytest
from unittest.mock import Mock

from core.config import ProbeConfig
from core.lifecycle import ContainerLifecycleManager
from core.models import (
    AggregatedMetric,
    CPUUsage,
    DiskIO,
    DiskSpeed,
    MemoryUsage,
    NetworkLatency,
    PerformanceReport,
    ProbeStatus,
    Rating,
)
from utils.docker_utils import DockerClient


class FakeClock:
    """Clock whose time only moves when sleep() is called or it is advanced."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    """Fake clock shared by lifecycle managers and probes."""
    return FakeClock()


@pytest.fixture
def docker_client():
    """Mock engine client with a healthy running container by default."""
    client = Mock(spec=DockerClient)
    client.runtime = "docker"
    client.run_detached.return_value = "abc123def456"
    client.create_container.return_value = "created789"
    client.inspect_state.return_value = {"Status": "running"}
    client.exec_in_container.return_value = ""
    client.image_size.return_value = ""
    client.image_history.return_value = []
    return client


@pytest.fixture
def fast_config():
    """Probe configuration with small iteration counts."""
    return ProbeConfig(
        build_iterations=3,
        startup_iterations=2,
        cpu_samples=3,
        ready_timeout=5.0,
    )


@pytest.fixture
def containers(docker_client, fake_clock):
    """Container lifecycle manager on top of the mock engine."""
    return ContainerLifecycleManager(
        docker_client,
        poll_interval=0.5,
        clock=fake_clock,
        sleep=fake_clock.sleep,
    )


@pytest.fixture
def probe_kwargs(docker_client, containers, fast_config, fake_clock):
    """Keyword arguments accepted by every Probe subclass."""
    return {
        "docker_client": docker_client,
        "containers": containers,
        "config": fast_config,
        "clock": fake_clock,
        "sleep": fake_clock.sleep,
    }


@pytest.fixture
def baseline_report():
    """Performance report that triggers no recommendation."""
    return PerformanceReport(
        image="myapp:latest",
        build_time=AggregatedMetric(average=12000, min=11000, max=13000, sample_count=3),
        startup_time=AggregatedMetric(average=800, min=700, max=900, sample_count=5),
        memory_usage=MemoryUsage(
            current_bytes=128 * 1024 ** 2,
            total_bytes=2 * 1024 ** 3,
            percentage=6.0,
            efficiency=Rating.EXCELLENT,
        ),
        cpu_usage=CPUUsage(
            usage=AggregatedMetric(average=2.5, min=1.0, max=4.0, sample_count=10, unit="%"),
            efficiency=Rating.EXCELLENT,
        ),
        network_latency=NetworkLatency(average=12.5, status=ProbeStatus.SUCCESS),
        disk_io=DiskIO(
            write=DiskSpeed(speed=250.0, status=ProbeStatus.SUCCESS),
            read=DiskSpeed(speed=900.0, status=ProbeStatus.SUCCESS),
            overall=Rating.EXCELLENT,
        ),
    )
