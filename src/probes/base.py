"""
Probe plugin interface.

A probe is one independent measurement or scan routine. Probes run one at a
time and never raise for failures local to themselves: launch failures,
readiness timeouts and failed measurements are turned into sentinel results
so the rest of the pipeline keeps going.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from core.config import ProbeConfig
from core.exceptions import DockerCommandError, LaunchError, MeasurementError, ReadinessTimeout
from core.lifecycle import ContainerLifecycleManager
from utils.docker_utils import DockerClient

LOCAL_ERRORS = (LaunchError, ReadinessTimeout, MeasurementError, DockerCommandError)
"""Errors a probe absorbs at its boundary."""


class Probe(ABC):
    """
    Abstract base class for probes.

    Attributes:
        name: Short identifier used in logs and container names
    """

    name = "probe"

    def __init__(
        self,
        docker_client: DockerClient,
        containers: ContainerLifecycleManager,
        config: Optional[ProbeConfig] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize probe.

        Args:
            docker_client: Docker/Podman client
            containers: Manager owning the probe's ephemeral containers
            config: Probe configuration (defaults when omitted)
            clock: Wall-clock timer in seconds for duration measurements
            sleep: Sleep function for warm-up and sampling delays
        """
        self.docker = docker_client
        self.containers = containers
        self.config = config or ProbeConfig()
        self.clock = clock
        self.sleep = sleep

    def container_name(self, suffix: str = "test") -> str:
        """Name hint for this probe's container."""
        return f"{self.config.image_prefix}-{self.name}-{suffix}"

    @abstractmethod
    def run(self, image: str) -> Any:
        """
        Run the probe against an image.

        Args:
            image: Image reference under test

        Returns:
            Best-effort result; a sentinel value if the probe failed
        """
        pass


__all__ = ["LOCAL_ERRORS", "Probe"]
