"""
Image and container lifecycle management.

The image manager resolves the image under test, building it from the
project directory when the caller does not supply one. The container manager
starts, awaits and tears down the ephemeral containers that probes run in.

Cleanup operations are best-effort: they never raise, and report what
happened through a CleanupOutcome instead.
"""

import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional

from core.exceptions import BuildError, DockerCommandError, LaunchError, ReadinessTimeout
from core.retry import RetryPolicy
from utils.docker_utils import DockerClient

logger = logging.getLogger(__name__)

FAILED_STATES = ("exited", "dead")


def unique_suffix() -> str:
    """Process-unique suffix (epoch milliseconds + pid) for tags and names."""
    return f"{int(time.time() * 1000)}-{os.getpid()}"


@dataclass(frozen=True)
class CleanupOutcome:
    """
    Result of a best-effort cleanup step.

    Attributes:
        target: Image tag or container id that was cleaned up
        action: What was attempted ("remove-image", "stop", "remove")
        succeeded: Whether the engine accepted the request
        skipped: True when nothing had to be done
        error: Engine error text if the attempt failed
    """

    target: str
    action: str
    succeeded: bool
    skipped: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class AcquiredImage:
    """
    Image under test and whether dockprobe owns it.

    Owned images were built by dockprobe and are removed when the run ends;
    caller-supplied images are never touched.
    """

    tag: str
    owned: bool


class ImageLifecycleManager:
    """Resolve the image under test and release it when the run is over."""

    def __init__(
        self,
        docker_client: DockerClient,
        project_path: Optional[Path] = None,
        image_prefix: str = "dockprobe",
    ):
        """
        Initialize image lifecycle manager.

        Args:
            docker_client: Docker/Podman client
            project_path: Build context used when no image is supplied
            image_prefix: Prefix for generated image tags
        """
        self.docker = docker_client
        self.project_path = Path(project_path or Path.cwd())
        self.image_prefix = image_prefix

    def acquire(self, tag: Optional[str] = None) -> AcquiredImage:
        """
        Return the image to test, building one if no tag is given.

        Args:
            tag: Caller-supplied image reference (never removed by dockprobe)

        Returns:
            AcquiredImage describing the image and its ownership

        Raises:
            BuildError: If building the project image fails
        """
        if tag:
            logger.debug(f"Using caller-supplied image {tag}")
            return AcquiredImage(tag=tag, owned=False)

        build_tag = f"{self.image_prefix}-{unique_suffix()}"
        logger.info(f"🔨 Building temporary image {build_tag} from {self.project_path}")

        try:
            self.docker.build_image(build_tag, self.project_path)
        except DockerCommandError as e:
            raise BuildError(build_tag, e.stderr or e.reason)

        return AcquiredImage(tag=build_tag, owned=True)

    def release(self, image: AcquiredImage) -> CleanupOutcome:
        """
        Remove an owned image. Never raises.

        Args:
            image: Image returned by acquire()

        Returns:
            CleanupOutcome of the removal (skipped for caller-supplied images)
        """
        if not image.owned:
            return CleanupOutcome(target=image.tag, action="remove-image", succeeded=True, skipped=True)

        try:
            self.docker.remove_image(image.tag)
        except DockerCommandError as e:
            logger.warning(f"⚠️  Failed to remove temporary image {image.tag}: {e.reason}")
            return CleanupOutcome(target=image.tag, action="remove-image", succeeded=False, error=e.reason)

        logger.debug(f"Removed temporary image {image.tag}")
        return CleanupOutcome(target=image.tag, action="remove-image", succeeded=True)


class ContainerLifecycleManager:
    """
    Start, await and tear down ephemeral probe containers.

    Each container belongs to exactly one probe invocation; use ephemeral()
    or created() so that teardown happens on every exit path.
    """

    def __init__(
        self,
        docker_client: DockerClient,
        poll_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize container lifecycle manager.

        Args:
            docker_client: Docker/Podman client
            poll_interval: Seconds between readiness checks
            clock: Monotonic time source for readiness deadlines
            sleep: Sleep function used between readiness checks
        """
        self.docker = docker_client
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep
        self.run_suffix = unique_suffix()

    def start_detached(self, image: str, name_hint: str) -> str:
        """
        Start a detached container.

        Raises:
            LaunchError: If the engine refuses to start it
        """
        name = f"{name_hint}-{self.run_suffix}"
        try:
            container = self.docker.run_detached(image, name=name)
        except DockerCommandError as e:
            # run -d can leave a created-but-dead container behind
            self._discard(name)
            raise LaunchError(image, e.stderr or e.reason)

        logger.debug(f"Started container {name} ({container[:12]})")
        return container

    def _discard(self, name: str) -> None:
        try:
            self.docker.remove_container(name)
        except DockerCommandError as e:
            logger.debug(f"Nothing to discard for {name}: {e.reason}")

    def create(self, image: str) -> str:
        """
        Create a container without starting it.

        Raises:
            LaunchError: If the engine refuses to create it
        """
        try:
            return self.docker.create_container(image)
        except DockerCommandError as e:
            raise LaunchError(image, e.stderr or e.reason)

    def is_ready(self, container: str) -> bool:
        """
        Single readiness check.

        Ready means running with no health check configured, or running and
        reported healthy.

        Raises:
            LaunchError: If inspect fails or the container has exited
        """
        try:
            state = self.docker.inspect_state(container)
        except DockerCommandError as e:
            raise LaunchError(container, f"container failed to start: {e.reason}")

        status = state.get("Status", "")
        if status in FAILED_STATES:
            raise LaunchError(container, f"container {status} (exit code {state.get('ExitCode')})")
        if status != "running":
            return False

        health = state.get("Health")
        if not health:
            return True
        return health.get("Status") == "healthy"

    def await_ready(self, container: str, timeout: float) -> None:
        """
        Poll until the container is ready.

        Raises:
            ReadinessTimeout: If it is not ready within timeout seconds
            LaunchError: If the container crashed or cannot be inspected
        """
        policy = RetryPolicy(
            interval=self.poll_interval,
            timeout=timeout,
            clock=self.clock,
            sleep=self.sleep,
        )
        if not policy.poll(lambda: self.is_ready(container)):
            raise ReadinessTimeout(container, timeout)

    def stop(self, container: str) -> CleanupOutcome:
        """Stop a container. Never raises."""
        try:
            self.docker.stop_container(container)
        except DockerCommandError as e:
            logger.debug(f"Failed to stop container {container[:12]}: {e.reason}")
            return CleanupOutcome(target=container, action="stop", succeeded=False, error=e.reason)
        return CleanupOutcome(target=container, action="stop", succeeded=True)

    def remove(self, container: str) -> CleanupOutcome:
        """Remove a container. Never raises."""
        try:
            self.docker.remove_container(container)
        except DockerCommandError as e:
            logger.warning(f"⚠️  Failed to remove container {container[:12]}: {e.reason}")
            return CleanupOutcome(target=container, action="remove", succeeded=False, error=e.reason)
        return CleanupOutcome(target=container, action="remove", succeeded=True)

    def teardown(self, container: str) -> tuple[CleanupOutcome, CleanupOutcome]:
        """Stop then remove; a failed stop does not prevent the remove."""
        return self.stop(container), self.remove(container)

    @contextmanager
    def ephemeral(
        self,
        image: str,
        name_hint: str,
        ready_timeout: Optional[float] = None,
    ) -> Iterator[str]:
        """
        Run a detached container for the duration of a with block.

        The container is awaited before the block runs when ready_timeout is
        set, and is stopped and removed however the block exits.

        Yields:
            Container id
        """
        container = self.start_detached(image, name_hint)
        try:
            if ready_timeout is not None:
                self.await_ready(container, ready_timeout)
            yield container
        finally:
            self.teardown(container)

    @contextmanager
    def created(self, image: str) -> Iterator[str]:
        """
        Create a never-started container for the duration of a with block.

        Yields:
            Container id
        """
        container = self.create(image)
        try:
            yield container
        finally:
            self.remove(container)
