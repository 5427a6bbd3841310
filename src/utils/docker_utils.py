"""
Docker/Podman utility functions for image and container operations.

Provides a unified interface over the container engine command line,
supporting both Docker and Podman automatically. Every call is synchronous
with captured output; a non-zero exit status is reported uniformly as
DockerCommandError.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from constants import (
    BUILD_TIMEOUT,
    ENGINE_COMMAND_TIMEOUT,
    EXEC_TIMEOUT,
    SCANNER_TIMEOUT,
    VERSION_CHECK_TIMEOUT,
)
from core.exceptions import DockerCommandError

logger = logging.getLogger(__name__)


class DockerClient:
    """
    Unified client for Docker/Podman operations.

    Automatically detects available container runtime (docker or podman)
    and provides a consistent interface for image and container operations.
    """

    def __init__(self, runtime: Optional[str] = None):
        """
        Initialize Docker client and detect available runtime.

        Args:
            runtime: Engine binary to use; detected from PATH when omitted
        """
        self.runtime = runtime or self._detect_runtime()
        if not self.runtime:
            raise RuntimeError("Neither docker nor podman found in PATH")
        logger.debug(f"Using container runtime: {self.runtime}")

    def _detect_runtime(self) -> Optional[str]:
        """Detect available container runtime."""
        for cmd in ["docker", "podman"]:
            try:
                result = subprocess.run(
                    [cmd, "--version"],
                    capture_output=True,
                    timeout=VERSION_CHECK_TIMEOUT,
                )
                if result.returncode == 0:
                    return cmd
            except (subprocess.TimeoutExpired, FileNotFoundError):
                continue
        return None

    def _run(
        self,
        args: Sequence[str],
        timeout: float = ENGINE_COMMAND_TIMEOUT,
        cwd: Optional[Path] = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """
        Run an engine command and capture its output.

        Args:
            args: Arguments after the runtime binary
            timeout: Seconds before the command is killed
            cwd: Working directory for the command
            check: Raise on non-zero exit status

        Returns:
            Completed process with text stdout/stderr

        Raises:
            DockerCommandError: On non-zero exit (when check is set), timeout,
                or if the runtime binary cannot be executed
        """
        cmd = [self.runtime, *args]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=cwd,
            )
        except subprocess.TimeoutExpired:
            raise DockerCommandError(cmd, f"timed out after {timeout}s")
        except (FileNotFoundError, PermissionError) as e:
            raise DockerCommandError(cmd, str(e))

        if check and result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise DockerCommandError(
                cmd,
                stderr or f"exit status {result.returncode}",
                returncode=result.returncode,
                stderr=stderr,
            )

        return result

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def build_image(self, tag: str, context: Path, no_cache: bool = False) -> None:
        """Build an image from the Dockerfile in context."""
        args = ["build"]
        if no_cache:
            args.append("--no-cache")
        args.extend(["-t", tag, "."])
        self._run(args, timeout=BUILD_TIMEOUT, cwd=context)

    def remove_image(self, tag: str) -> None:
        """Force-remove an image."""
        self._run(["rmi", "-f", tag])

    def image_size(self, image: str) -> str:
        """
        Get the human-readable image size.

        Uses 'docker images' instead of 'inspect' because the .Size field in
        inspect does not match what users see in the image list.

        Returns:
            Size text of the first matching image (e.g. "1.25GB"), "" if none
        """
        result = self._run(["images", image, "--format", "{{.Size}}"])
        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        return lines[0] if lines else ""

    def image_history(self, image: str) -> list[tuple[str, str]]:
        """
        List the layer history of an image.

        Returns:
            (created_by, size) pairs in the order printed by the engine
        """
        result = self._run(
            ["history", image, "--no-trunc", "--format", "{{.CreatedBy}}\t{{.Size}}"]
        )
        layers = []
        for line in result.stdout.splitlines():
            command, _, size = line.partition("\t")
            command, size = command.strip(), size.strip()
            if command and size:
                layers.append((command, size))
        return layers

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def run_detached(self, image: str, name: Optional[str] = None) -> str:
        """Start a detached container and return its id."""
        args = ["run", "-d"]
        if name:
            args.extend(["--name", name])
        args.append(image)
        return self._run(args).stdout.strip()

    def run_once(
        self,
        image: str,
        command: Sequence[str],
        entrypoint: Optional[str] = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run a one-shot command in a throwaway (--rm) container."""
        args = ["run", "--rm"]
        if entrypoint:
            args.extend(["--entrypoint", entrypoint])
        args.append(image)
        args.extend(command)
        return self._run(args, timeout=EXEC_TIMEOUT, check=check)

    def create_container(self, image: str) -> str:
        """Create (but do not start) a container and return its id."""
        return self._run(["create", image]).stdout.strip()

    def stop_container(self, container: str) -> None:
        self._run(["stop", container])

    def remove_container(self, container: str) -> None:
        self._run(["rm", "-f", container])

    def inspect_state(self, container: str) -> dict:
        """
        Get the State block of a container.

        Returns:
            Parsed state, e.g. {"Status": "running", "Health": {...}}

        Raises:
            DockerCommandError: If inspect fails or prints invalid JSON
        """
        result = self._run(["inspect", "--format", "{{json .State}}", container])
        try:
            state = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise DockerCommandError(["inspect", container], f"invalid state JSON: {e}")
        return state if isinstance(state, dict) else {}

    def stats(self, container: str, fmt: str) -> str:
        """Take a single (non-streaming) stats snapshot using a Go template."""
        return self._run(["stats", container, "--no-stream", "--format", fmt]).stdout.strip()

    def exec_in_container(
        self,
        container: str,
        command: Sequence[str],
        timeout: float = EXEC_TIMEOUT,
    ) -> str:
        """Execute a command in a running container and return stdout."""
        return self._run(["exec", container, *command], timeout=timeout).stdout

    def copy_from_container(self, container: str, source: str, destination: Path) -> None:
        """Copy a path out of a container onto the host."""
        self._run(["cp", f"{container}:{source}", str(destination)], timeout=EXEC_TIMEOUT)

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------

    def has_plugin(self, plugin: str) -> bool:
        """Check whether an engine CLI plugin (e.g. scout) is installed."""
        try:
            self._run([plugin, "version"], timeout=VERSION_CHECK_TIMEOUT)
            return True
        except DockerCommandError:
            return False

    def scout_cves(self, image: str) -> str:
        """Run ``docker scout cves`` and return its SARIF (JSON) report."""
        return self._run(
            ["scout", "cves", "--format", "sarif", image],
            timeout=SCANNER_TIMEOUT,
        ).stdout
