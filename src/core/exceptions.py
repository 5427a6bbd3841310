"""
Exception hierarchy for dockprobe.

Provides a standardized exception hierarchy for consistent error handling
across the pipeline. All exceptions inherit from DockprobeException.

Only AcquisitionError is allowed to escape a pipeline run; every other
error is local to one probe and is converted into a sentinel result.
"""

from typing import Optional, Sequence


class DockprobeException(Exception):
    """Base exception for all dockprobe errors."""
    pass


class DockerCommandError(DockprobeException):
    """A container engine command exited non-zero, timed out or was not found."""

    def __init__(
        self,
        command: Sequence[str],
        reason: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        """
        Initialize docker command exception.

        Args:
            command: Command line that failed
            reason: Short description of the failure
            returncode: Process exit code (None if the process never completed)
            stderr: Captured standard error of the command
        """
        self.command = list(command)
        self.reason = reason
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{' '.join(self.command)} failed: {reason}")


class AcquisitionError(DockprobeException):
    """The target image could not be built or resolved. Fatal to a run."""
    pass


class BuildError(AcquisitionError):
    """Image build failed."""

    def __init__(self, tag: str, reason: str):
        """
        Initialize build exception.

        Args:
            tag: Tag the image was being built as
            reason: Engine error text
        """
        self.tag = tag
        self.reason = reason
        super().__init__(f"Failed to build Docker image {tag}: {reason}")


class LaunchError(DockprobeException):
    """A container failed to start or crashed."""

    def __init__(self, image: str, reason: str):
        self.image = image
        self.reason = reason
        super().__init__(f"Container for {image} failed to start: {reason}")


class ReadinessTimeout(DockprobeException):
    """A container did not become ready before its deadline."""

    def __init__(self, container: str, timeout: float):
        self.container = container
        self.timeout = timeout
        super().__init__(f"Container {container} not ready after {timeout:g}s")


class MeasurementError(DockprobeException):
    """A probe's instrumentation step failed."""

    def __init__(self, probe: str, reason: str):
        self.probe = probe
        self.reason = reason
        super().__init__(f"{probe} measurement failed: {reason}")


class ExternalToolUnavailable(DockprobeException):
    """An optional external scanner is not installed or not usable."""

    def __init__(self, tool: str, reason: str = "not found"):
        self.tool = tool
        self.reason = reason
        super().__init__(f"{tool} unavailable: {reason}")


class ConfigurationException(DockprobeException):
    """Configuration is invalid or missing."""
    pass


__all__ = [
    "DockprobeException",
    "DockerCommandError",
    "AcquisitionError",
    "BuildError",
    "LaunchError",
    "ReadinessTimeout",
    "MeasurementError",
    "ExternalToolUnavailable",
    "ConfigurationException",
]
