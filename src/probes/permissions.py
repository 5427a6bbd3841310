"""
Runtime permission checks: default user, writable filesystem and sudo.
"""

import logging

from core.exceptions import DockerCommandError, MeasurementError
from core.models import PermissionFinding
from probes.base import LOCAL_ERRORS, Probe

logger = logging.getLogger(__name__)

WRITE_TEST = (
    "touch /tmp/.dockprobe_write_test && rm -f /tmp/.dockprobe_write_test "
    "&& echo writable || echo not-writable"
)


class PermissionProbe(Probe):
    """Inspect the permission posture of a running container."""

    name = "permission"

    def run(self, image: str) -> PermissionFinding:
        logger.info("🔍 Analyzing permissions...")

        try:
            with self.containers.ephemeral(image, self.container_name()) as container:
                running_as_root = self.check_root(container)
                writable = self.check_writable(container)
                sudo_installed = self.check_sudo(container)
        except LOCAL_ERRORS as e:
            logger.warning(f"⚠️  Permission analysis completed with limited results: {e}")
            return PermissionFinding()

        issues = []
        suggestions = []
        if running_as_root:
            issues.append("Container is running as root user")
            suggestions.append("Create and use a non-root user")
        if writable:
            suggestions.append("Consider using read-only filesystem where possible")
        if sudo_installed:
            issues.append("sudo is installed in container")
            suggestions.append("Remove sudo from production containers")

        return PermissionFinding(
            running_as_root=running_as_root,
            writable_filesystem=writable,
            sudo_installed=sudo_installed,
            issues=tuple(issues),
            suggestions=tuple(suggestions),
        )

    def check_root(self, container: str) -> bool:
        """
        Whether the container's default user is root.

        Raises:
            MeasurementError: If neither whoami nor id can be run
        """
        try:
            return self.docker.exec_in_container(container, ["whoami"]).strip() == "root"
        except DockerCommandError as e:
            logger.debug(f"whoami failed, trying id -u: {e.reason}")

        try:
            return self.docker.exec_in_container(container, ["id", "-u"]).strip() == "0"
        except DockerCommandError as e:
            raise MeasurementError(self.name, f"cannot determine user: {e.reason}")

    def check_writable(self, container: str) -> bool:
        try:
            output = self.docker.exec_in_container(container, ["sh", "-c", WRITE_TEST])
        except DockerCommandError as e:
            logger.debug(f"Write check failed: {e.reason}")
            return False
        return output.strip() == "writable"

    def check_sudo(self, container: str) -> bool:
        try:
            self.docker.exec_in_container(container, ["which", "sudo"])
        except DockerCommandError:
            return False
        return True
