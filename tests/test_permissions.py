"""Tests for the runtime permission probe."""

import pytest

from core.exceptions import DockerCommandError
from core.models import PermissionFinding
from probes.permissions import PermissionProbe


def fake_exec(user="root", writable=True, sudo=True, whoami_missing=False, id_missing=False):
    """Build an exec_in_container side effect for a container with the given posture."""

    def run(container, command, timeout=None):
        if command == ["whoami"]:
            if whoami_missing:
                raise DockerCommandError(["docker", "exec"], "whoami: not found", returncode=127)
            return f"{user}\n"
        if command == ["id", "-u"]:
            if id_missing:
                raise DockerCommandError(["docker", "exec"], "id: not found", returncode=127)
            return "0\n" if user == "root" else "1000\n"
        if command[0] == "sh":
            return "writable\n" if writable else "not-writable\n"
        if command == ["which", "sudo"]:
            if sudo:
                return "/usr/bin/sudo\n"
            raise DockerCommandError(["docker", "exec"], "", returncode=1)
        raise AssertionError(f"unexpected command {command}")

    return run


class TestPermissionProbe:

    def test_root_with_sudo(self, probe_kwargs, docker_client):
        """Test a root container with sudo reports both issues."""
        docker_client.exec_in_container.side_effect = fake_exec()

        finding = PermissionProbe(**probe_kwargs).run("img")

        assert finding.running_as_root is True
        assert finding.writable_filesystem is True
        assert finding.sudo_installed is True
        assert finding.issues == ("Container is running as root user", "sudo is installed in container")
        assert finding.suggestions == (
            "Create and use a non-root user",
            "Consider using read-only filesystem where possible",
            "Remove sudo from production containers",
        )
        docker_client.stop_container.assert_called_once()
        docker_client.remove_container.assert_called_once()

    def test_hardened_image(self, probe_kwargs, docker_client):
        """Test a hardened image reports no issues."""
        docker_client.exec_in_container.side_effect = fake_exec(user="node", writable=False, sudo=False)

        finding = PermissionProbe(**probe_kwargs).run("img")

        assert finding == PermissionFinding()

    def test_falls_back_to_id(self, probe_kwargs, docker_client):
        """Test fallback to id -u when whoami is missing."""
        docker_client.exec_in_container.side_effect = fake_exec(whoami_missing=True, sudo=False)

        finding = PermissionProbe(**probe_kwargs).run("img")

        assert finding.running_as_root is True

    def test_unknown_user_gives_sentinel(self, probe_kwargs, docker_client):
        """Test an unknown user gives the all-False sentinel."""
        docker_client.exec_in_container.side_effect = fake_exec(whoami_missing=True, id_missing=True)

        finding = PermissionProbe(**probe_kwargs).run("img")

        assert finding == PermissionFinding()
        docker_client.remove_container.assert_called_once()

    def test_launch_failure_gives_sentinel(self, probe_kwargs, docker_client):
        """Test a launch failure gives the all-False sentinel."""
        docker_client.run_detached.side_effect = DockerCommandError(["docker", "run"], "no such image")

        assert PermissionProbe(**probe_kwargs).run("img") == PermissionFinding()

    def test_unhealthy_container_is_still_inspected(self, probe_kwargs, docker_client):
        """Test the checks run against a container whose health check never passes."""
        docker_client.inspect_state.return_value = {"Status": "running", "Health": {"Status": "starting"}}
        docker_client.exec_in_container.side_effect = fake_exec(sudo=False)

        finding = PermissionProbe(**probe_kwargs).run("img")

        assert finding.running_as_root is True
        docker_client.inspect_state.assert_not_called()
