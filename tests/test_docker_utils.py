"""
Tests for the container engine command surface.
"""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from core.exceptions import DockerCommandError
from utils.docker_utils import DockerClient


class TestDockerClientRuntime:
    """Runtime detection."""

    def test_prefers_docker(self):
        """Test docker is preferred when both engines exist."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=0)
            client = DockerClient()
        assert client.runtime == "docker"

    def test_falls_back_to_podman(self):
        """Test fallback to podman when docker is missing."""
        with patch('subprocess.run') as mock_run:
            mock_run.side_effect = [FileNotFoundError(), Mock(returncode=0)]
            client = DockerClient()
        assert client.runtime == "podman"

    def test_no_runtime(self):
        """Test an error when no engine is installed."""
        with patch('subprocess.run', side_effect=FileNotFoundError()):
            with pytest.raises(RuntimeError):
                DockerClient()


class TestDockerClientCommands:
    """Command construction and error mapping."""

    @pytest.fixture
    def docker_client(self):
        """Create a DockerClient instance for testing."""
        with patch.object(DockerClient, '_detect_runtime', return_value='docker'):
            return DockerClient()

    def test_build_image_no_cache(self, docker_client, tmp_path):
        """Test build passes --no-cache when asked."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
            docker_client.build_image("myapp-test", tmp_path, no_cache=True)

            args, kwargs = mock_run.call_args
            assert args[0] == ["docker", "build", "--no-cache", "-t", "myapp-test", "."]
            assert kwargs["cwd"] == tmp_path
            assert kwargs["timeout"] > 0

    def test_nonzero_exit_raises_with_stderr(self, docker_client):
        """Test a failed command raises with its stderr."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=1, stdout="", stderr="no such image\n")
            with pytest.raises(DockerCommandError) as exc_info:
                docker_client.remove_image("missing")

        error = exc_info.value
        assert error.returncode == 1
        assert error.stderr == "no such image"
        assert error.command == ["docker", "rmi", "-f", "missing"]

    def test_timeout_raises(self, docker_client):
        """Test a timed out command raises DockerCommandError."""
        with patch('subprocess.run', side_effect=subprocess.TimeoutExpired(["docker"], 60)):
            with pytest.raises(DockerCommandError) as exc_info:
                docker_client.stop_container("abc")
        assert "timed out" in exc_info.value.reason
        assert exc_info.value.returncode is None

    def test_check_false_returns_failed_result(self, docker_client):
        """Test check=False returns the failed result."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=1, stdout='{"dependencies": {}}', stderr="")
            result = docker_client.run_once("img", ["list"], entrypoint="npm", check=False)

            assert result.stdout == '{"dependencies": {}}'
            assert mock_run.call_args[0][0] == [
                "docker", "run", "--rm", "--entrypoint", "npm", "img", "list",
            ]

    def test_run_detached_returns_id(self, docker_client):
        """Test run -d returns the container id."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout="abc123\n", stderr="")
            assert docker_client.run_detached("img", name="probe-1") == "abc123"
            assert mock_run.call_args[0][0] == ["docker", "run", "-d", "--name", "probe-1", "img"]

    def test_inspect_state(self, docker_client):
        """Test inspect returns the parsed state."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(
                returncode=0, stdout='{"Status": "running", "Health": {"Status": "healthy"}}', stderr=""
            )
            state = docker_client.inspect_state("abc")
        assert state["Status"] == "running"
        assert state["Health"]["Status"] == "healthy"

    def test_inspect_state_invalid_json(self, docker_client):
        """Test invalid inspect output raises DockerCommandError."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout="not json", stderr="")
            with pytest.raises(DockerCommandError):
                docker_client.inspect_state("abc")

    def test_image_size_first_line(self, docker_client):
        """Test image size uses the first output line."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout="1.25GB\n1.25GB\n", stderr="")
            assert docker_client.image_size("img") == "1.25GB"

    def test_image_size_empty(self, docker_client):
        """Test image size is empty for an unknown image."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout="\n", stderr="")
            assert docker_client.image_size("img") == ""

    def test_image_history(self, docker_client):
        """Test history rows are split into fields."""
        output = (
            "CMD [\"node\" \"server.js\"]\t0B\n"
            "RUN npm ci\t45.3MB\n"
            "\n"
            "malformed line\n"
            "ADD file:abc in /\t80MB\n"
        )
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout=output, stderr="")
            history = docker_client.image_history("img")

        assert history == [
            ('CMD ["node" "server.js"]', "0B"),
            ("RUN npm ci", "45.3MB"),
            ("ADD file:abc in /", "80MB"),
        ]

    def test_copy_from_container(self, docker_client, tmp_path):
        """Test docker cp arguments."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
            docker_client.copy_from_container("abc", "/app", tmp_path)
            assert mock_run.call_args[0][0] == ["docker", "cp", "abc:/app", str(tmp_path)]

    def test_has_plugin(self, docker_client):
        """Test plugin detection."""
        with patch('subprocess.run') as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout="v1.0", stderr="")
            assert docker_client.has_plugin("scout") is True

            mock_run.return_value = Mock(returncode=1, stdout="", stderr="unknown command")
            assert docker_client.has_plugin("scout") is False
