"""
Built-in heuristic vulnerability checks.

Last resort when no real scanner is installed: checks the Node.js runtime
version and the top-level npm dependencies of the image against small tables
of known-vulnerable releases. Never fails; the worst case is an empty report.
"""

import json
import logging
from typing import Iterable, Optional, Sequence

from core.config import RuntimeVersionRule, VulnerablePackageRule
from core.exceptions import DockerCommandError
from core.models import SeverityTier, VulnerabilityFinding, VulnerabilityReport
from core.scanner_interface import VulnerabilityProvider
from utils.docker_utils import DockerClient

logger = logging.getLogger(__name__)


def check_runtime_version(
    version: str,
    rules: Iterable[RuntimeVersionRule],
) -> Optional[VulnerabilityFinding]:
    """
    Check a Node.js version string (e.g. "v18.16.0") against runtime rules.

    Returns:
        A high severity finding if any rule matches, else None
    """
    if not version:
        return None
    if any(rule.matches(version) for rule in rules):
        return VulnerabilityFinding(
            package="node",
            version=version,
            severity=SeverityTier.HIGH,
            description="Node.js version has known security vulnerabilities",
            fix="Update to latest LTS version",
        )
    return None


def check_packages(
    packages: Iterable[dict],
    rules: Sequence[VulnerablePackageRule],
) -> list[VulnerabilityFinding]:
    """
    Check installed packages against the vulnerable-package table.

    Args:
        packages: Dicts with "name" and "version" keys
        rules: Vulnerable package rules

    Returns:
        One finding per package that matches a rule
    """
    findings = []
    for pkg in packages:
        name, version = pkg.get("name", ""), pkg.get("version") or ""
        for rule in rules:
            if rule.matches(name, version):
                findings.append(
                    VulnerabilityFinding(
                        package=name,
                        version=version,
                        severity=SeverityTier.normalize(rule.severity),
                        description=rule.description,
                        fix="Update to latest version",
                    )
                )
                break
    return findings


class HeuristicProvider(VulnerabilityProvider):
    """Table-driven fallback scanner using one-shot containers."""

    def __init__(
        self,
        docker_client: DockerClient,
        package_rules: Sequence[VulnerablePackageRule],
        runtime_rules: Sequence[RuntimeVersionRule],
    ):
        """
        Initialize heuristic provider.

        Args:
            docker_client: Docker/Podman client
            package_rules: Known-vulnerable packages
            runtime_rules: Known-vulnerable Node.js release lines
        """
        self.docker = docker_client
        self.package_rules = tuple(package_rules)
        self.runtime_rules = tuple(runtime_rules)

    def name(self) -> str:
        """Return provider name."""
        return "heuristic"

    def is_available(self) -> bool:
        return True

    def scan(self, image: str) -> VulnerabilityReport:
        findings = []

        runtime_finding = check_runtime_version(self.get_node_version(image), self.runtime_rules)
        if runtime_finding:
            findings.append(runtime_finding)

        findings.extend(check_packages(self.get_installed_packages(image), self.package_rules))
        return VulnerabilityReport(findings=tuple(findings), scanner=self.name())

    def get_node_version(self, image: str) -> str:
        """Node.js version in the image, "" if node is not installed."""
        try:
            result = self.docker.run_once(image, ["--version"], entrypoint="node")
        except DockerCommandError as e:
            logger.debug(f"No node runtime in {image}: {e.reason}")
            return ""
        return result.stdout.strip()

    def get_installed_packages(self, image: str) -> list[dict]:
        """
        Top-level npm dependencies of the image.

        npm exits non-zero for extraneous or missing peers while still
        printing the tree, so the JSON is used whenever it parses.
        """
        try:
            result = self.docker.run_once(
                image, ["list", "--depth=0", "--json"], entrypoint="npm", check=False
            )
        except DockerCommandError as e:
            logger.debug(f"npm list failed for {image}: {e.reason}")
            return []

        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError:
            logger.debug(f"npm list printed no JSON for {image}")
            return []

        if not isinstance(data, dict):
            return []
        dependencies = data.get("dependencies") or {}
        return [
            {"name": name, "version": (info or {}).get("version", "")}
            for name, info in dependencies.items()
        ]


__all__ = ["HeuristicProvider", "check_packages", "check_runtime_version"]
