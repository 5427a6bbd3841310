"""
Docker Scout vulnerability scanner provider implementation.

Implements the VulnerabilityProvider interface on top of the ``docker scout``
CLI plugin, reading its SARIF (JSON) report.
"""

import json
import logging
from typing import Optional

from core.exceptions import DockerCommandError, ExternalToolUnavailable, MeasurementError
from core.models import SeverityTier, VulnerabilityFinding, VulnerabilityReport
from core.scanner_interface import VulnerabilityProvider
from utils.docker_utils import DockerClient

logger = logging.getLogger(__name__)

# SARIF result levels, used when a rule carries no CVSS severity
LEVEL_SEVERITY = {
    "error": SeverityTier.HIGH,
    "warning": SeverityTier.MEDIUM,
    "note": SeverityTier.LOW,
}


def parse_purl(purl: str) -> tuple[str, str]:
    """
    Split a package URL into name and version.

    Examples:
        >>> parse_purl("pkg:npm/lodash@4.17.20")
        ('lodash', '4.17.20')
        >>> parse_purl("pkg:deb/debian/openssl@3.0.11-1~deb12u1?os_distro=bookworm")
        ('openssl', '3.0.11-1~deb12u1')
    """
    body = purl.split("?", 1)[0].split("#", 1)[0]
    path, _, version = body.rpartition("@")
    if not path:
        path, version = body, ""
    return path.rsplit("/", 1)[-1], version


class DockerScoutProvider(VulnerabilityProvider):
    """
    Docker Scout vulnerability scanner provider.

    Only usable with Docker (not Podman) when the scout plugin is installed.
    """

    def __init__(self, docker_client: DockerClient):
        self.docker = docker_client

    def name(self) -> str:
        """Return provider name."""
        return "docker-scout"

    def is_available(self) -> bool:
        """Check if the scout plugin is installed."""
        if self.docker.runtime != "docker":
            return False
        return self.docker.has_plugin("scout")

    def scan(self, image: str) -> VulnerabilityReport:
        """
        Scan an image for vulnerabilities using Docker Scout.

        Raises:
            ExternalToolUnavailable: If scout refuses to run (e.g. not logged in)
            MeasurementError: If the report cannot be parsed
        """
        try:
            output = self.docker.scout_cves(image)
        except DockerCommandError as e:
            raise ExternalToolUnavailable("docker-scout", e.reason)

        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise MeasurementError("docker-scout", f"invalid output: {e}")

        try:
            findings = self.parse_sarif(data, image)
        except (AttributeError, TypeError) as e:
            raise MeasurementError("docker-scout", f"malformed report: {e}")

        return VulnerabilityReport(findings=tuple(findings), scanner=self.name())

    def parse_sarif(self, data: dict, image_name: str) -> list[VulnerabilityFinding]:
        """
        Parse a SARIF report into findings.

        Each result references a rule (the CVE) whose properties hold the
        severity, affected package URLs and fixed version.
        """
        findings = []
        runs = data.get("runs", []) if isinstance(data, dict) else []
        for run in runs:
            rules = {
                rule.get("id"): rule
                for rule in run.get("tool", {}).get("driver", {}).get("rules", [])
            }
            for result in run.get("results", []):
                finding = self._to_finding(result, rules.get(result.get("ruleId"), {}))
                if finding:
                    findings.append(finding)

        logger.debug(f"Docker Scout reported {len(findings)} findings for {image_name}")
        return findings

    def _to_finding(self, result: dict, rule: dict) -> Optional[VulnerabilityFinding]:
        props = rule.get("properties", {})

        severity_text = props.get("cvssV3_severity")
        if severity_text:
            severity = SeverityTier.normalize(severity_text)
        else:
            severity = LEVEL_SEVERITY.get(result.get("level", ""), SeverityTier.INFO)

        purls = props.get("purls") or []
        if purls:
            package, version = parse_purl(purls[0])
        else:
            package, version = result.get("ruleId", ""), props.get("affected_version", "")

        if not package:
            return None

        description = (
            rule.get("shortDescription", {}).get("text")
            or result.get("message", {}).get("text", "")
        )
        return VulnerabilityFinding(
            package=package,
            version=version,
            severity=severity,
            description=description,
            fix=props.get("fixed_version", ""),
        )


__all__ = ["DockerScoutProvider", "parse_purl"]
