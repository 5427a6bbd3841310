"""
Trivy vulnerability scanner provider implementation.

Implements the VulnerabilityProvider interface for Aqua Security Trivy.
"""

import json
import logging
import subprocess

from constants import SCANNER_TIMEOUT, VERSION_CHECK_TIMEOUT
from core.exceptions import ExternalToolUnavailable, MeasurementError
from core.models import SeverityTier, VulnerabilityFinding, VulnerabilityReport
from core.scanner_interface import VulnerabilityProvider

logger = logging.getLogger(__name__)


class TrivyProvider(VulnerabilityProvider):
    """
    Trivy vulnerability scanner provider.

    Uses ``trivy image --format json`` against the local image.
    """

    def name(self) -> str:
        """Return provider name."""
        return "trivy"

    def is_available(self) -> bool:
        """Check if Trivy is available."""
        try:
            result = subprocess.run(
                ["trivy", "--version"],
                capture_output=True,
                timeout=VERSION_CHECK_TIMEOUT,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False

    def scan(self, image: str) -> VulnerabilityReport:
        """
        Scan an image for vulnerabilities using Trivy.

        Args:
            image: Image reference

        Returns:
            VulnerabilityReport with every vulnerability Trivy reported

        Raises:
            ExternalToolUnavailable: If trivy is not installed
            MeasurementError: If the scan fails or prints invalid JSON
        """
        try:
            result = subprocess.run(
                ["trivy", "image", "--format", "json", "--quiet", image],
                capture_output=True,
                text=True,
                timeout=SCANNER_TIMEOUT,
                check=True,
            )
            data = json.loads(result.stdout)
        except FileNotFoundError:
            raise ExternalToolUnavailable("trivy")
        except subprocess.CalledProcessError as e:
            raise MeasurementError("trivy", f"scan failed: {(e.stderr or '').strip() or e}")
        except subprocess.TimeoutExpired:
            raise MeasurementError("trivy", "scan timed out")
        except json.JSONDecodeError as e:
            raise MeasurementError("trivy", f"invalid output: {e}")

        try:
            findings = self.parse_results(data, image)
        except (AttributeError, TypeError) as e:
            raise MeasurementError("trivy", f"malformed report: {e}")

        return VulnerabilityReport(findings=tuple(findings), scanner=self.name())

    def parse_results(self, data: dict, image_name: str) -> list[VulnerabilityFinding]:
        """
        Parse Trivy JSON output into findings.

        Args:
            data: Parsed Trivy JSON output
            image_name: Image name for logging

        Returns:
            Findings across all result targets (OS packages, language packages)
        """
        findings = []
        results = data.get("Results") if isinstance(data, dict) else None
        results = results or []
        if not isinstance(results, list):
            logger.warning(f"Unexpected trivy Results format for {image_name}: {type(results)}")
            return findings

        for target in results:
            for vuln in (target or {}).get("Vulnerabilities") or []:
                try:
                    findings.append(
                        VulnerabilityFinding(
                            package=vuln.get("PkgName", ""),
                            version=vuln.get("InstalledVersion", ""),
                            severity=SeverityTier.normalize(vuln.get("Severity")),
                            description=vuln.get("Title") or vuln.get("Description", ""),
                            fix=vuln.get("FixedVersion", ""),
                        )
                    )
                except AttributeError as e:
                    logger.warning(f"Malformed vulnerability entry in {image_name}: {e}, skipping")
                    continue

        return findings


__all__ = ["TrivyProvider"]
