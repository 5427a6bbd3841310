"""
Vulnerability probe with an ordered scanner fallback chain.
"""

import logging
from typing import Sequence

from core.config import ProbeConfig
from core.exceptions import DockprobeException
from core.models import VulnerabilityReport
from core.scanner_interface import VulnerabilityProvider
from integrations.heuristic_provider import HeuristicProvider
from integrations.scout_provider import DockerScoutProvider
from integrations.trivy_provider import TrivyProvider
from utils.docker_utils import DockerClient

logger = logging.getLogger(__name__)


def default_providers(docker_client: DockerClient, config: ProbeConfig) -> list[VulnerabilityProvider]:
    """Docker Scout, then Trivy, then the built-in heuristic."""
    return [
        DockerScoutProvider(docker_client),
        TrivyProvider(),
        HeuristicProvider(docker_client, config.vulnerable_packages, config.vulnerable_runtimes),
    ]


class VulnerabilityProbe:
    """
    Try each provider in order and return the first report produced.

    Unavailable or failing providers are skipped; the heuristic provider at
    the end of the default chain always produces a report.
    """

    name = "vulnerabilities"

    def __init__(self, providers: Sequence[VulnerabilityProvider]):
        self.providers = list(providers)

    def run(self, image: str) -> VulnerabilityReport:
        logger.info("🔍 Scanning for vulnerabilities...")

        for provider in self.providers:
            if not provider.is_available():
                logger.debug(f"{provider.name()} not available, trying next scanner")
                continue

            try:
                report = provider.scan(image)
            except DockprobeException as e:
                logger.warning(f"⚠️  {provider.name()} scan failed, falling back: {e}")
                continue

            logger.info(f"✓ {provider.name()} found {report.total} vulnerabilities in {image}")
            return report

        logger.warning("⚠️  No vulnerability scanner produced results")
        return VulnerabilityReport(scanner="none")
