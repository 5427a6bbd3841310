"""
Scanner plugin interface for vulnerability providers.

Defines the contract for vulnerability scanning strategies so they can be
tried in order (Docker Scout, Trivy, built-in heuristic) until one works.
"""

from abc import ABC, abstractmethod

from core.models import VulnerabilityReport


class VulnerabilityProvider(ABC):
    """
    Abstract base class for vulnerability scanning strategies.

    All scanners must implement this interface to be used in the
    vulnerability probe's fallback chain.
    """

    @abstractmethod
    def name(self) -> str:
        """
        Return the provider name.

        Returns:
            Provider identifier (e.g., "docker-scout", "trivy", "heuristic")
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this provider is available/installed.

        Returns:
            True if provider can be used, False otherwise
        """
        pass

    @abstractmethod
    def scan(self, image: str) -> VulnerabilityReport:
        """
        Scan an image for vulnerabilities.

        Args:
            image: Image reference to scan

        Returns:
            VulnerabilityReport with findings bucketed by severity

        Raises:
            ExternalToolUnavailable: If the tool turns out to be unusable
            MeasurementError: If the scan ran but failed
        """
        pass


__all__ = ["VulnerabilityProvider"]
