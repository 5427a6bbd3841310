"""Vulnerability scanner integrations."""

from integrations.heuristic_provider import HeuristicProvider
from integrations.scout_provider import DockerScoutProvider
from integrations.trivy_provider import TrivyProvider

__all__ = [
    "DockerScoutProvider",
    "HeuristicProvider",
    "TrivyProvider",
]
