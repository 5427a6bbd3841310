"""Tests for core data models."""

import json

import pytest

from core.models import (
    AggregatedMetric,
    CPUUsage,
    DiskIO,
    LayerAnalysis,
    MemoryUsage,
    PermissionFinding,
    Rating,
    ScanReport,
    SeverityTier,
    VulnerabilityFinding,
    VulnerabilityReport,
)


class TestAggregatedMetric:

    def test_unavailable(self):
        """Test the unavailable metric sentinel."""
        metric = AggregatedMetric.unavailable("%")
        assert metric.available is False
        assert metric.to_dict() == {
            "average": 0, "min": 0, "max": 0, "samples": 0, "unit": "%", "available": False,
        }

    def test_is_frozen(self):
        """Test metrics are immutable."""
        metric = AggregatedMetric(average=1, min=1, max=1, sample_count=1)
        with pytest.raises(AttributeError):
            metric.average = 2


class TestMemoryUsage:

    def test_unknown_sentinel(self):
        """Test the Unknown memory sentinel."""
        usage = MemoryUsage.unavailable()
        assert usage.current == "Unknown"
        assert usage.total == "Unknown"
        assert usage.to_dict()["efficiency"] == "Unknown"

    def test_formatted(self):
        """Test memory values are formatted in binary units."""
        usage = MemoryUsage(current_bytes=1536, total_bytes=2 * 1024 ** 3)
        assert usage.current == "1.5 KiB"
        assert usage.total == "2 GiB"


class TestVulnerabilityReport:

    @pytest.fixture
    def report(self):
        return VulnerabilityReport(
            findings=(
                VulnerabilityFinding("openssl", "3.0.11", SeverityTier.CRITICAL),
                VulnerabilityFinding("lodash", "4.17.20", SeverityTier.HIGH),
                VulnerabilityFinding("zlib", "1.2.13", SeverityTier.INFO),
                VulnerabilityFinding("curl", "7.88", SeverityTier.HIGH),
            ),
            scanner="trivy",
        )

    def test_counts(self, report):
        """Test per-severity counts."""
        assert report.total == 4
        assert report.counts() == {"critical": 1, "high": 2, "medium": 0, "low": 0, "info": 1}

    def test_bucketed_dict(self, report):
        """Test findings are bucketed by severity in order."""
        data = report.to_dict()
        assert [f["package"] for f in data["high"]] == ["lodash", "curl"]
        assert data["medium"] == []
        assert data["total"] == 4
        assert data["scanner"] == "trivy"


class TestScanReport:

    def test_json_serializable(self):
        """Test the scan report serializes to JSON."""
        report = ScanReport(
            image="myapp",
            vulnerabilities=VulnerabilityReport(),
            size="Unknown",
            size_bytes=0,
            layers=LayerAnalysis.empty(),
            secrets=(),
            permissions=PermissionFinding(),
        )

        data = json.loads(json.dumps(report.to_dict()))

        assert data["image"] == "myapp"
        assert data["permissions"]["issues"] == []
        assert set(report.size_summary()) == {"image", "size", "size_bytes", "layers"}

    def test_performance_sentinels_serialize(self):
        """Test performance sentinels serialize."""
        assert json.dumps(CPUUsage.unavailable().to_dict())
        assert DiskIO.failed().to_dict()["write"]["status"] == "Failed"


class TestCPUUsage:

    def test_to_dict(self):
        """Test CPU usage serializes its samples and rating."""
        usage = CPUUsage(
            usage=AggregatedMetric(average=3.25, min=2.0, max=4.5, sample_count=2, unit="%"),
            efficiency=Rating.EXCELLENT,
        )

        data = usage.to_dict()

        assert usage.average == 3.25
        assert (data["average"], data["min"], data["max"]) == (3.25, 2.0, 4.5)
        assert data["efficiency"] == "Excellent"
