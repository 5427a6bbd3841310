"""Tests for engine unit parsing and formatting."""

import pytest

from utils.units import (
    format_binary_size,
    parse_binary_size,
    parse_decimal_size,
    parse_memory_usage,
    parse_percentage,
    parse_ping_average,
)


class TestDecimalSizes:
    """Image and layer sizes use powers of 1000."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("0B", 0),
            ("512B", 512),
            ("45.3kB", 45300),
            ("234MB", 234_000_000),
            ("1.25GB", 1_250_000_000),
            ("2TB", 2_000_000_000_000),
            (" 10 MB ", 10_000_000),
        ],
    )
    def test_parse(self, text, expected):
        """Test decimal size parsing."""
        assert parse_decimal_size(text) == expected

    @pytest.mark.parametrize("text", ["128MiB", "2GiB", "1KiB"])
    def test_rejects_binary_units(self, text):
        """Test binary suffixes are rejected."""
        with pytest.raises(ValueError):
            parse_decimal_size(text)

    @pytest.mark.parametrize("text", ["", "abc", "MB", "1.2.3MB", "12XB"])
    def test_rejects_malformed(self, text):
        """Test malformed sizes are rejected."""
        with pytest.raises(ValueError):
            parse_decimal_size(text)


class TestBinarySizes:
    """Live memory statistics use powers of 1024."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("0B", 0),
            ("512KiB", 512 * 1024),
            ("1.5KiB", 1536),
            ("128MiB", 128 * 1024 ** 2),
            ("2GiB", 2 * 1024 ** 3),
            ("1TiB", 1024 ** 4),
        ],
    )
    def test_parse(self, text, expected):
        """Test binary size parsing."""
        assert parse_binary_size(text) == expected

    @pytest.mark.parametrize("text", ["128MB", "2GB", "45.3kB"])
    def test_rejects_decimal_units(self, text):
        """Test decimal suffixes are rejected."""
        with pytest.raises(ValueError):
            parse_binary_size(text)

    def test_units_are_not_cross_applied(self):
        """Test the same magnitude differs between the two conventions."""
        assert parse_binary_size("1KiB") == 1024
        assert parse_decimal_size("1kB") == 1000


class TestFormatBinarySize:

    def test_whole_values(self):
        """Test formatting of whole values."""
        assert format_binary_size(0) == "0 B"
        assert format_binary_size(134217728) == "128 MiB"
        assert format_binary_size(2 * 1024 ** 3) == "2 GiB"

    def test_fractional_values(self):
        """Test formatting of fractional values."""
        assert format_binary_size(1536) == "1.5 KiB"
        assert format_binary_size(1024 ** 2 + 1024 ** 2 // 3) == "1.33 MiB"

    def test_caps_at_gib(self):
        """Test formatting stops at GiB."""
        assert format_binary_size(2 * 1024 ** 4) == "2048 GiB"

    @pytest.mark.parametrize(
        "num_bytes", [0, 1, 1023, 1536, 134217728, 2 * 1024 ** 3, 5 * 1024 ** 3 + 512 * 1024 ** 2]
    )
    def test_round_trip_within_rounding(self, num_bytes):
        """Test format then parse stays within the formatter's rounding."""
        value, unit = format_binary_size(num_bytes).split(" ")
        parsed = parse_binary_size(f"{value}{unit}")
        scale = {"B": 1, "KiB": 1024, "MiB": 1024 ** 2, "GiB": 1024 ** 3}[unit]
        assert abs(parsed - num_bytes) <= 0.005 * scale + 1


class TestStatsColumns:

    def test_memory_usage(self):
        """Test the MemUsage column."""
        assert parse_memory_usage("128MiB / 2GiB") == (128 * 1024 ** 2, 2 * 1024 ** 3)

    def test_memory_usage_rejects_decimal(self):
        """Test decimal MemUsage is rejected by default."""
        with pytest.raises(ValueError):
            parse_memory_usage("128MB / 2GB")

    def test_memory_usage_decimal_parser(self):
        """Test decimal MemUsage with an explicit decimal parser."""
        assert parse_memory_usage("128MB / 2GB", parse_decimal_size) == (128 * 1000 ** 2, 2 * 1000 ** 3)

    def test_memory_usage_rejects_missing_limit(self):
        """Test MemUsage without a limit is rejected."""
        with pytest.raises(ValueError):
            parse_memory_usage("128MiB")

    def test_percentage(self):
        """Test percentage parsing."""
        assert parse_percentage("6.00%") == 6.0
        assert parse_percentage(" 0.15 % ") == 0.15

    @pytest.mark.parametrize("text", ["--", "", "6.00"])
    def test_percentage_rejects(self, text):
        """Test non-percentages are rejected."""
        with pytest.raises(ValueError):
            parse_percentage(text)


class TestPingAverage:

    def test_iputils_summary(self):
        """Test the iputils rtt summary line."""
        output = (
            "3 packets transmitted, 3 received, 0% packet loss, time 2003ms\n"
            "rtt min/avg/max/mdev = 10.123/12.456/15.789/2.100 ms\n"
        )
        assert parse_ping_average(output) == 12.456

    def test_busybox_summary(self):
        """Test the busybox round-trip summary line."""
        output = "round-trip min/avg/max = 1.234/5.678/9.012 ms\n"
        assert parse_ping_average(output) == 5.678

    def test_avg_equals_form(self):
        """Test the avg = X form."""
        assert parse_ping_average("Minimum = 1ms, Maximum = 3ms, avg = 2.5") == 2.5

    def test_no_summary(self):
        """Test output without a summary gives None."""
        assert parse_ping_average("ping: bad address 'google.com'") is None
        assert parse_ping_average("") is None
