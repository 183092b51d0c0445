"""Tests for the size unit parser and TopologySize."""

import pytest

from tierplan.domain.errors import InvalidSizeFormat
from tierplan.domain.value_objects.topology_size import (
    MINIMUM_GRANULARITY,
    TopologySize,
    format_size,
    parse_size,
)


class TestParseSize:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("2g", 2048),
            ("1.5g", 1536),
            ("0.5g", 512),
            ("0.125g", 128),
            ("512", 512),
            ("0", 0),
            (" 4G ", 4096),
            ("64g", 65536),
        ],
    )
    def test_valid_sizes(self, raw, expected):
        assert parse_size(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", "g", "2gb", "2 t", "1.2.3g"])
    def test_non_numeric_rejected(self, raw):
        with pytest.raises(InvalidSizeFormat):
            parse_size(raw)

    def test_fraction_of_a_unit_rejected(self):
        with pytest.raises(InvalidSizeFormat, match="whole number"):
            parse_size("1.3g")

    def test_negative_size_is_parsed(self):
        assert parse_size("-1g") == -1024

    def test_non_string_rejected(self):
        with pytest.raises(InvalidSizeFormat):
            parse_size(2048)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_size("nope")


class TestFormatSize:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, "0g"),
            (128, "0.125g"),
            (512, "0.5g"),
            (1024, "1g"),
            (1536, "1.5g"),
            (2048, "2g"),
            (10240, "10g"),
            (10368, "10.125g"),
        ],
    )
    def test_format(self, value, expected):
        assert format_size(value) == expected

    def test_round_trip_on_granularity(self):
        for value in range(0, 64 * 1024 + 1, MINIMUM_GRANULARITY):
            assert parse_size(format_size(value)) == value


class TestTopologySize:
    def test_parse_defaults_to_memory(self):
        size = TopologySize.parse("2g")
        assert size == TopologySize(2048, "memory")

    def test_parse_with_resource(self):
        assert TopologySize.parse("1g", "storage").resource == "storage"

    def test_is_zero(self):
        assert TopologySize(0).is_zero
        assert not TopologySize(128).is_zero

    def test_str(self):
        assert str(TopologySize(1536, "storage")) == "1.5g/storage"

    def test_empty_resource_rejected(self):
        with pytest.raises(ValueError, match="resource"):
            TopologySize(1024, "")

    def test_frozen(self):
        size = TopologySize(1024)
        with pytest.raises(AttributeError):
            size.value = 2048
