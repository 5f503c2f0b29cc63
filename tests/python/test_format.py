"""
Tests for entry formatting and display width.
"""

import pytest

from densemat import FormatConfig, config, entry_width, format_entry, max_entry_width


class TestFormatEntry:
    """Test the formatting rule widths are measured with."""

    @pytest.mark.parametrize("value, text", [
        (-425.73, "-425.73"),
        (2.0, "2"),
        (-3, "-3"),
        (0.0, "0"),
        (1 / 3, "0.333333"),
        (0.5, "0.5"),
        (1e-7, "0"),
        (float("inf"), "inf"),
    ])
    def test_format(self, value, text):
        assert format_entry(value) == text

    def test_integer_zeros_kept(self):
        assert format_entry(10.0000001) == "10"
        assert format_entry(100.25) == "100.25"

    def test_precision(self):
        assert format_entry(1 / 3, precision=3) == "0.333"
        with config.local(format=FormatConfig(precision=2)):
            assert format_entry(1 / 3) == "0.33"


class TestWidth:
    """Test width helpers."""

    def test_entry_width(self):
        assert entry_width(-425.73) == 7
        assert entry_width(7) == 1

    def test_max_entry_width(self):
        assert max_entry_width([1, -425.73, 3.5, 10]) == 7
        assert max_entry_width([]) == 1
