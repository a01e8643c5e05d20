"""Tests for display formatting."""

from types import SimpleNamespace

import pytest

from finance_compass.formatting import (
    format_audit_value,
    format_compact_pounds,
    format_pounds,
    format_signed_percent,
    sort_by_label,
)


class TestPounds:

    @pytest.mark.parametrize("value, expected", [
        (1234.5, "£1,234.50"),
        (0, "£0.00"),
        (-20, "-£20.00"),
        (-0.001, "£0.00"),
        (1_000_000, "£1,000,000.00"),
    ])
    def test_format_pounds(self, value, expected):
        assert format_pounds(value) == expected

    @pytest.mark.parametrize("value, expected", [
        (950, "£950"),
        (1234, "£1.2K"),
        (12000, "£12K"),
        (3_400_000, "£3.4M"),
        (-1500, "-£1.5K"),
        (2_000_000_000, "£2B"),
    ])
    def test_format_compact_pounds(self, value, expected):
        assert format_compact_pounds(value) == expected


class TestPercent:

    @pytest.mark.parametrize("ratio, expected", [
        (0.0714, "7.14%"),
        (-0.05, "-5.00%"),
        (0, "0.00%"),
        (None, "n/a"),
        (float("inf"), "n/a"),
    ])
    def test_format_signed_percent(self, ratio, expected):
        assert format_signed_percent(ratio) == expected


class TestAuditValue:
    """Tests for before/after rendering in the audit trail."""

    @pytest.mark.parametrize("value, expected", [
        (None, "(blank)"),
        ("", "(blank)"),
        ("  Rent  ", "Rent"),
        (12, "£12.00"),
        (True, "True"),
    ])
    def test_format_audit_value(self, value, expected):
        assert format_audit_value(value) == expected


class TestSortByLabel:

    def test_blank_labels_last(self):
        rows = [SimpleNamespace(label=label) for label in ["banana", "", "Apple", " ", "cherry"]]
        assert [row.label for row in sort_by_label(rows)] == ["Apple", "banana", "cherry", "", " "]

    def test_custom_key(self):
        rows = [SimpleNamespace(name="b"), SimpleNamespace(name="A")]
        assert [row.name for row in sort_by_label(rows, key=lambda row: row.name)] == ["A", "b"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
