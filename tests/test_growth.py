"""Tests for growth series and vendor colour assignment."""

import pytest

from recon_insights.reconciliation import (
    GrowthPoint,
    assign_vendor_colors,
    build_vendor_growth,
    month_over_month,
)
from recon_insights.reconciliation.growth import (
    VENDOR_PALETTE,
    parse_growth_payload,
    parse_growth_points,
    vendor_key,
)


class TestMonthOverMonth:
    """Tests for month-over-month growth."""

    def test_growth_percentages(self, growth_response):
        """Test growth relative to the previous month."""
        series = month_over_month(parse_growth_points(growth_response["salesAndSettlement"]))

        assert [row.month for row in series] == ["Jan", "Feb", "Mar"]
        assert series[0].sales_growth == 0.0
        assert series[0].settlement_growth == 0.0
        assert series[1].sales_growth == pytest.approx(20.0)
        assert series[1].settlement_growth == pytest.approx(10.0)
        assert series[2].sales_growth == pytest.approx(-25.0)
        assert series[2].settlement_growth == pytest.approx(0.0)

    def test_growth_after_zero_month(self):
        """Test a month following a zero month has 0 growth."""
        series = month_over_month([
            GrowthPoint(month="Jan", sales=0, settlement=0),
            GrowthPoint(month="Feb", sales=500, settlement=100),
        ])
        assert series[1].sales_growth == 0.0
        assert series[1].settlement_growth == 0.0

    def test_empty(self):
        """Test an empty series."""
        assert month_over_month([]) == []


class TestParseGrowth:
    """Tests for growth payload parsing."""

    def test_payload_with_vendors(self, growth_response):
        """Test the object payload is split into points and vendor series."""
        points, vendors = parse_growth_payload(growth_response)

        assert len(points) == 3
        assert points[0].sales == 100000.0
        assert set(vendors) == {"Blue Dart", "Ecom Express"}

    def test_bare_list(self):
        """Test a bare list of points with string amounts."""
        points, vendors = parse_growth_payload([
            {"month": "Jan", "sales": "1,000", "settlement": None},
            {"sales": 5},
            "junk",
        ])

        assert vendors is None
        assert len(points) == 1
        assert points[0].sales == 1000.0
        assert points[0].settlement == 0.0

    def test_nothing(self):
        """Test a missing payload."""
        assert parse_growth_payload(None) == ([], None)


class TestVendorGrowth:
    """Tests for month-aligned vendor series."""

    def test_rows_are_month_aligned(self, growth_response):
        """Test one row per month with one column per vendor."""
        series = build_vendor_growth(growth_response["vendorSettlements"])

        assert series.vendor_keys == {"Blue Dart": "Blue_Dart", "Ecom Express": "Ecom_Express"}
        assert series.rows == [
            {"month": "Jan", "Blue_Dart": 1000.0, "Ecom_Express": 500.0},
            {"month": "Feb", "Blue_Dart": 1500.0, "Ecom_Express": 700.0},
        ]

    def test_missing_months_are_zero(self):
        """Test a vendor with no point for a month gets 0 in that row."""
        series = build_vendor_growth({
            "Blue Dart": [{"month": "Jan", "settlement": 10}],
            "DTDC": [{"month": "Feb", "settlement_amount": 20}],
        })

        assert series.rows == [
            {"month": "Jan", "Blue_Dart": 10.0, "DTDC": 0.0},
            {"month": "Feb", "Blue_Dart": 0.0, "DTDC": 20.0},
        ]

    def test_colliding_keys_get_suffixes(self):
        """Test vendors that map to the same column key stay distinct."""
        series = build_vendor_growth({
            "Blue Dart": [{"month": "Jan", "settlement": 1}],
            "Blue  Dart": [{"month": "Jan", "settlement": 2}],
        })

        assert series.vendor_keys == {"Blue Dart": "Blue_Dart", "Blue  Dart": "Blue_Dart_2"}
        assert series.rows[0]["Blue_Dart_2"] == 2.0

    def test_vendor_named_month_keeps_the_label(self):
        """Test a vendor called 'month' cannot overwrite the month column."""
        series = build_vendor_growth({
            "month": [{"month": "Jan", "settlement": 5}],
            "Month ": [{"month": "Jan", "settlement": 7}],
        })

        assert series.vendor_keys == {"month": "month_2", "Month ": "Month"}
        assert series.rows == [{"month": "Jan", "month_2": 5.0, "Month": 7.0}]

    def test_colors_are_stable(self, growth_response):
        """Test colours follow first-seen order and repeat calls agree."""
        first = build_vendor_growth(growth_response["vendorSettlements"])
        second = build_vendor_growth(growth_response["vendorSettlements"])

        assert first.colors == {"Blue_Dart": VENDOR_PALETTE[0], "Ecom_Express": VENDOR_PALETTE[1]}
        assert first.colors == second.colors

    def test_non_mapping(self):
        """Test a non-object vendor block yields an empty series."""
        series = build_vendor_growth(None)
        assert series.rows == [] and series.colors == {}


def test_palette_wraps():
    """Test colours cycle once the palette is exhausted."""
    keys = [f"v{i}" for i in range(len(VENDOR_PALETTE) + 1)]
    colors = assign_vendor_colors(keys)

    assert colors[keys[-1]] == VENDOR_PALETTE[0]
    assert len(colors) == len(keys)


def test_vendor_key():
    """Test whitespace is replaced in vendor column keys."""
    assert vendor_key(" Ecom  Express ") == "Ecom_Express"
    assert vendor_key("") == "vendor"
