"""
Unit tests for the pricing and formatting helpers.
"""

import random
import re
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from autoshop.core.calculations import (
    calculate_line_total,
    calculate_subtotal,
    calculate_tax,
    calculate_total,
    format_currency,
    format_date,
    format_hours,
    generate_invoice_number,
    generate_order_number,
    get_full_name,
    get_vehicle_display_name,
    round_money,
)


def line(quantity, unit_price, labor_hours=None, labor_rate=None):
    return SimpleNamespace(
        quantity=quantity,
        unit_price=unit_price,
        labor_hours=labor_hours,
        labor_rate=labor_rate,
    )


# ============================================================
# Totals
# ============================================================


class TestLineTotal:
    """Cost of a single line."""

    def test_parts_only(self):
        assert calculate_line_total(2, Decimal("45.00")) == Decimal("90.00")

    def test_parts_and_labor(self):
        total = calculate_line_total(1, Decimal("10.00"), Decimal("1.5"), Decimal("100.00"))
        assert total == Decimal("160.00")

    def test_labor_ignored_without_rate(self):
        assert calculate_line_total(1, Decimal("10.00"), Decimal("2"), None) == Decimal("10.00")

    def test_labor_ignored_without_hours(self):
        assert calculate_line_total(1, Decimal("10.00"), None, Decimal("80")) == Decimal("10.00")

    def test_accepts_floats_and_strings(self):
        assert calculate_line_total(3, 0.1) == Decimal("0.3")
        assert calculate_line_total("2", "12.50") == Decimal("25.00")


class TestSubtotalTaxTotal:
    """subtotal = sum of lines, tax = subtotal * rate, total = subtotal + tax."""

    def test_empty_order(self):
        assert calculate_subtotal([]) == Decimal("0")
        assert calculate_tax(Decimal("0")) == Decimal("0")

    def test_mixed_lines(self):
        items = [
            line(2, Decimal("45.00")),
            line(1, Decimal("0"), Decimal("1.5"), Decimal("120.00")),
        ]
        subtotal = calculate_subtotal(items)
        assert subtotal == Decimal("270.00")

        tax = calculate_tax(subtotal, Decimal("0.0875"))
        assert tax == Decimal("23.625")
        assert calculate_total(subtotal, round_money(tax)) == Decimal("293.63")

    def test_default_rate_from_settings(self):
        assert calculate_tax(Decimal("100")) == Decimal("8.75")

    def test_total_is_never_below_subtotal(self):
        rng = random.Random(7)
        for _ in range(200):
            items = [
                line(
                    rng.randint(1, 5),
                    Decimal(rng.randint(0, 50000)) / 100,
                    Decimal(rng.randint(0, 800)) / 100 if rng.random() < 0.5 else None,
                    Decimal(rng.randint(0, 20000)) / 100,
                )
                for _ in range(rng.randint(0, 6))
            ]
            subtotal = calculate_subtotal(items)
            total = calculate_total(subtotal, calculate_tax(subtotal))
            assert total >= subtotal

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("1.005"), Decimal("1.01")),
            (Decimal("1.004"), Decimal("1.00")),
            (Decimal("-2.345"), Decimal("-2.35")),
            (10, Decimal("10.00")),
        ],
    )
    def test_round_money_half_up(self, value, expected):
        assert round_money(value) == expected


# ============================================================
# Generated numbers
# ============================================================


class TestNumberGeneration:
    """Order and invoice number formats."""

    def test_order_number_format(self):
        number = generate_order_number()
        assert re.fullmatch(r"WO-\d{9}", number)

    def test_order_number_custom_prefix(self):
        number = generate_order_number(prefix="RO", rng=random.Random(1))
        assert number.startswith("RO-")
        assert len(number) == len("RO-") + 9

    def test_invoice_number_format(self):
        number = generate_invoice_number(today=date(2026, 10, 19), rng=random.Random(3))
        assert re.fullmatch(r"INV-2610-\d{4}", number)


# ============================================================
# Display helpers
# ============================================================


class TestFormatting:
    """Display formatting."""

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("1234.5"), "$1,234.50"),
            (0, "$0.00"),
            (-5, "-$5.00"),
            ("1000000", "$1,000,000.00"),
        ],
    )
    def test_format_currency(self, amount, expected):
        assert format_currency(amount) == expected

    @pytest.mark.parametrize(
        "hours, expected",
        [
            (Decimal("1.5"), "1h 30m"),
            (Decimal("0.75"), "0h 45m"),
            (3, "3h 0m"),
            (Decimal("2.999"), "3h 0m"),
        ],
    )
    def test_format_hours(self, hours, expected):
        assert format_hours(hours) == expected

    def test_format_date_long_form(self):
        assert format_date(date(2026, 10, 19)) == "October 19th, 2026"
        assert format_date(date(2026, 3, 1)) == "March 1st, 2026"
        assert format_date(date(2026, 3, 22)) == "March 22nd, 2026"
        assert format_date(date(2026, 3, 13)) == "March 13th, 2026"

    def test_format_date_inputs(self):
        assert format_date("2026-10-02") == "October 2nd, 2026"
        assert format_date(datetime(2026, 1, 3, 9, 30)) == "January 3rd, 2026"
        assert format_date(date(2026, 10, 19), "%m/%d/%Y") == "10/19/2026"
        assert format_date(None) == ""
        assert format_date("") == ""

    def test_names(self):
        assert get_full_name("Jane", "Doe") == "Jane Doe"
        assert get_full_name("Jane", None) == "Jane"
        assert get_vehicle_display_name("Toyota", "Camry", 2019) == "2019 Toyota Camry"
