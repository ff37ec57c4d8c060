# PATH: tests/unit/test_format_money.py
"""
Unit tests for format_money module.
"""

import unittest
from decimal import Decimal

from core.format_money import format_money, format_pct, format_usd


class TestFormatMoney(unittest.TestCase):
    """Tests for format_money function."""

    def test_format_string_input(self):
        self.assertEqual(format_money("123.456789"), "123.456789")
        self.assertEqual(format_money("0"), "0.000000")

    def test_format_decimal_and_int(self):
        self.assertEqual(format_money(Decimal("1.5"), 2), "1.50")
        self.assertEqual(format_money(100, 0), "100")

    def test_format_none_and_invalid(self):
        self.assertEqual(format_money(None), "0.000000")
        self.assertEqual(format_money("not_a_number", 2), "0.00")
        self.assertEqual(format_money("   ", 2), "0.00")

    def test_round_half_up(self):
        self.assertEqual(format_money("0.005", 2), "0.01")
        self.assertEqual(format_money("2.5", 0), "3")


class TestFormatUsd(unittest.TestCase):

    def test_thousands_separator(self):
        self.assertEqual(format_usd(Decimal("1234.5")), "$1,234.50")
        self.assertEqual(format_usd(Decimal("1000000")), "$1,000,000.00")

    def test_negative(self):
        self.assertEqual(format_usd(Decimal("-80")), "-$80.00")

    def test_negative_zero_is_plain_zero(self):
        self.assertEqual(format_usd(Decimal("-0.001")), "$0.00")


class TestFormatPct(unittest.TestCase):

    def test_fraction_to_percent(self):
        self.assertEqual(format_pct(Decimal("0.5")), "50.0%")
        self.assertEqual(format_pct(Decimal("0.4567"), 0), "46%")

    def test_none(self):
        self.assertEqual(format_pct(None), "0.0%")
