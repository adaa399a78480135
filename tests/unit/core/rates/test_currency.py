#!/usr/bin/env python3
"""
Tests for minor-unit rounding and the FX converter.
"""

import unittest
from datetime import date
from decimal import Decimal

from core.config_loader import FxConfig
from core.exceptions import CurrencyUnavailableError
from core.rates.currency import FxRateConverter, minor_units, round_money
from tests.mocks.rate_mocks import InMemoryFxSource


class TestRoundMoney(unittest.TestCase):

    def test_half_up(self):
        self.assertEqual(round_money(Decimal("2.345"), "USD"), Decimal("2.35"))
        self.assertEqual(round_money(Decimal("2.344999"), "USD"), Decimal("2.34"))
        self.assertEqual(round_money(Decimal("-2.345"), "USD"), Decimal("-2.35"))

    def test_minor_units_table(self):
        table = {"JPY": 0, "BHD": 3}
        self.assertEqual(minor_units("JPY", table), 0)
        self.assertEqual(minor_units("BHD", table), 3)
        self.assertEqual(minor_units("USD", table), 2)
        self.assertEqual(minor_units("USD"), 2)
        self.assertEqual(round_money(Decimal("1.2345"), "BHD", table), Decimal("1.235"))
        self.assertEqual(round_money(Decimal("99.5"), "JPY", table), Decimal("100"))


class TestFxRateConverter(unittest.TestCase):

    def setUp(self):
        self.source = InMemoryFxSource()
        self.converter = FxRateConverter(self.source, FxConfig(max_age_days=7))

    def test_same_currency_is_identity(self):
        quote = self.converter.quote("USD", "USD", date(2026, 3, 1))
        self.assertEqual(quote.rate, Decimal(1))
        self.assertEqual(self.converter.convert(Decimal("12.5"), "USD", "USD", date(2026, 3, 1)), Decimal("12.5"))

    def test_uses_latest_quote_not_after_as_of(self):
        self.source.add("USD", "EUR", "0.90", date(2026, 2, 26))
        self.source.add("USD", "EUR", "0.92", date(2026, 2, 28))
        self.source.add("USD", "EUR", "0.99", date(2026, 3, 2))

        quote = self.converter.quote("USD", "EUR", date(2026, 3, 1))

        self.assertEqual(quote.rate, Decimal("0.92"))
        self.assertEqual(quote.effective_date, date(2026, 2, 28))
        self.assertFalse(quote.inverted)

    def test_inverse_pair_fallback(self):
        self.source.add("EUR", "USD", "1.25", date(2026, 3, 1))

        quote = self.converter.quote("USD", "EUR", date(2026, 3, 1))

        self.assertEqual(quote.rate, Decimal("0.8"))
        self.assertTrue(quote.inverted)

    def test_inverse_disabled(self):
        self.source.add("EUR", "USD", "1.25", date(2026, 3, 1))
        converter = FxRateConverter(self.source, FxConfig(allow_inverse=False))

        with self.assertRaises(CurrencyUnavailableError):
            converter.quote("USD", "EUR", date(2026, 3, 1))

    def test_stale_quote_is_unavailable(self):
        self.source.add("USD", "EUR", "0.9", date(2026, 2, 1))

        with self.assertRaises(CurrencyUnavailableError) as ctx:
            self.converter.quote("USD", "EUR", date(2026, 3, 1))

        self.assertEqual(ctx.exception.from_currency, "USD")
        self.assertEqual(ctx.exception.to_currency, "EUR")

    def test_staleness_check_can_be_disabled(self):
        self.source.add("USD", "EUR", "0.9", date(2025, 1, 1))
        converter = FxRateConverter(self.source, FxConfig(max_age_days=None))

        self.assertEqual(converter.quote("USD", "EUR", date(2026, 3, 1)).rate, Decimal("0.9"))

    def test_convert(self):
        self.source.add("USD", "EUR", "0.9", date(2026, 3, 1))
        self.assertEqual(self.converter.convert(Decimal("100"), "USD", "EUR", date(2026, 3, 1)), Decimal("90.0"))


if __name__ == '__main__':
    unittest.main()
