#!/usr/bin/env python3
"""
Tests for rate value objects: targeting context parsing and resolution
serialisation.
"""

import unittest
from datetime import date, datetime
from decimal import Decimal

from core.exceptions import ValidationError
from core.rates.models import (
    AppliedPremium,
    PrecedenceTier,
    PremiumKind,
    RateResolution,
    TargetingContext,
    TIER_ORDER,
)
from tests.mocks.rate_mocks import make_override


class TestPrecedenceTier(unittest.TestCase):

    def test_order_is_least_to_most_specific(self):
        self.assertEqual(
            [t.value for t in TIER_ORDER],
            ["org_default", "role_template", "level", "skill", "client", "engagement", "person"],
        )
        self.assertLess(PrecedenceTier.CLIENT.rank, PrecedenceTier.ENGAGEMENT.rank)


class TestRateOverrideWindow(unittest.TestCase):

    def test_window_is_inclusive(self):
        override = make_override(
            PrecedenceTier.ORG_DEFAULT, 1, 100,
            effective_from=date(2026, 1, 1), effective_to=date(2026, 1, 31),
        )
        self.assertTrue(override.is_effective(date(2026, 1, 1)))
        self.assertTrue(override.is_effective(date(2026, 1, 31)))
        self.assertFalse(override.is_effective(date(2025, 12, 31)))
        self.assertFalse(override.is_effective(date(2026, 2, 1)))

    def test_open_ended(self):
        override = make_override(PrecedenceTier.ORG_DEFAULT, 1, 100, effective_from=date(2026, 1, 1))
        self.assertTrue(override.is_effective(date(2099, 1, 1)))


class TestTargetingContext(unittest.TestCase):

    def test_from_query_params_full(self):
        context = TargetingContext.from_query_params({
            "org_id": "7",
            "role_template_id": "3",
            "level": "l4",
            "skills": "12, 5,,12",
            "engagement_id": "40",
            "client_id": "41",
            "person_id": "42",
            "target_currency": "eur",
            "as_of": "2026-03-15",
        })
        self.assertEqual(context.org_id, 7)
        self.assertEqual(context.role_template_id, 3)
        self.assertEqual(context.level, "L4")
        self.assertEqual(context.skills, frozenset({5, 12}))
        self.assertEqual(context.engagement_id, 40)
        self.assertEqual(context.client_id, 41)
        self.assertEqual(context.person_id, 42)
        self.assertEqual(context.target_currency, "EUR")
        self.assertEqual(context.as_of_date, date(2026, 3, 15))

    def test_absent_fields_are_none(self):
        context = TargetingContext.from_query_params({"org_id": "1"}, today=date(2026, 5, 1))
        self.assertIsNone(context.role_template_id)
        self.assertIsNone(context.level)
        self.assertEqual(context.skills, frozenset())
        self.assertIsNone(context.target_currency)
        self.assertEqual(context.as_of_date, date(2026, 5, 1))

    def test_empty_as_of_defaults_to_today(self):
        context = TargetingContext.from_query_params({"org_id": "1", "as_of": ""}, today=date(2026, 5, 2))
        self.assertEqual(context.as_of_date, date(2026, 5, 2))

    def test_missing_org_id(self):
        with self.assertRaises(ValidationError) as ctx:
            TargetingContext.from_query_params({"level": "L3"})
        self.assertEqual(ctx.exception.field, "org_id")

    def test_bad_values(self):
        bad = [
            {"org_id": "abc"},
            {"org_id": "0"},
            {"org_id": "1", "skills": "1,x"},
            {"org_id": "1", "as_of": "15/03/2026"},
            {"org_id": "1", "target_currency": "dollars"},
            {"org_id": "1", "person_id": "-4"},
        ]
        for params in bad:
            with self.subTest(params=params):
                with self.assertRaises(ValidationError):
                    TargetingContext.from_query_params(params)

    def test_datetime_as_of_is_truncated(self):
        context = TargetingContext(org_id=1, as_of_date=datetime(2026, 3, 1, 17, 30))
        self.assertEqual(context.as_of_date, date(2026, 3, 1))
        self.assertNotIsInstance(context.as_of_date, datetime)

    def test_is_hashable_and_immutable(self):
        context = TargetingContext(org_id=1, as_of_date=date(2026, 3, 1), skills=frozenset({1}))
        self.assertEqual(hash(context), hash(TargetingContext(org_id=1, as_of_date=date(2026, 3, 1), skills=frozenset({1}))))
        with self.assertRaises(Exception):
            context.org_id = 2


class TestRateResolutionSerialisation(unittest.TestCase):

    def _resolution(self):
        return RateResolution(
            final_currency="EUR",
            final_amount=Decimal("118.80"),
            base_currency="USD",
            base_amount=Decimal("100"),
            base_tier=PrecedenceTier.CLIENT,
            base_override_id=9,
            absolute_premiums=(AppliedPremium(
                tier=PrecedenceTier.CLIENT, override_id=9, premium_id=1, kind=PremiumKind.ABSOLUTE,
                amount=Decimal("10"), currency="USD", base_currency_amount=Decimal("10"), label="on-call",
            ),),
            percentage_premiums=(AppliedPremium(
                tier=PrecedenceTier.CLIENT, override_id=9, premium_id=2, kind=PremiumKind.PERCENTAGE,
                amount=Decimal("20"),
            ),),
            scarcity_multiplier=Decimal("1"),
            subtotal=Decimal("132.0"),
            precedence_applied=(PrecedenceTier.CLIENT,),
            as_of_date=date(2026, 3, 1),
            fx_rate=Decimal("0.9"),
            fx_date=date(2026, 2, 28),
            scarcity_version="scarcity-v1",
        )

    def test_to_dict_uses_strings_for_money(self):
        data = self._resolution().to_dict()
        self.assertEqual(data["final_amount"], "118.80")
        self.assertEqual(data["fx_rate"], "0.9")
        self.assertEqual(data["precedence_applied"], ["client"])
        self.assertEqual(data["absolute_premiums"][0]["source"], "client#9")
        self.assertEqual(data["absolute_premiums"][0]["label"], "on-call")
        self.assertEqual(data["fx_date"], "2026-02-28")

    def test_from_dict_restores_equal_value(self):
        resolution = self._resolution()
        self.assertEqual(RateResolution.from_dict(resolution.to_dict()), resolution)

    def test_malformed_payload(self):
        data = self._resolution().to_dict()
        del data["base_tier"]
        with self.assertRaises(ValidationError):
            RateResolution.from_dict(data)


if __name__ == '__main__':
    unittest.main()
