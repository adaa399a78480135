"""
Rate Resolver - produces the effective billable rate for a targeting context.

Steps:
1. Run the tier resolvers, least to most specific, collecting one winner per tier.
2. The most specific winner supplies base amount and currency.
3. Add applicable absolute premiums (converted into the base currency),
   then compound applicable percentage premiums.
4. Apply the scarcity multiplier.
5. Convert to the target currency and round to its minor units.

The resolver never writes and never reads the clock: identical inputs and
override data give an identical RateResolution.
"""

import logging
from decimal import Decimal, localcontext
from typing import Optional, Tuple

from core.config_loader import RatesConfig
from core.exceptions import CurrencyUnavailableError, ResolutionError
from core.rates.currency import FxRateConverter, MONEY_CONTEXT, ONE, round_money
from core.rates.interfaces import CurrencyConverter, RateOverrideStore
from core.rates.models import (
    AppliedPremium,
    PrecedenceTier,
    PremiumKind,
    RateResolution,
    TIER_ORDER,
    TargetingContext,
    to_decimal,
)
from core.rates.premiums import compound_percentages, split_premiums
from core.rates.scarcity import ScarcityModel
from core.rates.tiers import TIER_RESOLVERS, TierResolver, resolve_tiers

logger = logging.getLogger(__name__)


class RateResolver:

    def __init__(
        self,
        store: RateOverrideStore,
        converter: CurrencyConverter,
        scarcity: Optional[ScarcityModel] = None,
        config: Optional[RatesConfig] = None,
        tier_resolvers: Tuple[TierResolver, ...] = TIER_RESOLVERS,
    ):
        self.store = store
        self.converter = converter
        self.scarcity = scarcity
        self.config = config or RatesConfig()
        self.tier_resolvers = tier_resolvers

    def resolve(self, context: TargetingContext) -> RateResolution:
        with localcontext(MONEY_CONTEXT):
            return self._resolve(context)

    def _resolve(self, context: TargetingContext) -> RateResolution:
        as_of = context.as_of_date
        winners = resolve_tiers(self.store, context, self.tier_resolvers)

        if not any(tier == PrecedenceTier.ORG_DEFAULT for tier, _ in winners):
            raise ResolutionError(
                ResolutionError.NO_ORG_DEFAULT,
                f"Org {context.org_id} has no org_default rate effective on {as_of.isoformat()}",
            )

        base_tier, base_override = winners[-1]
        base_currency = base_override.currency
        base_amount = to_decimal(base_override.base_amount)

        absolute_refs, percentage_refs = split_premiums(winners, base_tier)

        absolute_premiums = []
        subtotal = base_amount
        for tier, override, premium in absolute_refs:
            amount = to_decimal(premium.amount)
            converted = self._convert(amount, override.currency, base_currency, context)
            subtotal = subtotal + converted
            absolute_premiums.append(AppliedPremium(
                tier=tier,
                override_id=override.id,
                premium_id=premium.id,
                kind=PremiumKind.ABSOLUTE,
                amount=amount,
                currency=override.currency,
                base_currency_amount=converted,
                label=premium.label,
            ))

        percentage_premiums = [
            AppliedPremium(
                tier=tier,
                override_id=override.id,
                premium_id=premium.id,
                kind=PremiumKind.PERCENTAGE,
                amount=to_decimal(premium.amount),
                label=premium.label,
            )
            for tier, override, premium in percentage_refs
        ]
        subtotal = compound_percentages(subtotal, (p.amount for p in percentage_premiums))

        scarcity_multiplier = ONE
        scarcity_version = None
        if self.scarcity is not None:
            scarcity_multiplier = self.scarcity.multiplier(context)
            scarcity_version = self.scarcity.version
        subtotal = subtotal * scarcity_multiplier

        final_currency = context.target_currency or base_currency
        fx_rate = None
        fx_date = None
        converted_total = subtotal
        if final_currency != base_currency:
            quote = self._quote(base_currency, final_currency, context)
            fx_rate = quote.rate
            fx_date = quote.effective_date
            converted_total = subtotal * quote.rate

        final_amount = round_money(converted_total, final_currency, self.config.minor_units)

        contributing = {base_tier}
        contributing.update(p.tier for p in absolute_premiums)
        contributing.update(p.tier for p in percentage_premiums)
        precedence_applied = tuple(t for t in TIER_ORDER if t in contributing)

        logger.debug(
            "Resolved rate org=%s as_of=%s base=%s %s (%s) final=%s %s",
            context.org_id, as_of, base_amount, base_currency, base_tier.value,
            final_amount, final_currency,
        )

        return RateResolution(
            final_currency=final_currency,
            final_amount=final_amount,
            base_currency=base_currency,
            base_amount=base_amount,
            base_tier=base_tier,
            base_override_id=base_override.id,
            absolute_premiums=tuple(absolute_premiums),
            percentage_premiums=tuple(percentage_premiums),
            scarcity_multiplier=scarcity_multiplier,
            subtotal=subtotal,
            precedence_applied=precedence_applied,
            as_of_date=as_of,
            fx_rate=fx_rate,
            fx_date=fx_date,
            scarcity_version=scarcity_version,
        )

    def _quote(self, from_currency: str, to_currency: str, context: TargetingContext):
        try:
            return self.converter.quote(from_currency, to_currency, context.as_of_date)
        except CurrencyUnavailableError as e:
            raise ResolutionError(ResolutionError.CURRENCY_UNAVAILABLE, str(e)) from e

    def _convert(self, amount: Decimal, from_currency: str, to_currency: str, context: TargetingContext) -> Decimal:
        if from_currency == to_currency:
            return amount
        return amount * self._quote(from_currency, to_currency, context).rate


def build_rate_resolver(repo, config: Optional[RatesConfig] = None) -> RateResolver:
    """Wire a resolver over a StaffingRepository's rate, FX and staffing repositories."""
    config = config or RatesConfig()
    converter = FxRateConverter(repo.fx, config.fx)
    scarcity = ScarcityModel(repo.staffing, config.scarcity)
    return RateResolver(repo.rates, converter, scarcity, config)
