"""
Premium selection and stacking.

Absolute premiums are summed onto the base first. Percentage premiums then
compound over the running subtotal in tier order, and in position order
within the owning override.
"""

from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from core.rates.currency import MONEY_CONTEXT, ONE
from core.rates.models import PrecedenceTier, Premium, PremiumKind, RateOverride

_HUNDRED = Decimal(100)

PremiumRef = Tuple[PrecedenceTier, RateOverride, Premium]


def premium_applies(premium: Premium, base_tier: PrecedenceTier) -> bool:
    return premium.applies_to_tier is None or premium.applies_to_tier == base_tier


def split_premiums(
    winners: Sequence[Tuple[PrecedenceTier, RateOverride]],
    base_tier: PrecedenceTier,
) -> Tuple[List[PremiumRef], List[PremiumRef]]:
    """Return the applicable (absolute, percentage) premiums in application order."""
    absolute: List[PremiumRef] = []
    percentage: List[PremiumRef] = []
    for tier, override in winners:
        ordered = sorted(
            override.premiums,
            key=lambda p: (p.position, p.id if p.id is not None else 0),
        )
        for premium in ordered:
            if not premium_applies(premium, base_tier):
                continue
            if premium.kind == PremiumKind.ABSOLUTE:
                absolute.append((tier, override, premium))
            else:
                percentage.append((tier, override, premium))
    return absolute, percentage


def compound_percentages(subtotal: Decimal, percents: Iterable[Decimal]) -> Decimal:
    for pct in percents:
        factor = MONEY_CONTEXT.add(ONE, MONEY_CONTEXT.divide(pct, _HUNDRED))
        subtotal = MONEY_CONTEXT.multiply(subtotal, factor)
    return subtotal
