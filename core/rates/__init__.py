from core.rates.models import (
    AppliedPremium,
    FxQuote,
    PrecedenceTier,
    Premium,
    PremiumKind,
    RateOverride,
    RateResolution,
    TIER_ORDER,
    TargetingContext,
)
from core.rates.currency import FxRateConverter, MONEY_CONTEXT, round_money
from core.rates.scarcity import ScarcityModel
from core.rates.resolver import RateResolver, build_rate_resolver

__all__ = [
    'AppliedPremium',
    'FxQuote',
    'FxRateConverter',
    'MONEY_CONTEXT',
    'PrecedenceTier',
    'Premium',
    'PremiumKind',
    'RateOverride',
    'RateResolution',
    'RateResolver',
    'build_rate_resolver',
    'ScarcityModel',
    'TIER_ORDER',
    'TargetingContext',
    'round_money',
]
