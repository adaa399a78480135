"""
Tier resolvers - one per precedence tier, evaluated least to most specific.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from core.rates.interfaces import RateOverrideStore
from core.rates.models import PrecedenceTier, RateOverride, TargetingContext

logger = logging.getLogger(__name__)


def _single(value) -> Tuple[str, ...]:
    return () if value is None else (str(value),)


@dataclass(frozen=True)
class TierResolver:
    """
    Finds the winning override for one tier.

    scope_keys derives the lookup keys from the context; an empty tuple means
    the context carries nothing for this tier and it is skipped.
    """
    tier: PrecedenceTier
    scope_keys: Callable[[TargetingContext], Tuple[str, ...]]

    def resolve(self, store: RateOverrideStore, context: TargetingContext) -> Optional[RateOverride]:
        keys = self.scope_keys(context)
        if not keys:
            return None

        candidates = [
            override
            for override in store.find_overrides(context.org_id, self.tier, keys, context.as_of_date)
            if override.org_id == context.org_id
            and override.tier == self.tier
            and override.scope_key in keys
            and override.is_effective(context.as_of_date)
        ]
        if not candidates:
            return None

        winner = max(candidates, key=_winner_key)
        if len(candidates) > 1:
            logger.debug(
                "Tier %s: %d candidates for keys %s, picked override %s",
                self.tier.value, len(candidates), keys, winner.id,
            )
        return winner


def _winner_key(override: RateOverride):
    # Latest effective_from, then most recently created, then highest id.
    return (
        override.effective_from,
        override.created_at is not None,
        override.created_at,
        override.id,
    )


TIER_RESOLVERS: Tuple[TierResolver, ...] = (
    TierResolver(PrecedenceTier.ORG_DEFAULT, lambda c: (str(c.org_id),)),
    TierResolver(PrecedenceTier.ROLE_TEMPLATE, lambda c: _single(c.role_template_id)),
    TierResolver(PrecedenceTier.LEVEL, lambda c: _single(c.level)),
    TierResolver(PrecedenceTier.SKILL, lambda c: tuple(str(s) for s in sorted(c.skills))),
    TierResolver(PrecedenceTier.CLIENT, lambda c: _single(c.client_id)),
    TierResolver(PrecedenceTier.ENGAGEMENT, lambda c: _single(c.engagement_id)),
    TierResolver(PrecedenceTier.PERSON, lambda c: _single(c.person_id)),
)


def resolve_tiers(
    store: RateOverrideStore,
    context: TargetingContext,
    resolvers: Tuple[TierResolver, ...] = TIER_RESOLVERS,
) -> List[Tuple[PrecedenceTier, RateOverride]]:
    """Winners in tier order; tiers with no match are left out."""
    winners = []
    for resolver in resolvers:
        override = resolver.resolve(store, context)
        if override is not None:
            winners.append((resolver.tier, override))
    return winners
