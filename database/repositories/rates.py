import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, or_
from sqlalchemy.orm import selectinload

from core.rates.interfaces import FxRateSource, RateOverrideStore
from core.rates.models import (
    PrecedenceTier,
    Premium,
    PremiumKind,
    RateOverride as RateOverrideRecord,
    to_decimal,
)
from database.models import FxRate, RateOverride, RatePremium
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _to_record(row: RateOverride) -> RateOverrideRecord:
    return RateOverrideRecord(
        id=row.id,
        org_id=row.org_id,
        tier=PrecedenceTier(row.tier),
        scope_key=row.scope_key,
        currency=row.currency,
        base_amount=to_decimal(row.base_amount),
        effective_from=row.effective_from,
        effective_to=row.effective_to,
        created_at=row.created_at,
        premiums=tuple(
            Premium(
                id=p.id,
                kind=PremiumKind(p.kind),
                amount=to_decimal(p.amount),
                applies_to_tier=PrecedenceTier(p.applies_to_tier) if p.applies_to_tier else None,
                position=p.position or 0,
                label=p.label,
            )
            for p in row.premiums
        ),
    )


class RateOverrideRepository(BaseRepository, RateOverrideStore):
    """Rate cards and their premiums."""

    def find_overrides(
        self,
        org_id: int,
        tier: PrecedenceTier,
        scope_keys: Iterable[str],
        as_of: date,
    ) -> List[RateOverrideRecord]:
        keys = list(scope_keys)
        if not keys:
            return []

        stmt = (
            select(RateOverride)
            .options(selectinload(RateOverride.premiums))
            .where(
                RateOverride.org_id == org_id,
                RateOverride.tier == tier.value,
                RateOverride.scope_key.in_(keys),
                RateOverride.effective_from <= as_of,
                or_(RateOverride.effective_to.is_(None), RateOverride.effective_to >= as_of),
            )
        )
        rows = self.db.execute(stmt).scalars().all()
        return [_to_record(row) for row in rows]

    def get_override(self, override_id: int) -> Optional[RateOverride]:
        return self.db.get(RateOverride, override_id)

    def create_override(
        self,
        org_id: int,
        tier: PrecedenceTier,
        scope_key: str,
        base_amount: Decimal,
        effective_from: date,
        currency: str = "USD",
        effective_to: Optional[date] = None,
        premiums: Iterable[dict] = (),
    ) -> RateOverride:
        override = RateOverride(
            org_id=org_id,
            tier=PrecedenceTier(tier).value,
            scope_key=str(scope_key),
            currency=currency,
            base_amount=base_amount,
            effective_from=effective_from,
            effective_to=effective_to,
        )
        for position, spec in enumerate(premiums):
            override.premiums.append(RatePremium(
                kind=PremiumKind(spec["kind"]).value,
                amount=spec["amount"],
                applies_to_tier=spec.get("applies_to_tier"),
                position=spec.get("position", position),
                label=spec.get("label"),
            ))
        self.db.add(override)
        self.db.flush()
        logger.debug("Created %s override %s for org %s scope %s", override.tier, override.id, org_id, scope_key)
        return override


class FxRateRepository(BaseRepository, FxRateSource):

    def latest_rate(self, base_currency: str, quote_currency: str, as_of: date) -> Optional[Tuple[Decimal, date]]:
        stmt = (
            select(FxRate)
            .where(
                FxRate.base_currency == base_currency,
                FxRate.quote_currency == quote_currency,
                FxRate.effective_date <= as_of,
            )
            .order_by(FxRate.effective_date.desc())
            .limit(1)
        )
        row = self.db.execute(stmt).scalar_one_or_none()
        if row is None:
            return None
        return to_decimal(row.rate), row.effective_date

    def add_rate(self, base_currency: str, quote_currency: str, rate: Decimal, effective_date: date) -> FxRate:
        fx = FxRate(
            base_currency=base_currency,
            quote_currency=quote_currency,
            rate=rate,
            effective_date=effective_date,
        )
        self.db.add(fx)
        self.db.flush()
        return fx
