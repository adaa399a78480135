"""
Rate Models - Value objects for rate resolution.

Everything here is immutable. Monetary values are decimal.Decimal and are
serialised as strings so a stored snapshot round-trips without loss.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from core.exceptions import ValidationError


class PrecedenceTier(str, Enum):
    """Override specificity levels, declared from least to most specific."""
    ORG_DEFAULT = "org_default"
    ROLE_TEMPLATE = "role_template"
    LEVEL = "level"
    SKILL = "skill"
    CLIENT = "client"
    ENGAGEMENT = "engagement"
    PERSON = "person"

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)


TIER_ORDER: Tuple[PrecedenceTier, ...] = tuple(PrecedenceTier)


class PremiumKind(str, Enum):
    ABSOLUTE = "absolute"
    PERCENTAGE = "percentage"


_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def normalize_currency(value: Any, field_name: str = "currency") -> str:
    if not isinstance(value, str) or not _CURRENCY_RE.match(value.strip().upper()):
        raise ValidationError(f"{field_name} must be a 3-letter ISO 4217 code, got {value!r}", field=field_name)
    return value.strip().upper()


def to_decimal(value: Any) -> Decimal:
    """Convert DB numerics and serialised strings to Decimal without a float round trip."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value))


@dataclass(frozen=True)
class Premium:
    id: Optional[int]
    kind: PremiumKind
    amount: Decimal
    applies_to_tier: Optional[PrecedenceTier] = None
    position: int = 0
    label: Optional[str] = None


@dataclass(frozen=True)
class RateOverride:
    """A rate card as read from the override store."""
    id: int
    org_id: int
    tier: PrecedenceTier
    scope_key: str
    currency: str
    base_amount: Decimal
    effective_from: date
    effective_to: Optional[date] = None
    created_at: Optional[datetime] = None
    premiums: Tuple[Premium, ...] = ()

    def is_effective(self, as_of: date) -> bool:
        """Effective window is inclusive on both ends; a null end is open."""
        if self.effective_from > as_of:
            return False
        return self.effective_to is None or self.effective_to >= as_of


@dataclass(frozen=True)
class TargetingContext:
    """
    The point at which a rate is evaluated.

    Optional fields are None when absent; the corresponding precedence tier
    is then skipped. as_of_date is always explicit here - defaulting to
    "today" happens at the boundary (see from_query_params).
    """
    org_id: int
    as_of_date: date
    role_template_id: Optional[int] = None
    level: Optional[str] = None
    skills: FrozenSet[int] = field(default_factory=frozenset)
    engagement_id: Optional[int] = None
    client_id: Optional[int] = None
    person_id: Optional[int] = None
    target_currency: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.org_id, bool) or not isinstance(self.org_id, int) or self.org_id <= 0:
            raise ValidationError(f"org_id must be a positive integer, got {self.org_id!r}", field="org_id")
        if not isinstance(self.as_of_date, date):
            raise ValidationError("as_of_date is required", field="as_of_date")
        if isinstance(self.as_of_date, datetime):
            object.__setattr__(self, "as_of_date", self.as_of_date.date())
        for name in ("role_template_id", "engagement_id", "client_id", "person_id"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value <= 0):
                raise ValidationError(f"{name} must be a positive integer, got {value!r}", field=name)
        if self.level is not None:
            level = str(self.level).strip().upper()
            if not level:
                raise ValidationError("level must not be blank", field="level")
            object.__setattr__(self, "level", level)
        skills = frozenset(self.skills or ())
        if any(isinstance(s, bool) or not isinstance(s, int) or s <= 0 for s in skills):
            raise ValidationError(f"skills must be positive integers, got {sorted(skills, key=str)!r}", field="skills")
        object.__setattr__(self, "skills", skills)
        if self.target_currency is not None:
            object.__setattr__(self, "target_currency", normalize_currency(self.target_currency, "target_currency"))

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any], today: Optional[date] = None) -> "TargetingContext":
        """
        Build a context from raw query parameters.

        skills is a comma-separated list of integer ids; as_of is an ISO date
        and defaults to ``today`` (call time) when missing or empty.
        """
        if params.get("org_id") in (None, ""):
            raise ValidationError("org_id is required", field="org_id")

        as_of_raw = params.get("as_of")
        if as_of_raw in (None, ""):
            as_of = today or date.today()
        elif isinstance(as_of_raw, date):
            as_of = as_of_raw
        else:
            try:
                as_of = date.fromisoformat(str(as_of_raw).strip())
            except ValueError:
                raise ValidationError(f"as_of must be an ISO date (YYYY-MM-DD), got {as_of_raw!r}", field="as_of")

        return cls(
            org_id=_parse_int(params, "org_id"),
            as_of_date=as_of,
            role_template_id=_parse_int(params, "role_template_id"),
            level=params.get("level") or None,
            skills=_parse_id_list(params.get("skills")),
            engagement_id=_parse_int(params, "engagement_id"),
            client_id=_parse_int(params, "client_id"),
            person_id=_parse_int(params, "person_id"),
            target_currency=params.get("target_currency") or None,
        )


def _parse_int(params: Mapping[str, Any], name: str) -> Optional[int]:
    raw = params.get(name)
    if raw in (None, ""):
        return None
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}", field=name)


def _parse_id_list(raw: Any) -> FrozenSet[int]:
    if raw in (None, ""):
        return frozenset()
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    ids = set()
    for item in items:
        text = str(item).strip()
        if not text:
            continue
        try:
            ids.add(int(text))
        except ValueError:
            raise ValidationError(f"skills must be a comma-separated list of integers, got {raw!r}", field="skills")
    return frozenset(ids)


@dataclass(frozen=True)
class AppliedPremium:
    """
    One premium as it was applied during a resolution.

    For absolute premiums ``amount`` is in ``currency`` (the owning override's
    currency) and ``base_currency_amount`` is what was added to the base.
    Percentage premiums carry the percent in ``amount`` and no currency.
    """
    tier: PrecedenceTier
    override_id: int
    premium_id: Optional[int]
    kind: PremiumKind
    amount: Decimal
    currency: Optional[str] = None
    base_currency_amount: Optional[Decimal] = None
    label: Optional[str] = None

    @property
    def source(self) -> str:
        return f"{self.tier.value}#{self.override_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier.value,
            "override_id": self.override_id,
            "premium_id": self.premium_id,
            "kind": self.kind.value,
            "amount": str(self.amount),
            "currency": self.currency,
            "base_currency_amount": _str_or_none(self.base_currency_amount),
            "label": self.label,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppliedPremium":
        return cls(
            tier=PrecedenceTier(data["tier"]),
            override_id=data["override_id"],
            premium_id=data.get("premium_id"),
            kind=PremiumKind(data["kind"]),
            amount=Decimal(data["amount"]),
            currency=data.get("currency"),
            base_currency_amount=_decimal_or_none(data.get("base_currency_amount")),
            label=data.get("label"),
        )


@dataclass(frozen=True)
class RateResolution:
    """
    Fully itemized result of resolving a rate.

    subtotal is the amount after premiums and scarcity, in base_currency and
    unrounded. final_amount is rounded to final_currency's minor units.
    """
    final_currency: str
    final_amount: Decimal
    base_currency: str
    base_amount: Decimal
    base_tier: PrecedenceTier
    base_override_id: int
    absolute_premiums: Tuple[AppliedPremium, ...]
    percentage_premiums: Tuple[AppliedPremium, ...]
    scarcity_multiplier: Decimal
    subtotal: Decimal
    precedence_applied: Tuple[PrecedenceTier, ...]
    as_of_date: date
    fx_rate: Optional[Decimal] = None
    fx_date: Optional[date] = None
    scarcity_version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "final_currency": self.final_currency,
            "final_amount": str(self.final_amount),
            "base_currency": self.base_currency,
            "base_amount": str(self.base_amount),
            "base_tier": self.base_tier.value,
            "base_override_id": self.base_override_id,
            "absolute_premiums": [p.to_dict() for p in self.absolute_premiums],
            "percentage_premiums": [p.to_dict() for p in self.percentage_premiums],
            "scarcity_multiplier": str(self.scarcity_multiplier),
            "scarcity_version": self.scarcity_version,
            "subtotal": str(self.subtotal),
            "fx_rate": _str_or_none(self.fx_rate),
            "fx_date": self.fx_date.isoformat() if self.fx_date else None,
            "precedence_applied": [t.value for t in self.precedence_applied],
            "as_of_date": self.as_of_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RateResolution":
        try:
            return cls(
                final_currency=data["final_currency"],
                final_amount=Decimal(data["final_amount"]),
                base_currency=data["base_currency"],
                base_amount=Decimal(data["base_amount"]),
                base_tier=PrecedenceTier(data["base_tier"]),
                base_override_id=data["base_override_id"],
                absolute_premiums=tuple(AppliedPremium.from_dict(p) for p in data.get("absolute_premiums", [])),
                percentage_premiums=tuple(AppliedPremium.from_dict(p) for p in data.get("percentage_premiums", [])),
                scarcity_multiplier=Decimal(data["scarcity_multiplier"]),
                subtotal=Decimal(data["subtotal"]),
                precedence_applied=tuple(PrecedenceTier(t) for t in data["precedence_applied"]),
                as_of_date=date.fromisoformat(data["as_of_date"]),
                fx_rate=_decimal_or_none(data.get("fx_rate")),
                fx_date=date.fromisoformat(data["fx_date"]) if data.get("fx_date") else None,
                scarcity_version=data.get("scarcity_version"),
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            raise ValidationError(f"Malformed rate resolution payload: {e}") from e


def _str_or_none(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def _decimal_or_none(value: Any) -> Optional[Decimal]:
    return None if value in (None, "") else Decimal(value)


@dataclass(frozen=True)
class FxQuote:
    """1 from_currency = rate to_currency, taken from the quote dated effective_date."""
    from_currency: str
    to_currency: str
    rate: Decimal
    effective_date: date
    inverted: bool = False
