"""
Assignment Models - request and result types for the assignment lifecycle.
"""

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, FrozenSet, Mapping, Optional

from core.exceptions import ValidationError
from core.rates.models import RateResolution, to_decimal


class _Unset:
    """Marks a field that was not provided, as opposed to provided as None."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()

PROPOSED = "proposed"
ACTIVE = "active"
CANCELLED = "cancelled"
COMPLETED = "completed"

STATUSES = (PROPOSED, ACTIVE, CANCELLED, COMPLETED)
TERMINAL_STATUSES = (CANCELLED, COMPLETED)

# Fields a resolved rate depends on. These can never change after creation.
PRICING_FIELDS = ("person_id", "role_template_id", "engagement_id", "client_id",
                  "level", "skills", "target_currency", "rate_as_of")


@dataclass(frozen=True)
class AssignmentCreate:
    org_id: int
    person_id: int
    engagement_id: int
    role_template_id: int
    start_date: date
    end_date: date
    alloc_pct: Decimal = Decimal(100)
    status: str = ACTIVE
    client_id: Optional[int] = None
    level: Optional[str] = None
    skills: FrozenSet[int] = field(default_factory=frozenset)
    target_currency: Optional[str] = None
    rate_as_of: Optional[date] = None
    staffing_request_id: Optional[int] = None
    notes: Optional[str] = None

    def validate(self) -> None:
        for name in ("org_id", "person_id", "engagement_id", "role_template_id", "start_date", "end_date"):
            if getattr(self, name) is None:
                raise ValidationError(f"{name} is required", field=name)
        if self.status not in (PROPOSED, ACTIVE):
            raise ValidationError(f"New assignments must be '{PROPOSED}' or '{ACTIVE}', got {self.status!r}", field="status")
        check_date(self.start_date, "start_date")
        check_date(self.end_date, "end_date")
        check_window(self.start_date, self.end_date)
        check_alloc(self.alloc_pct)


@dataclass(frozen=True)
class AssignmentUpdate:
    """
    Partial update. Anything left UNSET is untouched; None is a value
    (``notes=None`` clears the notes).
    """
    start_date: Any = UNSET
    end_date: Any = UNSET
    alloc_pct: Any = UNSET
    notes: Any = UNSET
    status: Any = UNSET

    # Pricing context. Present only so that an attempt to change it can be rejected.
    person_id: Any = UNSET
    role_template_id: Any = UNSET
    engagement_id: Any = UNSET
    client_id: Any = UNSET
    level: Any = UNSET
    skills: Any = UNSET
    target_currency: Any = UNSET
    rate_as_of: Any = UNSET

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AssignmentUpdate":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(f"Unknown assignment fields: {', '.join(unknown)}", field=unknown[0])
        return cls(**dict(data))

    def provided(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}

    def pricing_changes(self) -> Dict[str, Any]:
        return {k: v for k, v in self.provided().items() if k in PRICING_FIELDS}


def check_date(value: Any, field_name: str) -> None:
    if not isinstance(value, date) or isinstance(value, datetime):
        raise ValidationError(f"{field_name} must be a date, got {value!r}", field=field_name)


def check_window(start: date, end: date) -> None:
    if end < start:
        raise ValidationError(f"end_date {end} is before start_date {start}", field="end_date")


def check_alloc(alloc_pct: Any) -> None:
    if alloc_pct is None:
        raise ValidationError("alloc_pct must not be null", field="alloc_pct")
    try:
        value = to_decimal(alloc_pct)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"alloc_pct must be a number, got {alloc_pct!r}", field="alloc_pct")
    if not value.is_finite() or value <= 0 or value > 100:
        raise ValidationError(f"alloc_pct must be in (0, 100], got {alloc_pct}", field="alloc_pct")


@dataclass(frozen=True)
class AssignmentRecord:
    """Detached read model of an assignment and its frozen snapshot."""
    id: int
    org_id: int
    person_id: int
    engagement_id: int
    role_template_id: int
    start_date: date
    end_date: date
    alloc_pct: Decimal
    status: str
    staffing_request_id: Optional[int] = None
    client_id: Optional[int] = None
    level: Optional[str] = None
    skills: FrozenSet[int] = field(default_factory=frozenset)
    target_currency: Optional[str] = None
    rate_as_of: Optional[date] = None
    notes: Optional[str] = None
    rate_snapshot: Optional[RateResolution] = None
    bill_rate: Optional[Decimal] = None
    currency: Optional[str] = None
    cost_rate: Optional[Decimal] = None
    cost_currency: Optional[str] = None
    snapshot_taken_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "AssignmentRecord":
        # bill_rate is read from the snapshot so it keeps the currency's minor units
        snapshot = RateResolution.from_dict(row.rate_snapshot) if row.rate_snapshot else None
        return cls(
            id=row.id,
            org_id=row.org_id,
            person_id=row.person_id,
            engagement_id=row.engagement_id,
            role_template_id=row.role_template_id,
            start_date=row.start_date,
            end_date=row.end_date,
            alloc_pct=to_decimal(row.alloc_pct),
            status=row.status,
            staffing_request_id=row.staffing_request_id,
            client_id=row.client_id,
            level=row.level,
            skills=frozenset(row.skills or ()),
            target_currency=row.target_currency,
            rate_as_of=row.rate_as_of,
            notes=row.notes,
            rate_snapshot=snapshot,
            bill_rate=snapshot.final_amount if snapshot is not None else None,
            currency=row.currency,
            cost_rate=to_decimal(row.cost_rate_snapshot) if row.cost_rate_snapshot is not None else None,
            cost_currency=row.cost_currency,
            snapshot_taken_at=row.snapshot_taken_at,
            created_at=row.created_at,
            updated_at=row.updated_at,
            cancelled_at=row.cancelled_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        def _iso(value):
            return value.isoformat() if value is not None else None

        return {
            "id": self.id,
            "org_id": self.org_id,
            "person_id": self.person_id,
            "engagement_id": self.engagement_id,
            "role_template_id": self.role_template_id,
            "staffing_request_id": self.staffing_request_id,
            "client_id": self.client_id,
            "level": self.level,
            "skills": sorted(self.skills),
            "target_currency": self.target_currency,
            "rate_as_of": _iso(self.rate_as_of),
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "alloc_pct": str(self.alloc_pct),
            "notes": self.notes,
            "status": self.status,
            "bill_rate": str(self.bill_rate) if self.bill_rate is not None else None,
            "currency": self.currency,
            "cost_rate": str(self.cost_rate) if self.cost_rate is not None else None,
            "cost_currency": self.cost_currency,
            "rate_snapshot": self.rate_snapshot.to_dict() if self.rate_snapshot else None,
            "snapshot_taken_at": _iso(self.snapshot_taken_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "cancelled_at": _iso(self.cancelled_at),
        }
