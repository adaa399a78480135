#!/usr/bin/env python3
"""
Fit Models - Inputs and results of candidate fit scoring.

Candidate and request profiles are plain snapshots taken inside a unit of
work, so scoring never touches the database session.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.rates.models import RateResolution


@dataclass(frozen=True)
class SkillRequirement:
    skill_id: int
    min_level: int = 1
    weight: float = 1.0
    required: bool = True


@dataclass(frozen=True)
class SkillEvidence:
    skill_id: int
    level: int
    last_used_at: Optional[date] = None


@dataclass(frozen=True)
class Allocation:
    """A capacity-holding assignment; both dates inclusive."""
    start_date: date
    end_date: date
    alloc_pct: Decimal

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class RequestProfile:
    id: int
    org_id: int
    role_template_id: int
    start_date: date
    end_date: date
    target_alloc_pct: Decimal
    level: Optional[str] = None
    engagement_id: Optional[int] = None
    client_id: Optional[int] = None
    requirements: Tuple[SkillRequirement, ...] = ()

    @property
    def required_skill_ids(self) -> Tuple[int, ...]:
        return tuple(sorted(r.skill_id for r in self.requirements if r.required))


@dataclass(frozen=True)
class CandidateProfile:
    person_id: int
    name: str
    level: str
    capacity_pct: Decimal
    skills: Mapping[int, SkillEvidence] = field(default_factory=dict)
    allocations: Tuple[Allocation, ...] = ()


@dataclass(frozen=True)
class FitReason:
    """One human-readable explanation line for a score."""
    code: str
    detail: str
    contribution: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "detail": self.detail, "contribution": self.contribution}


@dataclass(frozen=True)
class CandidateFit:
    """Ranked candidate. Never persisted."""
    person_id: int
    score: float
    factors: Dict[str, float]
    weights_version: str
    name: Optional[str] = None
    reasons: Tuple[FitReason, ...] = ()
    modeled_rate: Optional[RateResolution] = None
    rate_error: Optional[str] = None

    @property
    def sort_key(self) -> Tuple[float, int]:
        return (-self.score, self.person_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "person_id": self.person_id,
            "name": self.name,
            "score": self.score,
            "factors": dict(self.factors),
            "reasons": [r.to_dict() for r in self.reasons],
            "weights_version": self.weights_version,
            "modeled_rate": self.modeled_rate.to_dict() if self.modeled_rate else None,
            "rate_error": self.rate_error,
        }
