#!/usr/bin/env python3
"""
Fit factors. Every factor returns a value in [0, 1].

- skill_overlap: weighted requirement coverage. Each requirement scores
  min(person_level / min_level, 1), decayed by how long ago the skill was
  last used. Nice-to-have skills carry nice_to_have_weight of their weight.
- availability: share of request-window days on which spare capacity
  covers the requested allocation.
- level_match: 1 - level_step_penalty * |person_level - requested_level|.
- workload: 1 - load / capacity on the request start date.
"""

import logging
import math
import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Tuple

from core.config_loader import FitConfig
from core.fit.models import Allocation, CandidateProfile, FitReason, RequestProfile, SkillEvidence, SkillRequirement

logger = logging.getLogger(__name__)

_LEVEL_RE = re.compile(r"^L?(\d+)$", re.IGNORECASE)


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def level_number(level: Optional[str]) -> Optional[int]:
    """'L3' -> 3. Returns None when the level cannot be read."""
    if level is None:
        return None
    match = _LEVEL_RE.match(str(level).strip())
    return int(match.group(1)) if match else None


def recency_factor(last_used_at: Optional[date], as_of: date, config: FitConfig) -> float:
    if not config.recency_enabled or last_used_at is None or config.recency_days <= 0:
        return 1.0
    days = max((as_of - last_used_at).days, 0)
    floor = _clamp01(config.recency_floor)
    return floor + (1.0 - floor) * math.exp(-days / config.recency_days)


def skill_overlap(
    requirements: Iterable[SkillRequirement],
    skills: Mapping[int, SkillEvidence],
    as_of: date,
    config: FitConfig,
) -> Tuple[float, List[FitReason]]:
    total_weight = 0.0
    covered = 0.0
    reasons: List[FitReason] = []

    for req in requirements:
        weight = max(0.0, float(req.weight))
        if not req.required:
            weight *= max(0.0, config.nice_to_have_weight)
        if weight == 0.0:
            continue
        total_weight += weight

        evidence = skills.get(req.skill_id)
        if evidence is None:
            if req.required:
                reasons.append(FitReason("skill_missing", f"missing required skill {req.skill_id}"))
            continue

        ratio = min(evidence.level / max(req.min_level, 1), 1.0)
        recency = recency_factor(evidence.last_used_at, as_of, config)
        covered += weight * ratio * recency
        reasons.append(FitReason(
            "skill_match" if req.required else "nice_to_have_match",
            f"skill {req.skill_id} level {evidence.level}/{req.min_level}"
            + (f", last used {evidence.last_used_at.isoformat()}" if evidence.last_used_at else ""),
        ))

    if total_weight == 0.0:
        return 1.0, reasons
    return _clamp01(covered / total_weight), reasons


def load_on(allocations: Iterable[Allocation], day: date) -> Decimal:
    return sum((a.alloc_pct for a in allocations if a.covers(day)), Decimal(0))


def availability(candidate: CandidateProfile, request: RequestProfile) -> float:
    if request.end_date < request.start_date:
        return 0.0

    total_days = (request.end_date - request.start_date).days + 1
    capacity = Decimal(candidate.capacity_pct)
    target = Decimal(request.target_alloc_pct)
    available_days = 0
    day = request.start_date
    while day <= request.end_date:
        if capacity - load_on(candidate.allocations, day) >= target:
            available_days += 1
        day += timedelta(days=1)
    return available_days / total_days


def level_match(person_level: Optional[str], requested_level: Optional[str], step_penalty: float) -> float:
    requested = level_number(requested_level)
    if requested is None:
        return 1.0
    person = level_number(person_level)
    if person is None:
        logger.warning("Unreadable person level %r; level_match=0", person_level)
        return 0.0
    return _clamp01(1.0 - step_penalty * abs(person - requested))


def workload(candidate: CandidateProfile, day: date) -> float:
    capacity = Decimal(candidate.capacity_pct)
    if capacity <= 0:
        return 0.0
    return _clamp01(float(1 - load_on(candidate.allocations, day) / capacity))


def is_over_capacity(candidate: CandidateProfile, day: date) -> bool:
    return load_on(candidate.allocations, day) >= Decimal(candidate.capacity_pct)
