#!/usr/bin/env python3
"""
Fit Score Calculator - ranks people against an open staffing request.

Flow:
1. Load the request, its role template, the org's active people, their
   skills and their overlapping assignments in one unit of work.
2. Score eligible candidates lazily (people already at or past capacity on
   the start date are never scored) and keep the top ``limit``.
3. Optionally resolve one rate preview per candidate over a bounded thread
   pool, each in its own unit of work. A failed preview never fails the
   ranking.

Pricing plays no part in the score.
"""

import heapq
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, ContextManager, Dict, Iterable, Iterator, List, Optional, Tuple

from core.config_loader import AppConfig
from core.exceptions import NotFoundError, ServiceException, ValidationError
from core.fit import factors as fit_factors
from core.fit.fit_score import calculate_fit_score, factor_reasons
from core.fit.models import (
    Allocation,
    CandidateFit,
    CandidateProfile,
    RequestProfile,
    SkillEvidence,
    SkillRequirement,
)
from core.rates.models import TargetingContext
from core.rates.resolver import build_rate_resolver

logger = logging.getLogger(__name__)


def _requirements_for(request, template) -> List[SkillRequirement]:
    """Role template requirements, then must-have and nice-to-have skill ids not already listed."""
    requirements: Dict[int, SkillRequirement] = {}
    for item in (template.requirements or []) if template is not None else []:
        skill_id = int(item["skill_id"])
        requirements[skill_id] = SkillRequirement(
            skill_id=skill_id,
            min_level=int(item.get("min_level", 1)),
            weight=float(item.get("weight", 1.0)),
            required=True,
        )
    for skill_id in request.must_have_skills or []:
        requirements.setdefault(int(skill_id), SkillRequirement(skill_id=int(skill_id)))
    for skill_id in request.nice_to_have_skills or []:
        requirements.setdefault(int(skill_id), SkillRequirement(skill_id=int(skill_id), required=False))
    return [requirements[k] for k in sorted(requirements)]


def _request_profile(request, template) -> RequestProfile:
    return RequestProfile(
        id=request.id,
        org_id=request.org_id,
        role_template_id=request.role_template_id,
        start_date=request.start_date,
        end_date=request.end_date,
        target_alloc_pct=Decimal(request.target_alloc_pct),
        level=request.level or (template.level if template is not None else None),
        engagement_id=request.engagement_id,
        client_id=request.client_id,
        requirements=tuple(_requirements_for(request, template)),
    )


def _prefetch_candidates(
    repo,
    org_id: int,
    request: RequestProfile,
    person_ids: Optional[Tuple[int, ...]] = None,
) -> List[CandidateProfile]:
    """Batch-load people, skills and allocations; no per-person queries."""
    people = list(repo.people.iter_active_people(org_id, person_ids=person_ids))
    ids = [p.id for p in people]
    skills = repo.people.get_skills_for_people(ids)

    allocations: Dict[int, List[Allocation]] = {}
    for a in repo.assignments.get_overlapping(ids, request.start_date, request.end_date):
        allocations.setdefault(a.person_id, []).append(
            Allocation(a.start_date, a.end_date, Decimal(a.alloc_pct))
        )

    return [
        CandidateProfile(
            person_id=p.id,
            name=p.name,
            level=p.level,
            capacity_pct=Decimal(p.capacity_pct if p.capacity_pct is not None else 100),
            skills={
                s.skill_id: SkillEvidence(s.skill_id, s.level, s.last_used_at)
                for s in skills.get(p.id, [])
            },
            allocations=tuple(allocations.get(p.id, [])),
        )
        for p in people
    ]


def _person_filter(person_ids: Optional[Iterable[int]]) -> Optional[Tuple[int, ...]]:
    if person_ids is None:
        return None
    ids = tuple(person_ids)
    if any(isinstance(i, bool) or not isinstance(i, int) or i <= 0 for i in ids):
        raise ValidationError(f"person_ids must be positive integers, got {list(ids)!r}", field="person_ids")
    return ids


class FitScoreCalculator:
    """
    Ranking entry point.

    Args:
        uow: zero-argument callable returning a unit-of-work context manager
             that yields a StaffingRepository (database.uow.staffing_uow).
        config: application config; fit weights, ranking limits and rate
                settings are read from it.
    """

    def __init__(self, uow: Callable[[], ContextManager[Any]], config: Optional[AppConfig] = None):
        self.uow = uow
        self.config = config or AppConfig()

    def calculate_for_request(
        self,
        org_id: int,
        staffing_request_id: int,
        limit: Optional[int] = None,
        include_rate_preview: bool = False,
        person_ids: Optional[Iterable[int]] = None,
    ) -> List[CandidateFit]:
        """
        Rank eligible people for a staffing request, best first.

        person_ids restricts the pool to those people; ids that are inactive
        or belong to another org are ignored.
        """
        if limit is None:
            limit = self.config.ranking.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValidationError(f"limit must be a positive integer, got {limit!r}", field="limit")
        pool = _person_filter(person_ids)

        with self.uow() as repo:
            request = repo.staffing.get_request(org_id, staffing_request_id)
            if request is None:
                raise NotFoundError(f"Staffing request {staffing_request_id} not found in org {org_id}")
            template = repo.staffing.get_role_template(org_id, request.role_template_id)
            profile = _request_profile(request, template)
            candidates = _prefetch_candidates(repo, org_id, profile, pool)

        ranked = heapq.nsmallest(limit, self._score_candidates(candidates, profile), key=lambda c: c.sort_key)
        logger.info(
            "Ranked %d/%d candidates for staffing request %s (org %s)",
            len(ranked), len(candidates), staffing_request_id, org_id,
        )

        if include_rate_preview and ranked:
            ranked = self._attach_rate_previews(ranked, profile)
        return ranked

    def _score_candidates(self, candidates: Iterable[CandidateProfile], request: RequestProfile) -> Iterator[CandidateFit]:
        for candidate in candidates:
            if fit_factors.is_over_capacity(candidate, request.start_date):
                logger.debug("Person %s is at capacity on %s; skipped", candidate.person_id, request.start_date)
                continue
            yield self.score_candidate(candidate, request)

    def score_candidate(self, candidate: CandidateProfile, request: RequestProfile) -> CandidateFit:
        fit_config = self.config.fit
        overlap, skill_reasons = fit_factors.skill_overlap(
            request.requirements, candidate.skills, request.start_date, fit_config
        )
        factor_values = {
            "skill_overlap": overlap,
            "availability": fit_factors.availability(candidate, request),
            "level_match": fit_factors.level_match(candidate.level, request.level, fit_config.level_step_penalty),
            "workload": fit_factors.workload(candidate, request.start_date),
        }
        score, components = calculate_fit_score(factor_values, fit_config.weights)

        logger.debug("Person %s scored %.2f for request %s: %s", candidate.person_id, score, request.id, components)

        return CandidateFit(
            person_id=candidate.person_id,
            name=candidate.name,
            score=score,
            factors={name: components[name]["value"] for name in components},
            weights_version=fit_config.weights_version,
            reasons=tuple(factor_reasons(components)) + tuple(skill_reasons),
        )

    def _attach_rate_previews(self, ranked: List[CandidateFit], request: RequestProfile) -> List[CandidateFit]:
        workers = max(1, min(self.config.ranking.preview_workers, len(ranked)))
        if workers == 1:
            return [self._preview(fit, request) for fit in ranked]
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rate-preview") as pool:
            return list(pool.map(lambda fit: self._preview(fit, request), ranked))

    def _preview(self, fit: CandidateFit, request: RequestProfile) -> CandidateFit:
        try:
            with self.uow() as repo:
                person = repo.people.get_person(request.org_id, fit.person_id)
                context = TargetingContext(
                    org_id=request.org_id,
                    as_of_date=request.start_date,
                    role_template_id=request.role_template_id,
                    level=person.level if person is not None else request.level,
                    skills=frozenset(request.required_skill_ids),
                    engagement_id=request.engagement_id,
                    client_id=request.client_id,
                    person_id=fit.person_id,
                )
                resolution = build_rate_resolver(repo, self.config.rates).resolve(context)
            return replace(fit, modeled_rate=resolution)
        except ServiceException as e:
            logger.info("Rate preview failed for person %s: %s", fit.person_id, e)
            return replace(fit, rate_error=str(e))
        except Exception as e:
            logger.warning("Rate preview crashed for person %s: %s", fit.person_id, e, exc_info=True)
            return replace(fit, rate_error=f"internal error: {type(e).__name__}")
