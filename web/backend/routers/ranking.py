#!/usr/bin/env python3
"""
Ranking endpoints - candidates for an open staffing request.
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.exceptions import ValidationError
from core.fit.service import FitScoreCalculator
from ..config import get_config
from ..dependencies import get_fit_calculator
from ..models.responses import CandidatesResponse

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/staffing-requests", tags=["ranking"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": str(exc)}
    )


def _ranking_limit() -> str:
    return get_config().web.ranking_rate_limit


@router.get("/{staffing_request_id}/candidates", response_model=CandidatesResponse)
@limiter.limit(_ranking_limit)
def rank_candidates(
    request: Request,
    staffing_request_id: int,
    org_id: int = Query(..., gt=0),
    limit: Optional[int] = Query(default=None, description="Maximum candidates to return"),
    include_rate_preview: bool = Query(default=False, description="Resolve a modeled rate per candidate"),
    person_ids: Optional[List[int]] = Query(default=None, description="Only rank these people"),
    calculator: FitScoreCalculator = Depends(get_fit_calculator)
):
    """
    Rank eligible people for a staffing request.

    Sorted by score (highest first), ties by person id. Rate previews are
    informational; a failed preview leaves modeled_rate null and sets
    rate_error.
    """
    max_limit = get_config().ranking.max_limit
    if limit is not None and limit > max_limit:
        raise ValidationError(f"limit must be at most {max_limit}", field="limit")

    candidates = calculator.calculate_for_request(
        org_id,
        staffing_request_id,
        limit=limit,
        include_rate_preview=include_rate_preview,
        person_ids=person_ids,
    )
    return CandidatesResponse(
        success=True,
        staffing_request_id=staffing_request_id,
        count=len(candidates),
        candidates=[c.to_dict() for c in candidates],
    )
