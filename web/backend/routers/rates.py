#!/usr/bin/env python3
"""
Rate endpoints - resolve an effective billable rate.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from core.rates.models import TargetingContext
from core.rates.service import RateService
from ..dependencies import get_rate_service
from ..models.responses import RateResolutionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rates", tags=["rates"])


@router.get("/resolve", response_model=RateResolutionResponse)
def resolve_rate(
    org_id: Optional[str] = Query(default=None, description="Org id (required)"),
    role_template_id: Optional[str] = Query(default=None),
    level: Optional[str] = Query(default=None, description="Level code, e.g. L3"),
    skills: Optional[str] = Query(default=None, description="Comma-separated skill ids"),
    engagement_id: Optional[str] = Query(default=None),
    client_id: Optional[str] = Query(default=None),
    person_id: Optional[str] = Query(default=None),
    target_currency: Optional[str] = Query(default=None, description="ISO 4217 code"),
    as_of: Optional[str] = Query(default=None, description="ISO date; defaults to today"),
    service: RateService = Depends(get_rate_service)
):
    """
    Resolve the rate for a targeting context.

    Returns the itemized resolution: base tier, premiums, scarcity multiplier,
    FX conversion and the precedence trace.
    """
    context = TargetingContext.from_query_params({
        "org_id": org_id,
        "role_template_id": role_template_id,
        "level": level,
        "skills": skills,
        "engagement_id": engagement_id,
        "client_id": client_id,
        "person_id": person_id,
        "target_currency": target_currency,
        "as_of": as_of,
    })
    resolution = service.resolve(context)
    return RateResolutionResponse(success=True, resolution=resolution.to_dict())
