#!/usr/bin/env python3
"""
Response models for API endpoints.

Money values inside the payloads are decimal strings.
"""

from pydantic import BaseModel, ConfigDict
from typing import List, Dict, Any


class RateResolutionResponse(BaseModel):
    """Itemized rate resolution."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "resolution": {
                    "final_currency": "USD",
                    "final_amount": "132.00",
                    "base_currency": "USD",
                    "base_amount": "100.0000",
                    "base_tier": "role_template",
                    "base_override_id": 7,
                    "absolute_premiums": [],
                    "percentage_premiums": [],
                    "scarcity_multiplier": "1",
                    "scarcity_version": "scarcity-v1",
                    "subtotal": "132.000000",
                    "fx_rate": None,
                    "fx_date": None,
                    "precedence_applied": ["role_template"],
                    "as_of_date": "2026-03-01"
                }
            }
        }
    )

    success: bool
    resolution: Dict[str, Any]


class CandidatesResponse(BaseModel):
    """Ranked candidates for a staffing request."""
    success: bool
    staffing_request_id: int
    count: int
    candidates: List[Dict[str, Any]]


class AssignmentResponse(BaseModel):
    success: bool
    assignment: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str
    service: str
