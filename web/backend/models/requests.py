#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from datetime import date
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class AssignmentCreateRequest(BaseModel):
    """Request to create an assignment. The rate is resolved and frozen at creation."""
    model_config = ConfigDict(extra="forbid")

    org_id: int = Field(gt=0)
    person_id: int = Field(gt=0)
    engagement_id: int = Field(gt=0)
    role_template_id: int = Field(gt=0)
    start_date: date
    end_date: date
    alloc_pct: Decimal = Field(default=Decimal(100), description="Allocation percent (0-100]")
    status: str = Field(default="active", description="active (default) or proposed")
    client_id: Optional[int] = None
    level: Optional[str] = None
    skills: List[int] = Field(default_factory=list)
    target_currency: Optional[str] = None
    rate_as_of: Optional[date] = Field(None, description="Pricing date; defaults to start_date")
    staffing_request_id: Optional[int] = None
    notes: Optional[str] = None


class AssignmentPatchRequest(BaseModel):
    """
    Partial update. Fields left out are untouched; an explicit null is a value.

    Pricing fields are accepted here only so the service can reject them
    with a clear error.
    """
    model_config = ConfigDict(extra="forbid")

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    alloc_pct: Optional[Decimal] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    person_id: Optional[int] = None
    role_template_id: Optional[int] = None
    engagement_id: Optional[int] = None
    client_id: Optional[int] = None
    level: Optional[str] = None
    skills: Optional[List[int]] = None
    target_currency: Optional[str] = None
    rate_as_of: Optional[date] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
