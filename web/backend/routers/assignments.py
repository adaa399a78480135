#!/usr/bin/env python3
"""
Assignment endpoints - create, read, update and cancel assignments.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from core.assignments.models import AssignmentCreate, AssignmentUpdate
from core.assignments.service import AssignmentService
from ..dependencies import get_assignment_service
from ..models.requests import AssignmentCreateRequest, AssignmentPatchRequest, CancelRequest
from ..models.responses import AssignmentResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


@router.post("", response_model=AssignmentResponse, status_code=201)
def create_assignment(
    body: AssignmentCreateRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    """
    Create an assignment.

    The rate is resolved once and frozen on the assignment, whatever its
    status. Fails with 422 when no rate can be resolved.
    """
    data = body.model_dump()
    data["skills"] = frozenset(data["skills"])
    record = service.create(AssignmentCreate(**data))
    return AssignmentResponse(success=True, assignment=record.to_dict())


@router.get("/{assignment_id}", response_model=AssignmentResponse)
def get_assignment(
    assignment_id: int,
    org_id: int = Query(..., gt=0),
    service: AssignmentService = Depends(get_assignment_service)
):
    """Read an assignment with its stored rate snapshot."""
    record = service.get(org_id, assignment_id)
    return AssignmentResponse(success=True, assignment=record.to_dict())


@router.patch("/{assignment_id}", response_model=AssignmentResponse)
def update_assignment(
    assignment_id: int,
    body: AssignmentPatchRequest,
    org_id: int = Query(..., gt=0),
    service: AssignmentService = Depends(get_assignment_service)
):
    """
    Update non-pricing fields (dates, allocation, notes, status).

    Pricing fields are rejected with 400; terminal assignments with 409.
    """
    changes = AssignmentUpdate.from_mapping(body.model_dump(exclude_unset=True))
    record = service.update(org_id, assignment_id, changes)
    return AssignmentResponse(success=True, assignment=record.to_dict())


@router.post("/{assignment_id}/activate", response_model=AssignmentResponse)
def activate_assignment(
    assignment_id: int,
    org_id: int = Query(..., gt=0),
    service: AssignmentService = Depends(get_assignment_service)
):
    """Activate a proposed assignment. Its rate was frozen at creation."""
    record = service.activate(org_id, assignment_id)
    return AssignmentResponse(success=True, assignment=record.to_dict())


@router.post("/{assignment_id}/cancel", response_model=AssignmentResponse)
def cancel_assignment(
    assignment_id: int,
    org_id: int = Query(..., gt=0),
    body: Optional[CancelRequest] = None,
    service: AssignmentService = Depends(get_assignment_service)
):
    """Cancel a proposed or active assignment. The row and its snapshot are kept."""
    record = service.cancel(org_id, assignment_id, reason=body.reason if body else None)
    return AssignmentResponse(success=True, assignment=record.to_dict())
