"""
Assignment Service - lifecycle of assignments and their frozen rate snapshot.

    proposed --activate--> active --update(status=completed)--> completed
    proposed | active --cancel--> cancelled

A rate is resolved exactly once, when the assignment is created, and is
stored on the row together with the denormalised bill rate. Activation keeps
that snapshot. Reads return the stored snapshot and never resolve again.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, ContextManager, Optional

from core.assignments.activity import ActivityLogger
from core.assignments.models import (
    ACTIVE,
    CANCELLED,
    COMPLETED,
    PROPOSED,
    STATUSES,
    TERMINAL_STATUSES,
    AssignmentCreate,
    AssignmentRecord,
    AssignmentUpdate,
    check_alloc,
    check_date,
    check_window,
)
from core.config_loader import AppConfig
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.rates.models import TargetingContext, normalize_currency, to_decimal
from core.rates.resolver import build_rate_resolver
from database.models import Assignment

logger = logging.getLogger(__name__)

ENTITY_TYPE = "assignment"

CANCELLABLE_STATUSES = (PROPOSED, ACTIVE)


class AssignmentService:
    """
    Args:
        uow: zero-argument callable returning a unit-of-work context manager
             that yields a StaffingRepository.
        config: application config (rate settings).
        activity: activity logger; defaults to one writing through ``uow``.
    """

    def __init__(
        self,
        uow: Callable[[], ContextManager[Any]],
        config: Optional[AppConfig] = None,
        activity: Optional[ActivityLogger] = None,
    ):
        self.uow = uow
        self.config = config or AppConfig()
        self.activity = activity or ActivityLogger(uow)

    def create(self, request: AssignmentCreate) -> AssignmentRecord:
        request.validate()
        target_currency = (
            normalize_currency(request.target_currency, "target_currency")
            if request.target_currency else None
        )

        with self.uow() as repo:
            person = repo.people.get_person(request.org_id, request.person_id)
            if person is None:
                raise NotFoundError(f"Person {request.person_id} not found in org {request.org_id}")
            if repo.staffing.get_role_template(request.org_id, request.role_template_id) is None:
                raise NotFoundError(f"Role template {request.role_template_id} not found in org {request.org_id}")

            row = Assignment(
                org_id=request.org_id,
                person_id=request.person_id,
                engagement_id=request.engagement_id,
                role_template_id=request.role_template_id,
                staffing_request_id=request.staffing_request_id,
                client_id=request.client_id,
                level=(request.level or person.level).strip().upper(),
                skills=sorted(request.skills),
                target_currency=target_currency,
                rate_as_of=request.rate_as_of,
                start_date=request.start_date,
                end_date=request.end_date,
                alloc_pct=to_decimal(request.alloc_pct),
                notes=request.notes,
                status=request.status,
            )
            self._freeze_snapshot(repo, row, person)

            repo.assignments.add(row)
            record = AssignmentRecord.from_row(row)

        logger.info("Created assignment %s (%s) for person %s", record.id, record.status, record.person_id)
        self.activity.record(record.org_id, ENTITY_TYPE, record.id, "created", {
            "status": record.status,
            "bill_rate": str(record.bill_rate) if record.bill_rate is not None else None,
            "currency": record.currency,
        })
        return record

    def activate(self, org_id: int, assignment_id: int) -> AssignmentRecord:
        with self.uow() as repo:
            row = self._get_row(repo, org_id, assignment_id)
            if row.status != PROPOSED:
                raise ConflictError(f"Assignment {assignment_id} is {row.status}; only proposed assignments can be activated")
            self._activate_row(repo, row)
            repo.flush()
            record = AssignmentRecord.from_row(row)

        logger.info("Activated assignment %s at %s %s", record.id, record.bill_rate, record.currency)
        self.activity.record(org_id, ENTITY_TYPE, record.id, "activated", {
            "bill_rate": str(record.bill_rate),
            "currency": record.currency,
        })
        return record

    def update(self, org_id: int, assignment_id: int, changes: AssignmentUpdate) -> AssignmentRecord:
        pricing = changes.pricing_changes()
        if pricing:
            names = ", ".join(sorted(pricing))
            raise ValidationError(
                f"Pricing fields cannot be changed on an existing assignment: {names}",
                field=sorted(pricing)[0],
            )
        provided = changes.provided()

        new_status = provided.get("status")
        if "status" in provided and new_status not in STATUSES:
            raise ValidationError(f"Unknown status {new_status!r}", field="status")
        if "alloc_pct" in provided:
            check_alloc(provided["alloc_pct"])
        for name in ("start_date", "end_date"):
            if provided.get(name) is not None:
                check_date(provided[name], name)

        with self.uow() as repo:
            row = self._get_row(repo, org_id, assignment_id)
            if row.status in TERMINAL_STATUSES:
                raise ConflictError(f"Assignment {assignment_id} is {row.status} and can no longer be updated")

            start = provided.get("start_date", row.start_date)
            end = provided.get("end_date", row.end_date)
            if start is None or end is None:
                raise ValidationError("start_date and end_date must not be null", field="start_date" if start is None else "end_date")
            check_window(start, end)

            row.start_date = start
            row.end_date = end
            if "alloc_pct" in provided:
                row.alloc_pct = to_decimal(provided["alloc_pct"])
            if "notes" in provided:
                row.notes = provided["notes"]

            if "status" in provided and new_status != row.status:
                self._transition(repo, row, new_status)

            repo.flush()
            record = AssignmentRecord.from_row(row)

        self.activity.record(org_id, ENTITY_TYPE, record.id, "updated", {
            "fields": sorted(provided),
            "status": record.status,
        })
        return record

    def cancel(self, org_id: int, assignment_id: int, reason: Optional[str] = None) -> AssignmentRecord:
        with self.uow() as repo:
            row = self._get_row(repo, org_id, assignment_id)
            if row.status not in CANCELLABLE_STATUSES:
                raise ConflictError(f"Assignment {assignment_id} is {row.status}; only proposed or active assignments can be cancelled")
            row.status = CANCELLED
            row.cancelled_at = datetime.now(timezone.utc)
            repo.flush()
            record = AssignmentRecord.from_row(row)

        logger.info("Cancelled assignment %s", record.id)
        self.activity.record(org_id, ENTITY_TYPE, record.id, "cancelled", {"reason": reason})
        return record

    def get(self, org_id: int, assignment_id: int) -> AssignmentRecord:
        with self.uow() as repo:
            return AssignmentRecord.from_row(self._get_row(repo, org_id, assignment_id))

    def _get_row(self, repo, org_id: int, assignment_id: int) -> Assignment:
        row = repo.assignments.get(assignment_id, org_id=org_id)
        if row is None:
            raise NotFoundError(f"Assignment {assignment_id} not found in org {org_id}")
        return row

    def _transition(self, repo, row: Assignment, new_status: str) -> None:
        if row.status == PROPOSED and new_status == ACTIVE:
            self._activate_row(repo, row)
        elif row.status == ACTIVE and new_status == COMPLETED:
            row.status = COMPLETED
        else:
            raise ConflictError(f"Assignment {row.id} cannot move from {row.status} to {new_status}")

    def _activate_row(self, repo, row: Assignment) -> None:
        if row.rate_snapshot is not None:
            row.status = ACTIVE
            return
        person = repo.people.get_person(row.org_id, row.person_id)
        if person is None:
            raise NotFoundError(f"Person {row.person_id} not found in org {row.org_id}")
        self._freeze_snapshot(repo, row, person)
        row.status = ACTIVE

    def _freeze_snapshot(self, repo, row: Assignment, person) -> None:
        """Resolve the rate once and write it onto the row."""
        as_of = row.rate_as_of or row.start_date
        context = TargetingContext(
            org_id=row.org_id,
            as_of_date=as_of,
            role_template_id=row.role_template_id,
            level=row.level or person.level,
            skills=frozenset(row.skills or ()),
            engagement_id=row.engagement_id,
            client_id=row.client_id,
            person_id=row.person_id,
            target_currency=row.target_currency,
        )
        resolution = build_rate_resolver(repo, self.config.rates).resolve(context)

        row.rate_as_of = as_of
        row.rate_snapshot = resolution.to_dict()
        row.bill_rate = resolution.final_amount
        row.currency = resolution.final_currency
        row.cost_rate_snapshot = person.cost_rate
        row.cost_currency = person.cost_currency
        row.snapshot_taken_at = datetime.now(timezone.utc)
