import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select

from database.models import Assignment
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

# Statuses that hold a person's capacity.
LOADING_STATUSES = ('active',)


class AssignmentRepository(BaseRepository):

    def get(self, assignment_id: int, org_id: Optional[int] = None) -> Optional[Assignment]:
        stmt = select(Assignment).where(Assignment.id == assignment_id)
        if org_id is not None:
            stmt = stmt.where(Assignment.org_id == org_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def add(self, assignment: Assignment) -> Assignment:
        self.db.add(assignment)
        self.db.flush()
        return assignment

    def get_overlapping(self, person_ids: Iterable[int], start: date, end: date) -> List[Assignment]:
        """Capacity-holding assignments of the given people that overlap [start, end]."""
        ids = list(person_ids)
        if not ids:
            return []
        stmt = (
            select(Assignment)
            .where(
                Assignment.person_id.in_(ids),
                Assignment.status.in_(LOADING_STATUSES),
                Assignment.start_date <= end,
                Assignment.end_date >= start,
            )
            .order_by(Assignment.id)
        )
        return list(self.db.execute(stmt).scalars().all())
