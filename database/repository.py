import logging

from sqlalchemy.orm import Session

from database.repositories import (
    ActivityLogRepository,
    AssignmentRepository,
    FxRateRepository,
    PersonRepository,
    RateOverrideRepository,
    StaffingRequestRepository,
)

logger = logging.getLogger(__name__)


class StaffingRepository:
    """
    All repositories bound to one Session.

    The sub-repositories share the session, so anything done through them
    belongs to the same transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.rates = RateOverrideRepository(db)
        self.fx = FxRateRepository(db)
        self.people = PersonRepository(db)
        self.staffing = StaffingRequestRepository(db)
        self.assignments = AssignmentRepository(db)
        self.activity = ActivityLogRepository(db)

    def flush(self):
        self.db.flush()
