from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Date, Numeric, JSON, Index, event, inspect

from core.exceptions import SnapshotImmutableError

from .base import Base, utcnow


# Columns that make up the frozen rate snapshot. Once rate_snapshot is set
# none of these may change again.
SNAPSHOT_COLUMNS = (
    'rate_snapshot',
    'bill_rate',
    'currency',
    'cost_rate_snapshot',
    'cost_currency',
    'snapshot_taken_at',
)


class Assignment(Base):
    """
    A person placed on an engagement in a role.

    Lifecycle: proposed -> active -> cancelled|completed.
    The pricing context columns (role_template_id, level, skills, client_id,
    target_currency) are what the rate was resolved against; rate_snapshot
    is the full itemized resolution frozen when the assignment is created.
    """
    __tablename__ = 'assignment'

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, ForeignKey('org.id', ondelete='CASCADE'), nullable=False)
    person_id = Column(Integer, ForeignKey('person.id'), nullable=False)
    engagement_id = Column(Integer, nullable=False)
    role_template_id = Column(Integer, ForeignKey('role_template.id'), nullable=False)
    staffing_request_id = Column(Integer, ForeignKey('staffing_request.id'), nullable=True)

    # Pricing context
    client_id = Column(Integer, nullable=True)
    level = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    target_currency = Column(Text, nullable=True)
    rate_as_of = Column(Date, nullable=True)

    # Non-pricing fields
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    alloc_pct = Column(Numeric(5, 2), nullable=False, default=100)
    notes = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default='proposed')  # proposed|active|cancelled|completed

    # Snapshot
    rate_snapshot = Column(JSON, nullable=True)
    bill_rate = Column(Numeric(14, 4), nullable=True)
    currency = Column(Text, nullable=True)
    cost_rate_snapshot = Column(Numeric(12, 4), nullable=True)
    cost_currency = Column(Text, nullable=True)
    snapshot_taken_at = Column(TIMESTAMP(timezone=True), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    cancelled_at = Column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        Index('ix_assignment_org_person', 'org_id', 'person_id'),
        Index('ix_assignment_dates', 'start_date', 'end_date'),
        Index('ix_assignment_status', 'status'),
    )


@event.listens_for(Assignment, 'before_update')
def _guard_rate_snapshot(mapper, connection, target):
    """Reject any flush that rewrites an already frozen snapshot."""
    state = inspect(target)
    snapshot_history = state.attrs.rate_snapshot.history
    was_frozen = bool(snapshot_history.deleted) and snapshot_history.deleted[0] is not None
    if not was_frozen and not snapshot_history.has_changes():
        was_frozen = target.rate_snapshot is not None
    if not was_frozen:
        return

    changed = [name for name in SNAPSHOT_COLUMNS if state.attrs[name].history.has_changes()]
    if changed:
        raise SnapshotImmutableError(
            f"Assignment {target.id} rate snapshot is immutable (attempted change: {', '.join(changed)})"
        )
