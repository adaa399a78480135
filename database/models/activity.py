from sqlalchemy import Column, Integer, Text, TIMESTAMP, JSON, Index

from .base import Base, utcnow


class ActivityLog(Base):
    """Append-only audit trail of lifecycle events. Rows are never updated."""
    __tablename__ = 'activity_log'

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, nullable=False)
    entity_type = Column(Text, nullable=False)
    entity_id = Column(Integer, nullable=False)
    action = Column(Text, nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('ix_activity_log_entity', 'entity_type', 'entity_id'),
        Index('ix_activity_log_org_created', 'org_id', 'created_at'),
    )
