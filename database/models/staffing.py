from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Date, Numeric, JSON, Index

from .base import Base, utcnow


class RoleTemplate(Base):
    """
    Role definition shared by staffing requests and assignments.

    requirements: [{"skill_id": int, "min_level": int, "weight": float}]
    """
    __tablename__ = 'role_template'

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, ForeignKey('org.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    level = Column(Text, nullable=False)
    requirements = Column(JSON, nullable=False, default=list)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)


class StaffingRequest(Base):
    """An open seat to be filled on an engagement."""
    __tablename__ = 'staffing_request'

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, ForeignKey('org.id', ondelete='CASCADE'), nullable=False)
    role_template_id = Column(Integer, ForeignKey('role_template.id'), nullable=False)
    engagement_id = Column(Integer, nullable=True)
    client_id = Column(Integer, nullable=True)

    # Requested level; falls back to the role template's level when null
    level = Column(Text, nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    target_alloc_pct = Column(Numeric(5, 2), nullable=False, default=100)

    must_have_skills = Column(JSON, nullable=False, default=list)  # [skill_id]
    nice_to_have_skills = Column(JSON, nullable=False, default=list)  # [skill_id]

    status = Column(Text, nullable=False, default='open')  # open|on_hold|filled|cancelled
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('ix_staffing_request_org_status', 'org_id', 'status'),
        Index('ix_staffing_request_role', 'role_template_id'),
    )
