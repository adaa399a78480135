from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Boolean, Date, Numeric, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Skill(Base):
    __tablename__ = 'skill'

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, ForeignKey('org.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('org_id', 'name', name='uq_skill_org_name'),
    )


class Person(Base):
    """
    A staffable person.

    Levels are stored as 'L1'..'L5'. capacity_pct is the share of a full-time
    week the person can be allocated (100 = full time).
    """
    __tablename__ = 'person'

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, ForeignKey('org.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    level = Column(Text, nullable=False)
    base_role_template_id = Column(Integer, ForeignKey('role_template.id'), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    capacity_pct = Column(Numeric(5, 2), nullable=False, default=100)
    cost_rate = Column(Numeric(12, 4), nullable=True)
    cost_currency = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    skills = relationship("PersonSkill", back_populates="person", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_person_org_active', 'org_id', 'is_active'),
    )


class PersonSkill(Base):
    __tablename__ = 'person_skill'

    person_id = Column(Integer, ForeignKey('person.id', ondelete='CASCADE'), primary_key=True)
    skill_id = Column(Integer, ForeignKey('skill.id', ondelete='CASCADE'), primary_key=True)
    level = Column(Integer, nullable=False)  # 1..5
    last_used_at = Column(Date, nullable=True)

    person = relationship("Person", back_populates="skills")

    __table_args__ = (
        Index('ix_person_skill_skill', 'skill_id'),
    )
