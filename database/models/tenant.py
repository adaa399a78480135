from sqlalchemy import Column, Integer, Text, TIMESTAMP

from .base import Base, utcnow


class Org(Base):
    """Tenant boundary. Every rate card, person and request is scoped to one org."""
    __tablename__ = 'org'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
