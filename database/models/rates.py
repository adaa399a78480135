from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Date, Numeric, UniqueConstraint, Index, CheckConstraint
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class RateOverride(Base):
    """
    A rate card at one precedence tier.

    tier is one of org_default|role_template|level|skill|client|engagement|person
    and scope_key is the value of the matching targeting field rendered as
    text (org id, role template id, level code, skill id, ...).
    effective_to is inclusive; null means open-ended.
    """
    __tablename__ = 'rate_override'

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, ForeignKey('org.id', ondelete='CASCADE'), nullable=False)
    tier = Column(Text, nullable=False)
    scope_key = Column(Text, nullable=False)
    currency = Column(Text, nullable=False, default='USD')
    base_amount = Column(Numeric(14, 4), nullable=False)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    premiums = relationship(
        "RatePremium",
        back_populates="override",
        cascade="all, delete-orphan",
        order_by=lambda: [RatePremium.position, RatePremium.id],
    )

    __table_args__ = (
        Index('ix_rate_override_lookup', 'org_id', 'tier', 'scope_key'),
        CheckConstraint('base_amount >= 0', name='chk_rate_override_amount'),
    )


class RatePremium(Base):
    """
    Premium attached to a rate override.

    kind 'absolute' adds amount (in the owning override's currency);
    kind 'percentage' compounds amount percent over the running subtotal.
    When applies_to_tier is set the premium only applies if that tier
    supplied the base rate.
    """
    __tablename__ = 'rate_premium'

    id = Column(Integer, primary_key=True, autoincrement=True)
    override_id = Column(Integer, ForeignKey('rate_override.id', ondelete='CASCADE'), nullable=False)
    kind = Column(Text, nullable=False)
    amount = Column(Numeric(14, 4), nullable=False)
    applies_to_tier = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    label = Column(Text, nullable=True)

    override = relationship("RateOverride", back_populates="premiums")

    __table_args__ = (
        CheckConstraint("kind IN ('absolute', 'percentage')", name='chk_rate_premium_kind'),
        Index('ix_rate_premium_override', 'override_id'),
    )


class FxRate(Base):
    """Daily FX quote: 1 base_currency = rate quote_currency."""
    __tablename__ = 'fx_rate'

    id = Column(Integer, primary_key=True, autoincrement=True)
    base_currency = Column(Text, nullable=False)
    quote_currency = Column(Text, nullable=False)
    rate = Column(Numeric(20, 10), nullable=False)
    effective_date = Column(Date, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('base_currency', 'quote_currency', 'effective_date', name='uq_fx_rate_pair_date'),
        CheckConstraint('rate > 0', name='chk_fx_rate_positive'),
    )
