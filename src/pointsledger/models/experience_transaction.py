"""Append-only experience ledger."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class ExperienceTransaction(Base):
    """Signed experience delta for a student within a period."""

    __tablename__ = "experience_transactions"
    __table_args__ = (Index("experience_transactions_student_period", "student_id", "period_id"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    amount = Column(Integer, nullable=False)
    student_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    tutor_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    period_id = Column(String(36), ForeignKey("periods.id", ondelete="RESTRICT"), nullable=False)
    rolled_back = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    student = relationship("User", foreign_keys=[student_id], back_populates="experience_received")
    tutor = relationship("User", foreign_keys=[tutor_id])
    period = relationship("Period", back_populates="experience_transactions")
