"""Append-only points ledger."""

import enum
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class TransactionType(str, enum.Enum):
    """Direction of a points movement."""

    AWARD = "AWARD"
    REDEEM = "REDEEM"


class PointsTransaction(Base):
    """Immutable points entry; rollback flips ``rolled_back`` instead of deleting."""

    __tablename__ = "points_transactions"
    __table_args__ = (
        CheckConstraint("points > 0", name="points_transactions_points_positive"),
        Index("points_transactions_student_period", "student_id", "period_id"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    points = Column(Integer, nullable=False)
    type = Column(SAEnum(TransactionType, name="transaction_type"), nullable=False)
    reason = Column(String)
    student_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    tutor_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    period_id = Column(String(36), ForeignKey("periods.id", ondelete="RESTRICT"), nullable=False)
    rolled_back = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    student = relationship("User", foreign_keys=[student_id], back_populates="points_received")
    tutor = relationship("User", foreign_keys=[tutor_id])
    period = relationship("Period", back_populates="points_transactions")
