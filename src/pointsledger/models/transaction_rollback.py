"""Audit record of transaction rollbacks."""

import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SAEnum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class LedgerKind(str, enum.Enum):
    """Which ledger a rolled back transaction lives in."""

    POINTS = "POINTS"
    EXPERIENCE = "EXPERIENCE"


class TransactionRollback(Base):
    """One row per rolled back transaction."""

    __tablename__ = "transaction_rollbacks"
    __table_args__ = (
        UniqueConstraint("transaction_id", "transaction_type", name="transaction_rollbacks_unique"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    transaction_id = Column(String(36), nullable=False)
    transaction_type = Column(SAEnum(LedgerKind, name="ledger_kind"), nullable=False)
    student_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    admin_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    reason = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    student = relationship("User", foreign_keys=[student_id])
    admin = relationship("User", foreign_keys=[admin_id])
