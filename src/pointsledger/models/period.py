"""Period domain model scoping all ledger accounting."""

import enum
import uuid

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Enum as SAEnum, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class PeriodStatus(str, enum.Enum):
    """Lifecycle states of a period."""

    PLANNED = "PLANNED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class Period(Base):
    """Administrative time window, e.g. a semester."""

    __tablename__ = "periods"
    __table_args__ = (
        CheckConstraint("end_date IS NULL OR end_date > start_date", name="periods_end_after_start"),
        CheckConstraint("total_weeks >= 0", name="periods_total_weeks_positive"),
        Index(
            "periods_single_active",
            "status",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, unique=True)
    description = Column(Text)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    status = Column(SAEnum(PeriodStatus, name="period_status"), nullable=False, default=PeriodStatus.PLANNED)
    total_weeks = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    points_transactions = relationship("PointsTransaction", back_populates="period")
    experience_transactions = relationship("ExperienceTransaction", back_populates="period")
