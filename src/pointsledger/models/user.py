"""User model consumed by the ledger."""

import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum as SAEnum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class UserRole(str, enum.Enum):
    """Roles recognised by the back office."""

    ADMIN = "ADMIN"
    BOARD_MEMBER = "BOARD_MEMBER"
    TUTOR = "TUTOR"
    ASISTAN = "ASISTAN"
    STUDENT = "STUDENT"
    ATHLETE = "ATHLETE"


class User(Base):
    """Subject or actor of ledger transactions.

    ``points`` and ``experience`` are a denormalised mirror kept up to date by
    write paths. Balances for a period are always derived from the
    transaction tables instead.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String, nullable=False, unique=True)
    first_name = Column(String)
    last_name = Column(String)
    role = Column(SAEnum(UserRole, name="user_role"), nullable=False, default=UserRole.STUDENT)
    avatar_url = Column(String)
    tutor_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    is_active = Column(Boolean, nullable=False, default=True)
    points = Column(Integer, nullable=False, default=0)
    experience = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    tutor = relationship("User", remote_side=[id], back_populates="students")
    students = relationship("User", back_populates="tutor")
    points_received = relationship(
        "PointsTransaction",
        foreign_keys="PointsTransaction.student_id",
        back_populates="student",
    )
    experience_received = relationship(
        "ExperienceTransaction",
        foreign_keys="ExperienceTransaction.student_id",
        back_populates="student",
    )
