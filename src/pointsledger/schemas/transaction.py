"""Pydantic schemas for ledger writes and listings."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import TransactionType
from .user import UserSummary


class PointsAward(BaseModel):
    """Request body for awarding points."""

    actor_id: str
    student_id: str
    points: int = Field(..., gt=0, description="Points to award.")
    reason: Optional[str] = Field(None, max_length=280)


class PointsRedeem(BaseModel):
    """Request body for redeeming points."""

    actor_id: str
    student_id: str
    points: int = Field(..., gt=0, description="Points to redeem.")
    reason: Optional[str] = Field(None, max_length=280)


class ExperienceCreate(BaseModel):
    """Request body for recording an explicit experience delta."""

    actor_id: str
    student_id: str
    amount: int = Field(..., description="Signed experience delta; must not be zero.")


class PointsTransactionRead(BaseModel):
    """Points ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    points: int
    type: TransactionType
    reason: Optional[str] = None
    student: UserSummary
    tutor: UserSummary
    period_id: str
    rolled_back: bool
    created_at: datetime


class ExperienceTransactionRead(BaseModel):
    """Experience ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    amount: int
    student: UserSummary
    tutor: UserSummary
    period_id: str
    rolled_back: bool
    created_at: datetime


class RedemptionReceipt(BaseModel):
    """Response returned after redeeming points."""

    transaction: PointsTransactionRead
    available_balance: int = Field(..., ge=0, description="Points left in the active period.")
