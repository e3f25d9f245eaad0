"""Pydantic schemas for transaction rollbacks."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models import LedgerKind
from .user import UserSummary


class RollbackCreate(BaseModel):
    """Request body for rolling back a transaction."""

    admin_id: str
    transaction_id: str
    transaction_type: LedgerKind
    reason: str = Field(..., min_length=1, max_length=280)


class RollbackRead(BaseModel):
    """Rollback audit entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    transaction_id: str
    transaction_type: LedgerKind
    student: UserSummary
    admin: UserSummary
    reason: str
    created_at: datetime
