"""Pydantic schemas for period administration."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import PeriodStatus


class PeriodCreate(BaseModel):
    """Request body for creating a period."""

    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    total_weeks: Optional[int] = Field(None, ge=0)


class PeriodUpdate(BaseModel):
    """Partial update of a period's descriptive fields."""

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_weeks: Optional[int] = Field(None, ge=0)


class PeriodActivate(BaseModel):
    """Options for activating a period."""

    reset_counters: bool = Field(True, description="Zero denormalised user counters on activation.")


class PeriodRead(BaseModel):
    """Period response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    status: PeriodStatus
    total_weeks: int
    created_at: datetime


class ActivePeriodRead(PeriodRead):
    """Active period with the current week number."""

    current_week: int
