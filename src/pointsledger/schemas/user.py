"""Pydantic schemas describing users."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Lightweight projection of user details."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserStatsRead(BaseModel):
    """User identity with points and experience calculated for a period."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    avatar_url: Optional[str] = None
    tutor: Optional[UserSummary] = None
    period_id: Optional[str] = None
    points: int
    experience: int
    degraded: bool = False
