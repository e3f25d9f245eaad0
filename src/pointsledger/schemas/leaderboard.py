"""Leaderboard and balance response schemas."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class LeaderboardStudent(BaseModel):
    """Ranked leaderboard entry."""

    rank: int = Field(..., ge=1)
    student_id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    points: int = Field(..., ge=0)
    experience: int


class LeaderboardRead(BaseModel):
    period_id: Optional[str] = None
    entries: List[LeaderboardStudent]
    degraded: bool = False


class BalanceQuery(BaseModel):
    """Request body for batched balance lookups."""

    user_ids: List[str] = Field(..., max_length=500)
    period_id: Optional[str] = None


class BalanceRead(BaseModel):
    """Per-user balances for one period."""

    points: Dict[str, int]
    experience: Dict[str, int]
    degraded: bool = False
