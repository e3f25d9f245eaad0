"""Leaderboard endpoint."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...core.config import get_settings
from ...core.database import get_db
from ...schemas import LeaderboardRead, LeaderboardStudent
from ...services import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get(
    "",
    response_model=LeaderboardRead,
    summary="Top students by experience",
    responses={
        200: {
            "description": "Leaderboard entries ordered by experience in the period",
            "content": {
                "application/json": {
                    "example": {
                        "period_id": "2f1c6a8e-3b0d-4d8e-9a57-6c1f0f3b9e21",
                        "entries": [
                            {
                                "rank": 1,
                                "student_id": "student-1",
                                "username": "ayse",
                                "first_name": "Ayse",
                                "last_name": "Kaya",
                                "points": 30,
                                "experience": 50
                            }
                        ],
                        "degraded": False
                    }
                }
            },
        }
    },
)
def get_leaderboard(
    limit: int = Query(10, ge=1, description="Number of top students to return"),
    period_id: Optional[str] = Query(None, description="Period to rank; defaults to the active one"),
    db: Session = Depends(get_db),
) -> LeaderboardRead:
    """Return ranked list of students based on experience earned in the period."""

    used_period, entries, degraded = leaderboard_service.period_leaderboard(
        db,
        period_id=period_id,
        limit=limit,
        max_limit=get_settings().leaderboard_max_limit,
    )
    response = [
        LeaderboardStudent(
            rank=entry.rank,
            student_id=entry.user.id,
            username=entry.user.username,
            first_name=entry.user.first_name,
            last_name=entry.user.last_name,
            points=entry.points,
            experience=entry.experience,
        )
        for entry in entries
    ]
    return LeaderboardRead(period_id=used_period, entries=response, degraded=degraded)
