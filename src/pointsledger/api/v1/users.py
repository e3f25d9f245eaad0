"""Balance read endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...schemas import BalanceQuery, BalanceRead, UserStatsRead
from ...services import balance_service

router = APIRouter(tags=["balances"])


@router.get(
    "/users/{user_id}/stats",
    response_model=UserStatsRead,
    summary="User with calculated points and experience",
    responses={
        200: {
            "description": "Balances derived from the ledger",
            "content": {
                "application/json": {
                    "example": {
                        "id": "student-1",
                        "username": "ayse",
                        "first_name": "Ayse",
                        "last_name": "Kaya",
                        "role": "STUDENT",
                        "avatar_url": None,
                        "tutor": {"id": "tutor-1", "username": "mehmet", "first_name": "Mehmet", "last_name": "Demir"},
                        "period_id": "2f1c6a8e-3b0d-4d8e-9a57-6c1f0f3b9e21",
                        "points": 30,
                        "experience": 50,
                        "degraded": False,
                    }
                }
            },
        },
        404: {"description": "User not found"},
    },
)
def get_user_stats(
    user_id: str,
    period_id: Optional[str] = Query(None, description="Period to scope to; defaults to the active one"),
    db: Session = Depends(get_db),
) -> UserStatsRead:
    stats = balance_service.get_user_with_calculated_stats(db, user_id, period_id)
    if stats is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserStatsRead.model_validate(stats)


@router.post("/balances", response_model=BalanceRead, summary="Batched balances")
def get_balances(payload: BalanceQuery, db: Session = Depends(get_db)) -> BalanceRead:
    """Return points and experience for every requested user id."""

    points = balance_service.aggregate_multiple_user_points(db, payload.user_ids, payload.period_id)
    experience = balance_service.aggregate_multiple_user_experience(db, payload.user_ids, payload.period_id)
    return BalanceRead(
        points=points.value,
        experience=experience.value,
        degraded=points.degraded or experience.degraded,
    )
