"""Points ledger endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...schemas import PointsAward, PointsRedeem, PointsTransactionRead, RedemptionReceipt
from ...services import transaction_service
from ...services.errors import LedgerRuleViolation

router = APIRouter(prefix="/points", tags=["points"])


@router.post(
    "/award",
    response_model=PointsTransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Award points",
    responses={
        400: {"description": "Business rule violation"},
        403: {"description": "Actor may not award to this student"},
        404: {"description": "Student or actor not found"},
        409: {"description": "No active period"},
    },
)
def award_points(payload: PointsAward, db: Session = Depends(get_db)) -> PointsTransactionRead:
    """Award points to a student in the active period.

    Example request body::

        {
            "actor_id": "tutor-1",
            "student_id": "student-1",
            "points": 30,
            "reason": "workshop"
        }
    """

    try:
        transaction = transaction_service.award_points(
            db,
            actor_id=payload.actor_id,
            student_id=payload.student_id,
            points=payload.points,
            reason=payload.reason,
        )
        db.commit()
        db.refresh(transaction)
        return transaction
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/redeem",
    response_model=RedemptionReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Redeem points",
    responses={
        400: {"description": "Insufficient balance"},
        503: {"description": "Balance could not be calculated"},
        404: {"description": "Student or actor not found"},
        409: {"description": "No active period"},
    },
)
def redeem_points(payload: PointsRedeem, db: Session = Depends(get_db)) -> RedemptionReceipt:
    try:
        transaction, remaining = transaction_service.redeem_points(
            db,
            actor_id=payload.actor_id,
            student_id=payload.student_id,
            points=payload.points,
            reason=payload.reason,
        )
        db.commit()
        db.refresh(transaction)
        return RedemptionReceipt(
            transaction=PointsTransactionRead.model_validate(transaction),
            available_balance=remaining,
        )
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/transactions", response_model=List[PointsTransactionRead], summary="List points transactions")
def list_points_transactions(
    *,
    student_id: Optional[str] = Query(None, description="Filter by student"),
    period_id: Optional[str] = Query(None, description="Filter by period"),
    include_rolled_back: bool = Query(True, description="Include rolled back entries"),
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    db: Session = Depends(get_db),
) -> List[PointsTransactionRead]:
    transactions = transaction_service.list_points_transactions(
        db,
        student_id=student_id,
        period_id=period_id,
        include_rolled_back=include_rolled_back,
        limit=limit,
        offset=offset,
    )
    return list(transactions)
