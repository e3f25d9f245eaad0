"""Experience ledger endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...schemas import ExperienceCreate, ExperienceTransactionRead
from ...services import transaction_service
from ...services.errors import LedgerRuleViolation

router = APIRouter(prefix="/experience", tags=["experience"])


@router.post(
    "/transactions",
    response_model=ExperienceTransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record experience",
)
def record_experience(payload: ExperienceCreate, db: Session = Depends(get_db)) -> ExperienceTransactionRead:
    """Record an explicit experience delta for a student."""

    try:
        transaction = transaction_service.record_experience(
            db,
            actor_id=payload.actor_id,
            student_id=payload.student_id,
            amount=payload.amount,
        )
        db.commit()
        db.refresh(transaction)
        return transaction
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/transactions", response_model=List[ExperienceTransactionRead], summary="List experience transactions")
def list_experience_transactions(
    *,
    student_id: Optional[str] = Query(None, description="Filter by student"),
    period_id: Optional[str] = Query(None, description="Filter by period"),
    include_rolled_back: bool = Query(True, description="Include rolled back entries"),
    limit: int = Query(25, ge=1, le=100, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    db: Session = Depends(get_db),
) -> List[ExperienceTransactionRead]:
    transactions = transaction_service.list_experience_transactions(
        db,
        student_id=student_id,
        period_id=period_id,
        include_rolled_back=include_rolled_back,
        limit=limit,
        offset=offset,
    )
    return list(transactions)
