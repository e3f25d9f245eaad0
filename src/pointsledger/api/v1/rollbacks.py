"""Transaction rollback endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...schemas import RollbackCreate, RollbackRead
from ...services import rollback_service
from ...services.errors import LedgerRuleViolation

router = APIRouter(prefix="/rollbacks", tags=["rollbacks"])


@router.post(
    "",
    response_model=RollbackRead,
    status_code=status.HTTP_201_CREATED,
    summary="Roll back a transaction",
    responses={
        403: {"description": "Only admins can roll back"},
        404: {"description": "Transaction not found"},
        409: {"description": "Transaction already rolled back"},
    },
)
def create_rollback(payload: RollbackCreate, db: Session = Depends(get_db)) -> RollbackRead:
    """Exclude a points or experience transaction from all balances.

    Example request body::

        {
            "admin_id": "admin-1",
            "transaction_id": "5b8e2a34-8f0e-4b44-9d1c-0f3c6f7f2b10",
            "transaction_type": "POINTS",
            "reason": "Awarded twice"
        }
    """

    try:
        rollback = rollback_service.rollback_transaction(
            db,
            admin_id=payload.admin_id,
            transaction_id=payload.transaction_id,
            transaction_type=payload.transaction_type,
            reason=payload.reason,
        )
        db.commit()
        db.refresh(rollback)
        return rollback
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get(
    "",
    response_model=List[RollbackRead],
    summary="Rollback history",
    responses={403: {"description": "Only admins can view rollback history"}},
)
def list_rollbacks(
    *,
    admin_id: str = Query(..., description="Admin requesting the history"),
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    db: Session = Depends(get_db),
) -> List[RollbackRead]:
    try:
        return list(rollback_service.list_rollbacks(db, admin_id=admin_id, limit=limit, offset=offset))
    except LedgerRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
