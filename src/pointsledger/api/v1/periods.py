"""Period administration endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...models import PeriodStatus
from ...schemas import ActivePeriodRead, PeriodActivate, PeriodCreate, PeriodRead, PeriodUpdate
from ...services import period_service
from ...services.errors import LedgerRuleViolation

router = APIRouter(prefix="/periods", tags=["periods"])


@router.get("", response_model=List[PeriodRead], summary="List periods")
def list_periods(
    status_filter: Optional[PeriodStatus] = Query(None, alias="status", description="Filter by status"),
    db: Session = Depends(get_db),
) -> List[PeriodRead]:
    """Return periods, newest first."""

    return list(period_service.list_periods(db, status=status_filter))


@router.get(
    "/active",
    response_model=ActivePeriodRead,
    summary="Currently active period",
    responses={
        200: {
            "description": "The active period",
            "content": {
                "application/json": {
                    "example": {
                        "id": "2f1c6a8e-3b0d-4d8e-9a57-6c1f0f3b9e21",
                        "name": "2025 Fall",
                        "description": "Fall semester",
                        "start_date": "2025-09-15",
                        "end_date": "2026-01-16",
                        "status": "ACTIVE",
                        "total_weeks": 18,
                        "created_at": "2025-09-01T09:00:00",
                        "current_week": 7,
                    }
                }
            },
        },
        404: {"description": "No active period"},
    },
)
def get_active_period(db: Session = Depends(get_db)) -> ActivePeriodRead:
    period = period_service.get_active_period(db)
    if period is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active period found")
    payload = PeriodRead.model_validate(period).model_dump()
    return ActivePeriodRead(**payload, current_week=period_service.current_week(period))


@router.get("/{period_id}", response_model=PeriodRead, summary="Get a period")
def get_period(period_id: str, db: Session = Depends(get_db)) -> PeriodRead:
    period = period_service.get_period_by_id(db, period_id)
    if period is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Period not found")
    return period


@router.post(
    "",
    response_model=PeriodRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a period",
    responses={400: {"description": "Duplicate name or invalid dates"}},
)
def create_period(payload: PeriodCreate, db: Session = Depends(get_db)) -> PeriodRead:
    """Create a PLANNED period.

    Example request body::

        {
            "name": "2025 Fall",
            "start_date": "2025-09-15",
            "end_date": "2026-01-16"
        }
    """

    try:
        period = period_service.create_period(
            db,
            name=payload.name,
            description=payload.description,
            start_date=payload.start_date,
            end_date=payload.end_date,
            total_weeks=payload.total_weeks,
        )
        db.commit()
        db.refresh(period)
        return period
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.patch("/{period_id}", response_model=PeriodRead, summary="Update a period")
def update_period(period_id: str, payload: PeriodUpdate, db: Session = Depends(get_db)) -> PeriodRead:
    try:
        period = period_service.update_period(db, period_id, **payload.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(period)
        return period
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post("/{period_id}/activate", response_model=PeriodRead, summary="Activate a period")
def activate_period(
    period_id: str,
    payload: Optional[PeriodActivate] = None,
    db: Session = Depends(get_db),
) -> PeriodRead:
    """Activate a period, completing whichever period was active before."""

    options = payload or PeriodActivate()
    try:
        period = period_service.activate_period(db, period_id, reset_counters=options.reset_counters)
        db.commit()
        db.refresh(period)
        return period
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post("/{period_id}/complete", response_model=PeriodRead, summary="Complete a period")
def complete_period(period_id: str, db: Session = Depends(get_db)) -> PeriodRead:
    try:
        period = period_service.complete_period(db, period_id)
        db.commit()
        db.refresh(period)
        return period
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.delete("/{period_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an unused period")
def delete_period(period_id: str, db: Session = Depends(get_db)) -> None:
    try:
        period_service.delete_period(db, period_id)
        db.commit()
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
