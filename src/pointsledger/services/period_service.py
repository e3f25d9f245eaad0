"""Period registry: which window new and queried transactions belong to.

The active period is looked up on every call and never cached in-process, so
an activation is visible to the next reader immediately.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ..models import ExperienceTransaction, Period, PeriodStatus, PointsTransaction, User, UserRole
from ..utils.datetime import today_utc, utcnow, week_index, weeks_between
from .errors import LedgerRuleViolation, NoActivePeriod

logger = logging.getLogger(__name__)

_COUNTER_RESET_ROLES = (UserRole.STUDENT, UserRole.TUTOR, UserRole.ASISTAN)


def get_active_period(session: Session) -> Optional[Period]:
    """Return the ACTIVE period, or ``None`` when no period is active."""

    stmt = select(Period).where(Period.status == PeriodStatus.ACTIVE).limit(1)
    return session.execute(stmt).scalar_one_or_none()


def require_active_period(session: Session) -> Period:
    """Return the ACTIVE period or raise :class:`NoActivePeriod`."""

    period = get_active_period(session)
    if period is None:
        raise NoActivePeriod()
    return period


def get_period_by_id(session: Session, period_id: str) -> Optional[Period]:
    return session.get(Period, period_id)


def _ensure_period(session: Session, period_id: str) -> Period:
    period = get_period_by_id(session, period_id)
    if period is None:
        raise LedgerRuleViolation(f"Period {period_id} not found", status_code=404)
    return period


def _ensure_unique_name(session: Session, name: str) -> None:
    existing = session.execute(select(Period.id).where(Period.name == name)).scalar_one_or_none()
    if existing is not None:
        raise LedgerRuleViolation("Period with this name already exists.")


def _validate_dates(start_date: date, end_date: Optional[date]) -> None:
    if end_date is not None and end_date <= start_date:
        raise LedgerRuleViolation("End date must be after start date.")


def list_periods(session: Session, *, status: Optional[PeriodStatus] = None) -> Sequence[Period]:
    """Return periods newest first, optionally filtered by status."""

    stmt = select(Period).order_by(Period.created_at.desc(), Period.start_date.desc())
    if status is not None:
        stmt = stmt.where(Period.status == status)
    return session.execute(stmt).scalars().all()


def create_period(
    session: Session,
    *,
    name: str,
    start_date: date,
    end_date: Optional[date] = None,
    description: Optional[str] = None,
    total_weeks: Optional[int] = None,
) -> Period:
    """Create a PLANNED period."""

    name = (name or "").strip()
    if not name:
        raise LedgerRuleViolation("Period name and start date are required.")
    _validate_dates(start_date, end_date)
    _ensure_unique_name(session, name)

    if total_weeks is None:
        total_weeks = weeks_between(start_date, end_date) if end_date else 0

    period = Period(
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        status=PeriodStatus.PLANNED,
        total_weeks=total_weeks,
    )
    session.add(period)
    session.flush()
    session.refresh(period)
    return period


def update_period(
    session: Session,
    period_id: str,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    total_weeks: Optional[int] = None,
) -> Period:
    """Edit a period's descriptive fields. Completed periods are frozen."""

    period = _ensure_period(session, period_id)
    if period.status == PeriodStatus.COMPLETED:
        raise LedgerRuleViolation("Completed periods cannot be modified.")

    if name is not None and name != period.name:
        _ensure_unique_name(session, name)
        period.name = name

    new_start = start_date or period.start_date
    new_end = end_date if end_date is not None else period.end_date
    _validate_dates(new_start, new_end)
    period.start_date = new_start
    period.end_date = new_end

    if description is not None:
        period.description = description
    if total_weeks is not None:
        period.total_weeks = total_weeks

    session.flush()
    return period


def activate_period(session: Session, period_id: str, *, reset_counters: bool = True) -> Period:
    """Make ``period_id`` the single ACTIVE period.

    The previously active period is completed first. With ``reset_counters``
    the denormalised ``points``/``experience`` mirrors of students, tutors and
    assistants are zeroed so they start the new period clean.
    """

    period = _ensure_period(session, period_id)
    if period.status == PeriodStatus.ACTIVE:
        raise LedgerRuleViolation("Period is already active.")
    if period.status == PeriodStatus.COMPLETED:
        raise LedgerRuleViolation("Completed periods cannot be reactivated.")

    current = get_active_period(session)
    if current is not None:
        current.status = PeriodStatus.COMPLETED
        # The single-active index must see the old row leave ACTIVE first.
        session.flush()
        logger.info("period %s completed by activation of %s", current.id, period.id)

    period.status = PeriodStatus.ACTIVE
    session.flush()

    if reset_counters:
        result = session.execute(
            update(User)
            .where(User.role.in_(_COUNTER_RESET_ROLES))
            .values(points=0, experience=0)
            .execution_options(synchronize_session="fetch")
        )
        logger.info("reset points and experience for %s users", result.rowcount)

    logger.info("period %s (%s) activated", period.id, period.name)
    session.refresh(period)
    return period


def complete_period(session: Session, period_id: str) -> Period:
    """Mark a period COMPLETED."""

    period = _ensure_period(session, period_id)
    if period.status == PeriodStatus.COMPLETED:
        raise LedgerRuleViolation("Period is already completed.")
    period.status = PeriodStatus.COMPLETED
    session.flush()
    logger.info("period %s completed", period.id)
    return period


def delete_period(session: Session, period_id: str) -> None:
    """Delete a period that no transaction references."""

    period = _ensure_period(session, period_id)

    points_count = session.execute(
        select(func.count(PointsTransaction.id)).where(PointsTransaction.period_id == period.id)
    ).scalar_one()
    experience_count = session.execute(
        select(func.count(ExperienceTransaction.id)).where(ExperienceTransaction.period_id == period.id)
    ).scalar_one()
    if points_count or experience_count:
        raise LedgerRuleViolation("Periods with recorded transactions cannot be deleted; complete them instead.")

    session.delete(period)
    session.flush()


def current_week(period: Period, today: Optional[date] = None) -> int:
    """Return the 1-based week of ``today`` within ``period`` (0 before it starts)."""

    return week_index(period.start_date, today or today_utc(), period.total_weeks or None)


def complete_expired_periods(session: Session, *, today: Optional[date] = None) -> int:
    """Complete ACTIVE periods whose end date has passed. Returns how many changed."""

    today = today or today_utc()
    stmt = select(Period).where(
        Period.status == PeriodStatus.ACTIVE,
        Period.end_date.is_not(None),
        Period.end_date < today,
    )
    expired = session.execute(stmt).scalars().all()
    for period in expired:
        period.status = PeriodStatus.COMPLETED
        period.updated_at = utcnow()
        logger.info("period %s passed its end date %s and was completed", period.id, period.end_date)
    session.flush()
    return len(expired)
