"""Write paths appending to the points and experience ledgers."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ..models import ExperienceTransaction, PointsTransaction, TransactionType, User, UserRole
from . import balance_service
from .errors import LedgerRuleViolation
from .period_service import require_active_period

logger = logging.getLogger(__name__)

_GRANTING_ROLES = (UserRole.ADMIN, UserRole.TUTOR)


def _ensure_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise LedgerRuleViolation(f"User {user_id} not found", status_code=404)
    return user


def _ensure_actor_for_student(session: Session, actor_id: str, student_id: str) -> tuple[User, User]:
    actor = _ensure_user(session, actor_id)
    if actor.role not in _GRANTING_ROLES:
        raise LedgerRuleViolation("Only admins or tutors can change student balances.", status_code=403)

    student = session.get(User, student_id)
    if student is None or student.role != UserRole.STUDENT:
        raise LedgerRuleViolation(f"Student {student_id} not found", status_code=404)

    if actor.role == UserRole.TUTOR and student.tutor_id != actor.id:
        raise LedgerRuleViolation("Student is not assigned to this tutor.", status_code=403)
    return actor, student


def award_points(
    session: Session,
    *,
    actor_id: str,
    student_id: str,
    points: int,
    reason: Optional[str] = None,
) -> PointsTransaction:
    """Append an AWARD to the active period.

    Awards count towards experience when balances are calculated; no
    separate experience row is written.
    """

    if points <= 0:
        raise LedgerRuleViolation("Points to award must be greater than zero.")

    actor, student = _ensure_actor_for_student(session, actor_id, student_id)
    period = require_active_period(session)

    transaction = PointsTransaction(
        student_id=student.id,
        tutor_id=actor.id,
        period_id=period.id,
        points=points,
        type=TransactionType.AWARD,
        reason=reason or "Points awarded",
    )
    session.add(transaction)
    student.points += points
    student.experience += points
    session.flush()
    session.refresh(transaction)

    logger.info("awarded %s points to %s in period %s", points, student.id, period.id)
    return transaction


def redeem_points(
    session: Session,
    *,
    actor_id: str,
    student_id: str,
    points: int,
    reason: Optional[str] = None,
) -> tuple[PointsTransaction, int]:
    """Append a REDEEM to the active period and return it with the remaining balance."""

    if points <= 0:
        raise LedgerRuleViolation("Points to redeem must be greater than zero.")

    actor, student = _ensure_actor_for_student(session, actor_id, student_id)
    period = require_active_period(session)

    balance = balance_service.aggregate_user_points(session, student.id, period.id)
    if balance.degraded:
        raise LedgerRuleViolation("Balance is temporarily unavailable; try again later.", status_code=503)
    available = balance.value
    if points > available:
        raise LedgerRuleViolation(
            f"Requested points exceed available balance ({available} points)."
        )

    transaction = PointsTransaction(
        student_id=student.id,
        tutor_id=actor.id,
        period_id=period.id,
        points=points,
        type=TransactionType.REDEEM,
        reason=reason or "Points redeemed",
    )
    session.add(transaction)
    student.points = max(0, student.points - points)
    session.flush()
    session.refresh(transaction)

    logger.info("redeemed %s points from %s in period %s", points, student.id, period.id)
    return transaction, available - points


def record_experience(
    session: Session,
    *,
    actor_id: str,
    student_id: str,
    amount: int,
) -> ExperienceTransaction:
    """Append an explicit experience delta to the active period."""

    if amount == 0:
        raise LedgerRuleViolation("Experience amount must not be zero.")

    actor, student = _ensure_actor_for_student(session, actor_id, student_id)
    period = require_active_period(session)

    transaction = ExperienceTransaction(
        student_id=student.id,
        tutor_id=actor.id,
        period_id=period.id,
        amount=amount,
    )
    session.add(transaction)
    student.experience += amount
    session.flush()
    session.refresh(transaction)
    return transaction


def list_points_transactions(
    session: Session,
    *,
    student_id: Optional[str] = None,
    period_id: Optional[str] = None,
    include_rolled_back: bool = True,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[PointsTransaction]:
    """Return points transactions newest first."""

    stmt = (
        select(PointsTransaction)
        .options(joinedload(PointsTransaction.student), joinedload(PointsTransaction.tutor))
        .order_by(PointsTransaction.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    if student_id:
        stmt = stmt.where(PointsTransaction.student_id == student_id)
    if period_id:
        stmt = stmt.where(PointsTransaction.period_id == period_id)
    if not include_rolled_back:
        stmt = stmt.where(PointsTransaction.rolled_back.is_(False))
    return session.execute(stmt).scalars().all()


def list_experience_transactions(
    session: Session,
    *,
    student_id: Optional[str] = None,
    period_id: Optional[str] = None,
    include_rolled_back: bool = True,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[ExperienceTransaction]:
    """Return experience transactions newest first."""

    stmt = (
        select(ExperienceTransaction)
        .options(joinedload(ExperienceTransaction.student), joinedload(ExperienceTransaction.tutor))
        .order_by(ExperienceTransaction.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    if student_id:
        stmt = stmt.where(ExperienceTransaction.student_id == student_id)
    if period_id:
        stmt = stmt.where(ExperienceTransaction.period_id == period_id)
    if not include_rolled_back:
        stmt = stmt.where(ExperienceTransaction.rolled_back.is_(False))
    return session.execute(stmt).scalars().all()
