"""Balance calculator folding ledger rows into points and experience totals.

Balances are derived at read time from non-rolled-back transactions of a
single period. Nothing here writes.

Failure contract: a database error while aggregating is logged and the
result degrades to zero (or an all-zero mapping). :func:`aggregate_user_points`
and friends return an :class:`Aggregation` whose ``degraded`` flag tells the
caller this happened; the ``calculate_*`` functions return the bare number.

Points and experience are read with separate queries and no shared snapshot,
so a transaction committed between the two reads can show up in one total
and not the other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterable, List, Optional, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..models import ExperienceTransaction, PointsTransaction, TransactionType, User
from .period_service import get_active_period

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Aggregation(Generic[T]):
    """Result of a ledger read; ``degraded`` is set when the default was substituted."""

    value: T
    degraded: bool = False


@dataclass
class TutorSummary:
    id: str
    username: str
    first_name: Optional[str]
    last_name: Optional[str]


@dataclass
class UserStats:
    """Identity projection of a user joined with ledger-derived totals."""

    id: str
    username: str
    first_name: Optional[str]
    last_name: Optional[str]
    role: str
    avatar_url: Optional[str]
    tutor: Optional[TutorSummary]
    period_id: Optional[str]
    points: int = 0
    experience: int = 0
    degraded: bool = False


def _resolve_period_id(session: Session, period_id: Optional[str]) -> Optional[str]:
    if period_id:
        return period_id
    period = get_active_period(session)
    return period.id if period is not None else None


def _aggregate(label: str, compute: Callable[[], T], default: Callable[[], T]) -> Aggregation[T]:
    try:
        return Aggregation(compute())
    except SQLAlchemyError:
        logger.exception("error calculating %s", label)
        return Aggregation(default(), degraded=True)


def _unique_ids(user_ids: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(user_ids))


def _signed(kind: TransactionType, points: int) -> int:
    if kind == TransactionType.AWARD:
        return points
    if kind == TransactionType.REDEEM:
        return -points
    return 0


def aggregate_user_points(session: Session, user_id: str, period_id: Optional[str] = None) -> Aggregation[int]:
    def compute() -> int:
        target = _resolve_period_id(session, period_id)
        if target is None:
            return 0
        rows = session.execute(
            select(PointsTransaction.type, PointsTransaction.points).where(
                PointsTransaction.student_id == user_id,
                PointsTransaction.period_id == target,
                PointsTransaction.rolled_back.is_(False),
            )
        ).all()
        # A rolled back award can leave redemptions larger than awards.
        return max(0, sum(_signed(kind, points) for kind, points in rows))

    return _aggregate("user points", compute, int)


def aggregate_user_experience(
    session: Session, user_id: str, period_id: Optional[str] = None
) -> Aggregation[int]:
    def compute() -> int:
        target = _resolve_period_id(session, period_id)
        if target is None:
            return 0
        explicit = session.execute(
            select(ExperienceTransaction.amount).where(
                ExperienceTransaction.student_id == user_id,
                ExperienceTransaction.period_id == target,
                ExperienceTransaction.rolled_back.is_(False),
            )
        ).scalars().all()
        # Every award also counts as experience, on top of explicit entries.
        awarded = session.execute(
            select(PointsTransaction.points).where(
                PointsTransaction.student_id == user_id,
                PointsTransaction.period_id == target,
                PointsTransaction.type == TransactionType.AWARD,
                PointsTransaction.rolled_back.is_(False),
            )
        ).scalars().all()
        return sum(explicit) + sum(awarded)

    return _aggregate("user experience", compute, int)


def aggregate_multiple_user_points(
    session: Session, user_ids: Sequence[str], period_id: Optional[str] = None
) -> Aggregation[Dict[str, int]]:
    ids = _unique_ids(user_ids)

    def zeros() -> Dict[str, int]:
        return {user_id: 0 for user_id in ids}

    def compute() -> Dict[str, int]:
        totals = zeros()
        if not ids:
            return totals
        target = _resolve_period_id(session, period_id)
        if target is None:
            return totals
        rows = session.execute(
            select(PointsTransaction.student_id, PointsTransaction.type, PointsTransaction.points).where(
                PointsTransaction.student_id.in_(ids),
                PointsTransaction.period_id == target,
                PointsTransaction.rolled_back.is_(False),
            )
        ).all()
        for student_id, kind, points in rows:
            totals[student_id] += _signed(kind, points)
        # Clamp once per user so the result does not depend on row order.
        return {user_id: max(0, total) for user_id, total in totals.items()}

    return _aggregate("multiple user points", compute, zeros)


def aggregate_multiple_user_experience(
    session: Session, user_ids: Sequence[str], period_id: Optional[str] = None
) -> Aggregation[Dict[str, int]]:
    ids = _unique_ids(user_ids)

    def zeros() -> Dict[str, int]:
        return {user_id: 0 for user_id in ids}

    def compute() -> Dict[str, int]:
        totals = zeros()
        if not ids:
            return totals
        target = _resolve_period_id(session, period_id)
        if target is None:
            return totals
        explicit = session.execute(
            select(ExperienceTransaction.student_id, ExperienceTransaction.amount).where(
                ExperienceTransaction.student_id.in_(ids),
                ExperienceTransaction.period_id == target,
                ExperienceTransaction.rolled_back.is_(False),
            )
        ).all()
        awarded = session.execute(
            select(PointsTransaction.student_id, PointsTransaction.points).where(
                PointsTransaction.student_id.in_(ids),
                PointsTransaction.period_id == target,
                PointsTransaction.type == TransactionType.AWARD,
                PointsTransaction.rolled_back.is_(False),
            )
        ).all()
        for student_id, amount in explicit:
            totals[student_id] += amount
        for student_id, points in awarded:
            totals[student_id] += points
        return totals

    return _aggregate("multiple user experience", compute, zeros)


def calculate_user_points(session: Session, user_id: str, period_id: Optional[str] = None) -> int:
    """Current points of ``user_id`` in the period (active period by default), never negative."""

    return aggregate_user_points(session, user_id, period_id).value


def calculate_user_experience(session: Session, user_id: str, period_id: Optional[str] = None) -> int:
    """Explicit experience plus awarded points of ``user_id`` in the period."""

    return aggregate_user_experience(session, user_id, period_id).value


def calculate_multiple_user_points(
    session: Session, user_ids: Sequence[str], period_id: Optional[str] = None
) -> Dict[str, int]:
    """Points for each requested user; every id is present in the result."""

    return aggregate_multiple_user_points(session, user_ids, period_id).value


def calculate_multiple_user_experience(
    session: Session, user_ids: Sequence[str], period_id: Optional[str] = None
) -> Dict[str, int]:
    """Experience for each requested user; every id is present in the result."""

    return aggregate_multiple_user_experience(session, user_ids, period_id).value


def get_user_with_calculated_stats(
    session: Session, user_id: str, period_id: Optional[str] = None
) -> Optional[UserStats]:
    """Return the user's identity fields with period points and experience.

    ``None`` when the user does not exist or cannot be loaded.
    """

    try:
        stmt = select(User).options(joinedload(User.tutor)).where(User.id == user_id)
        user = session.execute(stmt).unique().scalar_one_or_none()
        if user is None:
            return None
        target = _resolve_period_id(session, period_id)
    except SQLAlchemyError:
        logger.exception("error getting user with calculated stats")
        return None

    tutor = None
    if user.tutor is not None:
        tutor = TutorSummary(
            id=user.tutor.id,
            username=user.tutor.username,
            first_name=user.tutor.first_name,
            last_name=user.tutor.last_name,
        )

    points = aggregate_user_points(session, user.id, target)
    experience = aggregate_user_experience(session, user.id, target)

    return UserStats(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role.value,
        avatar_url=user.avatar_url,
        tutor=tutor,
        period_id=target,
        points=points.value,
        experience=experience.value,
        degraded=points.degraded or experience.degraded,
    )
