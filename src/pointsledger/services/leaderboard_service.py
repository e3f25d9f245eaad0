"""Leaderboard aggregation services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import User, UserRole
from .balance_service import aggregate_multiple_user_experience, aggregate_multiple_user_points
from .period_service import get_active_period


@dataclass
class LeaderboardEntry:
    rank: int
    user: User
    points: int
    experience: int


def period_leaderboard(
    session: Session,
    *,
    period_id: Optional[str] = None,
    limit: int = 10,
    max_limit: int = 100,
) -> tuple[Optional[str], List[LeaderboardEntry], bool]:
    """Rank active students by experience earned in a period.

    Returns the period id used, the ranked entries, and whether any total was
    degraded by a failed aggregation.
    """

    limit = max(1, min(limit, max_limit))

    if period_id is None:
        period = get_active_period(session)
        if period is None:
            return None, [], False
        period_id = period.id

    students = session.execute(
        select(User).where(User.role == UserRole.STUDENT, User.is_active.is_(True))
    ).scalars().all()
    ids = [student.id for student in students]

    points = aggregate_multiple_user_points(session, ids, period_id)
    experience = aggregate_multiple_user_experience(session, ids, period_id)

    ranked = sorted(students, key=lambda s: (-experience.value[s.id], s.username))[:limit]
    entries = [
        LeaderboardEntry(
            rank=index,
            user=student,
            points=points.value[student.id],
            experience=experience.value[student.id],
        )
        for index, student in enumerate(ranked, start=1)
    ]
    return period_id, entries, points.degraded or experience.degraded
