"""Rollback of ledger entries.

A rollback flips ``rolled_back`` on the original row and records who did it
and why. Rows are never deleted.
"""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ..models import (
    ExperienceTransaction,
    LedgerKind,
    PointsTransaction,
    TransactionRollback,
    TransactionType,
    User,
    UserRole,
)
from .errors import LedgerRuleViolation

logger = logging.getLogger(__name__)


def _ensure_admin(session: Session, admin_id: str) -> User:
    admin = session.get(User, admin_id)
    if admin is None or admin.role != UserRole.ADMIN:
        raise LedgerRuleViolation("Only admins can roll back transactions.", status_code=403)
    return admin


def _revert_points_mirror(student: User, transaction: PointsTransaction) -> None:
    if transaction.type == TransactionType.AWARD:
        student.points = max(0, student.points - transaction.points)
        student.experience = max(0, student.experience - transaction.points)
    else:
        student.points += transaction.points


def rollback_transaction(
    session: Session,
    *,
    admin_id: str,
    transaction_id: str,
    transaction_type: LedgerKind,
    reason: str,
) -> TransactionRollback:
    """Mark a points or experience transaction as rolled back."""

    admin = _ensure_admin(session, admin_id)

    reason = (reason or "").strip()
    if not reason:
        raise LedgerRuleViolation("A reason is required to roll back a transaction.")

    existing = session.execute(
        select(TransactionRollback.id).where(
            TransactionRollback.transaction_id == transaction_id,
            TransactionRollback.transaction_type == transaction_type,
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise LedgerRuleViolation("This transaction has already been rolled back.", status_code=409)

    model = PointsTransaction if transaction_type == LedgerKind.POINTS else ExperienceTransaction
    transaction = session.get(model, transaction_id)
    if transaction is None:
        raise LedgerRuleViolation(
            f"{transaction_type.value.title()} transaction {transaction_id} not found", status_code=404
        )

    student = session.get(User, transaction.student_id)
    if transaction_type == LedgerKind.POINTS:
        _revert_points_mirror(student, transaction)
    else:
        student.experience = max(0, student.experience - transaction.amount)

    transaction.rolled_back = True
    rollback = TransactionRollback(
        transaction_id=transaction.id,
        transaction_type=transaction_type,
        student_id=transaction.student_id,
        admin_id=admin.id,
        reason=reason,
    )
    session.add(rollback)
    session.flush()
    session.refresh(rollback)

    logger.info(
        "%s transaction %s rolled back by %s", transaction_type.value, transaction.id, admin.id
    )
    return rollback


def list_rollbacks(
    session: Session, *, admin_id: str, limit: int = 50, offset: int = 0
) -> Sequence[TransactionRollback]:
    """Return rollback history newest first. Admins only."""

    _ensure_admin(session, admin_id)

    stmt = (
        select(TransactionRollback)
        .options(joinedload(TransactionRollback.student), joinedload(TransactionRollback.admin))
        .order_by(TransactionRollback.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return session.execute(stmt).scalars().all()
