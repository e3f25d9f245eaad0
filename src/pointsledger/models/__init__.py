"""SQLAlchemy models for the points ledger."""

from .experience_transaction import ExperienceTransaction
from .period import Period, PeriodStatus
from .points_transaction import PointsTransaction, TransactionType
from .transaction_rollback import LedgerKind, TransactionRollback
from .user import User, UserRole

__all__ = [
    "ExperienceTransaction",
    "LedgerKind",
    "Period",
    "PeriodStatus",
    "PointsTransaction",
    "TransactionRollback",
    "TransactionType",
    "User",
    "UserRole",
]
