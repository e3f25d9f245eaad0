"""Service layer exports."""

from . import (
	balance_service,
	leaderboard_service,
	period_service,
	rollback_service,
	transaction_service,
)

__all__ = [
	"balance_service",
	"leaderboard_service",
	"period_service",
	"rollback_service",
	"transaction_service",
]
