"""Public schema exports."""

from .leaderboard import BalanceQuery, BalanceRead, LeaderboardRead, LeaderboardStudent
from .period import ActivePeriodRead, PeriodActivate, PeriodCreate, PeriodRead, PeriodUpdate
from .rollback import RollbackCreate, RollbackRead
from .transaction import (
	ExperienceCreate,
	ExperienceTransactionRead,
	PointsAward,
	PointsRedeem,
	PointsTransactionRead,
	RedemptionReceipt,
)
from .user import UserStatsRead, UserSummary

__all__ = [
	"ActivePeriodRead",
	"BalanceQuery",
	"BalanceRead",
	"ExperienceCreate",
	"ExperienceTransactionRead",
	"LeaderboardRead",
	"LeaderboardStudent",
	"PeriodActivate",
	"PeriodCreate",
	"PeriodRead",
	"PeriodUpdate",
	"PointsAward",
	"PointsRedeem",
	"PointsTransactionRead",
	"RedemptionReceipt",
	"RollbackCreate",
	"RollbackRead",
	"UserStatsRead",
	"UserSummary",
]
