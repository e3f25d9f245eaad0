"""Exceptions raised by ledger services."""

from __future__ import annotations


class LedgerRuleViolation(Exception):
    """Raised when business constraints are violated."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class NoActivePeriod(LedgerRuleViolation):
    """Raised by write paths that need a current period when none is active."""

    def __init__(self) -> None:
        super().__init__("No active period found. Please activate a period first.", status_code=409)
