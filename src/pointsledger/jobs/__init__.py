"""Scheduled jobs."""

from .period_rollover import register_scheduler

__all__ = ["register_scheduler"]
