"""Background scheduler completing periods past their end date."""

from __future__ import annotations

import logging
from datetime import date

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from ..core.config import get_settings
from ..core.database import SessionLocal
from ..services.period_service import complete_expired_periods

logger = logging.getLogger(__name__)

_scheduler = AsyncIOScheduler(timezone="UTC")


async def _execute_period_rollover() -> None:
    session = SessionLocal()
    try:
        completed = complete_expired_periods(session)
        session.commit()
        logger.info("period rollover completed: %s periods closed", completed)
    except Exception:  # pragma: no cover - safeguard for background job
        session.rollback()
        logger.exception("period rollover job failed")
        raise
    finally:
        session.close()


@_scheduler.scheduled_job("cron", hour=0, minute=10, id="period_rollover", misfire_grace_time=3600)
async def _scheduled_job() -> None:
    await _execute_period_rollover()


def register_scheduler(app: FastAPI) -> None:
    """Attach APScheduler lifecycle hooks to the FastAPI app."""

    if not get_settings().scheduler_enabled:
        logger.info("period rollover scheduler disabled")
        return

    @app.on_event("startup")
    async def start_scheduler() -> None:
        if not _scheduler.running:
            _scheduler.start()
            logger.info("period rollover scheduler started")

    @app.on_event("shutdown")
    async def shutdown_scheduler() -> None:
        if _scheduler.running:
            _scheduler.shutdown(wait=False)
            logger.info("period rollover scheduler stopped")


def run_rollover_once(today: date | None = None) -> int:
    """Convenience helper to run the rollover synchronously for manual use."""

    session = SessionLocal()
    try:
        completed = complete_expired_periods(session, today=today)
        session.commit()
        return completed
    finally:
        session.close()
