"""Primary API router definition."""

from fastapi import APIRouter

from . import experience, leaderboard, periods, points, rollbacks, users

api_router = APIRouter()

api_router.include_router(periods.router)
api_router.include_router(points.router)
api_router.include_router(experience.router)
api_router.include_router(rollbacks.router)
api_router.include_router(users.router)
api_router.include_router(leaderboard.router)


@api_router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Basic health probe endpoint."""
    return {"status": "ok"}
