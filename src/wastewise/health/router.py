"""Liveness, readiness and version endpoints.

Readiness answers 503 while the database is unreachable so the load balancer
stops routing point-spending requests that would only fail with
store_unavailable. Redis is optional: a missing pool reads as ``disabled``.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.config import get_settings
from wastewise.database import get_session
from wastewise.redis_client import get_optional_redis

router = APIRouter()

HEALTHY_CHECKS = ("ok", "disabled")


async def _check_database(db: AsyncSession) -> str:
    try:
        await db.scalar(text("SELECT 1"))
    except Exception as exc:
        return f"error: {exc}"
    return "ok"


async def _check_redis() -> str:
    redis = get_optional_redis()
    if redis is None:
        return "disabled"
    try:
        await redis.ping()
    except Exception as exc:
        return f"error: {exc}"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    """The process is up."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_session)):  # noqa: B008
    checks = {
        "database": await _check_database(db),
        "redis": await _check_redis(),
    }
    ready = all(result in HEALTHY_CHECKS for result in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"version": settings.app_version, "environment": settings.environment}
