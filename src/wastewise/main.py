"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sqlalchemy.exc import DBAPIError

from wastewise.assistant.router import router as assistant_router
from wastewise.auth.router import router as auth_router
from wastewise.centers.router import router as centers_router
from wastewise.community.router import router as community_router
from wastewise.config import get_settings
from wastewise.database import close_db, get_session_factory, init_db
from wastewise.health.router import router as health_router
from wastewise.issues.router import router as issues_router
from wastewise.middleware import setup_middleware
from wastewise.pickups.router import router as pickups_router
from wastewise.points.errors import StoreUnavailable
from wastewise.points.router import router as points_router
from wastewise.redis_client import close_redis, init_redis
from wastewise.rewards.router import router as rewards_router
from wastewise.rewards.service import expire_redemptions
from wastewise.store.router import router as store_router
from wastewise.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.redis_url:
        await init_redis(settings.redis_url)

    # Lapsed codes are also reported as expired on read; this just settles the rows.
    try:
        async with get_session_factory()() as db:
            await expire_redemptions(db)
    except (DBAPIError, StoreUnavailable):
        logger.warning("redemption_expiry_sweep_failed", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="WasteWise API",
        description="Backend API for WasteWise: waste pickups, eco points and rewards",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(points_router)
    app.include_router(rewards_router)
    app.include_router(pickups_router)
    app.include_router(store_router)
    app.include_router(centers_router)
    app.include_router(issues_router)
    app.include_router(community_router)
    app.include_router(assistant_router)

    return app


app = create_app()
