"""Middleware registration."""

from fastapi import FastAPI

from wastewise.config import Settings
from wastewise.middleware.cors import setup_cors
from wastewise.middleware.error_handler import setup_error_handlers
from wastewise.middleware.logging import setup_logging
from wastewise.middleware.rate_limit import RateLimitMiddleware
from wastewise.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error handlers and middleware.

    Starlette runs middleware in reverse-add order: CORS is added last so it
    also wraps 429 responses, and the request id is bound before the rate
    limiter logs anything. Rate limiting needs Redis and is left out without it.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    if settings.redis_url:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
