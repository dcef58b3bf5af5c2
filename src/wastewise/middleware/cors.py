"""CORS for the WasteWise web app."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wastewise.config import Settings

ALLOWED_METHODS = ["GET", "POST", "PATCH", "OPTIONS"]
ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-Id"]
# Retry-After accompanies 503 store_unavailable responses.
EXPOSED_HEADERS = ["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit", "Retry-After"]

# Vite picks the next free port when 5173/8080 are taken.
LOCAL_DEV_ORIGIN_REGEX = r"^http://(localhost|127\.0\.0\.1)(:\d+)?$"


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured web origins; debug builds also accept any local dev server."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=LOCAL_DEV_ORIGIN_REGEX if settings.debug else None,
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=EXPOSED_HEADERS,
    )
