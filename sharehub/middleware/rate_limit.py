"""
Rate Limiting for FastAPI

Fixed-window limits per client IP, in three classes:

- public: public event pages and token validation
- upload: slide and photo uploads
- authenticated: everything else (the limiter's default)
"""

from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from sharehub.config import settings

PUBLIC_LIMIT = settings.rate_limit_public
UPLOAD_LIMIT = settings.rate_limit_upload

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_authenticated],
    storage_uri="memory://",
    headers_enabled=True,
    enabled=settings.rate_limit_enabled,
)


def get_rate_limiter():
    """Get the rate limiter instance."""
    return limiter


def configure_rate_limiting(app):
    """
    Attach the limiter to the application.

    RateLimitExceeded is rendered by the shared exception handlers.

    Args:
        app: FastAPI application instance
    """
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
