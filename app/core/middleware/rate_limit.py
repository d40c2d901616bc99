"""Rate limiting utilities.

Wraps the slowapi limiter with a no-op variant under ``APP_ENV=test`` so fixtures
can register and log in as often as they need.
"""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

AUTH_RATE_LIMIT = "20/minute"


class _NoOpLimiter:
    """Disable rate limiting when running tests to keep fixtures deterministic."""

    enabled = False

    def limit(self, *args, **kwargs):
        def decorator(func):
            return func

        return decorator


if os.getenv("APP_ENV", settings.environment).lower() == "test":
    limiter = _NoOpLimiter()
else:
    limiter = Limiter(
        key_func=get_remote_address, default_limits=["300 per minute", "5000 per day"]
    )


__all__ = ["limiter", "AUTH_RATE_LIMIT"]
