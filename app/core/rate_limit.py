from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

AUTH_RATE_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address)


def _passthrough(func):
    return func


def rate_limit(limit: str | None = None):
    if settings.rate_limit_enabled:
        return limiter.limit(limit or settings.rate_limit)
    return _passthrough


def auth_rate_limit():
    return rate_limit(AUTH_RATE_LIMIT)
