from __future__ import annotations

from typing import Callable

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from resume_ranker.core.config import settings


def client_key(request: Request) -> str:
    """Per-client bucket key; the first X-Forwarded-For hop only when the proxy is trusted."""
    if settings.trust_x_forwarded_for:
        forwarded_for = request.headers.get("x-forwarded-for", "").strip()
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
    return get_remote_address(request) or "unknown"


limiter = Limiter(key_func=client_key, enabled=settings.rate_limit_enabled)


def rate_limit(limit: str | None = None) -> Callable:
    if not settings.rate_limit_enabled:
        return lambda func: func
    return limiter.limit(limit or settings.rate_limit)
