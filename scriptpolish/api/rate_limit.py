"""
Per-user request rate limiting.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from scriptpolish.api.deps import rate_limit_key
from scriptpolish.core.config import settings

limiter = Limiter(key_func=rate_limit_key, enabled=settings.rate_limit_enabled)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    minutes = settings.rate_limit_window_minutes
    return JSONResponse(
        status_code=429,
        content={
            "error": f"You have made too many API requests. Please try again in {minutes} minutes.",
            "kind": "rate_limited",
        },
    )
