"""
Rate Limiting for the Vibe Coding API
=====================================
Implements rate limiting using slowapi.

Generation is the expensive operation: every chat turn can drive up to
MAX_AGENT_STEPS model calls, so /chat/stream carries its own tighter limit
(CHAT_RATE_LIMIT). Everything else falls under RATE_LIMIT_PER_MINUTE.

Counters live in RATE_LIMIT_STORAGE_URI ("memory://" for a single process,
"redis://..." when several workers share one limit).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """
    Get rate limit key based on user authentication.

    Priority:
    1. Authenticated user ID (set on request.state by get_current_user)
    2. IP address (for anonymous users)
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"


# Create limiter instance
limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Returns a JSON body in the same shape as other API errors plus a
    Retry-After header.
    """
    retry_after = "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "code": "RATE_LIMIT_EXCEEDED",
            "message": "Too many requests. Please slow down.",
            "details": {"limit": str(exc.detail)},
        },
        headers={"Retry-After": retry_after},
    )


def chat_rate_limit():
    """Rate limit for generation requests (CHAT_RATE_LIMIT)"""
    return limiter.limit(settings.CHAT_RATE_LIMIT, key_func=get_user_identifier)
