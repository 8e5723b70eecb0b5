"""
Rate limiting

SlowAPI with in-memory storage, keyed by client IP. Registration, login and
verification resends share the stricter auth limit.
"""
import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from flockr.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 60


def get_client_ip(request: Request) -> str:
    """Client address; behind a proxy, the first X-Forwarded-For hop."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded.split(",")[0].strip()
    return first_hop or get_remote_address(request)


limiter = Limiter(
    key_func=get_client_ip,
    enabled=settings.RATE_LIMIT_ENABLED,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
)

auth_limit = limiter.limit(settings.RATE_LIMIT_AUTH)


def _retry_after(exc: RateLimitExceeded) -> int:
    try:
        return int(exc.limit.limit.get_expiry())
    except AttributeError:
        return DEFAULT_RETRY_AFTER_SECONDS


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    retry_after = _retry_after(exc)
    logger.warning(
        f"Rate limit {exc.detail} hit by {get_client_ip(request)} on {request.method} {request.url.path}"
    )
    return JSONResponse(
        status_code=429,
        content={"message": f"Too many attempts. Try again in {retry_after} seconds."},
        headers={"Retry-After": str(retry_after)},
    )
