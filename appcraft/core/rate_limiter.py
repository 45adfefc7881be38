"""
Rate Limiting for the AppCraft API
==================================
slowapi limiter keyed by API key or client IP.

The default limit applies to every route; the proxy and chat endpoints
carry their own limits (PROXY_RATE_LIMIT, CODEGEN_RATE_LIMIT) since each
call fans out to an upstream service.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from appcraft.core.config import settings
from appcraft.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """
    Rate limit key.

    Priority:
    1. API key header (first 16 chars only)
    2. Client IP address
    """
    api_key = request.headers.get("X-API-Key")
    if api_key:
        return f"apikey:{api_key[:16]}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """429 in the same {success, error} envelope as every other API error"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}",
        extra={"event_type": "rate_limit_exceeded", "http_path": request.url.path},
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too many requests. Please slow down.",
                "details": {"limit": str(exc.detail)},
            }
        },
        headers={"Retry-After": "60"},
    )


def proxy_rate_limit():
    return limiter.limit(settings.PROXY_RATE_LIMIT)


def codegen_rate_limit():
    return limiter.limit(settings.CODEGEN_RATE_LIMIT)
