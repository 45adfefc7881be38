"""
Health Check Endpoints

- /health/live  - Basic liveness (process is running)
- /health/ready - Readiness (proxy client open, cache sweep running)
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request, status

from appcraft import __version__
from appcraft.core.config import settings
from appcraft.core.logging_config import logger

router = APIRouter(prefix="/health", tags=["Health Checks"])


def check_proxy(request: Request) -> Dict[str, Any]:
    proxy_service = getattr(request.app.state, "proxy_service", None)
    if proxy_service is None:
        return {"status": "unhealthy", "message": "Proxy service not initialised"}
    if proxy_service.is_closed:
        return {"status": "unhealthy", "message": "Outbound HTTP client is closed"}
    return {"status": "healthy", "base_url": proxy_service.defaults.base_url}


def check_cache(request: Request) -> Dict[str, Any]:
    cache = getattr(request.app.state, "response_cache", None)
    if cache is None:
        return {"status": "unhealthy", "message": "Response cache not initialised"}
    stats = cache.stats()
    return {
        "status": "healthy" if stats["sweep_running"] else "degraded",
        **stats,
    }


@router.get("/live")
async def liveness_check():
    """Returns 200 as long as the process is alive."""
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "app": settings.APP_NAME,
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness probe.

    Ready only when the proxy client is open. A stopped cache sweep is
    reported as degraded but does not fail readiness.
    """
    checks = {
        "proxy": check_proxy(request),
        "cache": check_cache(request),
    }
    is_ready = checks["proxy"]["status"] == "healthy"

    response = {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }

    if not is_ready:
        logger.warning(f"[HealthCheck] Readiness check failed: {response}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=response)

    return response
