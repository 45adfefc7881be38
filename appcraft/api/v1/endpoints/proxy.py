"""
Proxy Endpoints

POST /proxy forwards a request descriptor through the ProxyService.
The HTTP status of this endpoint reflects the proxy outcome:

- 200: the upstream answered (inspect `status` / `success` in the body)
- 400: the descriptor failed validation, nothing was sent
- 502: the upstream could not be reached within the retry budget
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from appcraft.api.deps import get_proxy_service, get_response_cache
from appcraft.core.logging_config import logger
from appcraft.core.rate_limiter import proxy_rate_limit
from appcraft.modules.proxy.cache import ResponseCache
from appcraft.modules.proxy.service import ProxyService
from appcraft.schemas.proxy import CacheStats, ProxyFailure

router = APIRouter(prefix="/proxy", tags=["Proxy"])


def result_status_code(result) -> int:
    if not isinstance(result, ProxyFailure):
        return status.HTTP_200_OK
    if result.is_validation_error:
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_502_BAD_GATEWAY


@router.post("")
@proxy_rate_limit()
async def proxy_request(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    proxy_service: ProxyService = Depends(get_proxy_service),
):
    """
    Proxy an outbound HTTP request.

    The body is validated by the proxy itself so that malformed
    descriptors come back as a structured failure rather than a 422.
    """
    result = await proxy_service.proxy(payload)
    return JSONResponse(status_code=result_status_code(result), content=result.to_response())


@router.get("/cache", response_model=CacheStats)
async def cache_stats(cache: ResponseCache = Depends(get_response_cache)):
    return CacheStats(**cache.stats())


@router.delete("/cache")
async def clear_cache(cache: ResponseCache = Depends(get_response_cache)):
    cleared = cache.clear()
    logger.info(f"[Proxy] Cache cleared: {cleared} entries", extra={"event_type": "proxy_cache_cleared"})
    return {"success": True, "cleared": cleared}
