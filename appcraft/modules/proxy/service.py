"""
Proxy Service

Composition of normalizer, cache, dispatcher, retry controller and
formatter behind a single call:

    result = await proxy_service.proxy({"url": "/posts/1"})

proxy() never raises for validation, transport, timeout or HTTP status
problems; those come back as ProxyFailure / non-2xx ProxySuccess.
"""

import asyncio
import time
from typing import Any, Mapping, Optional, Union

import httpx

from appcraft.core.config import settings
from appcraft.core.exceptions import ProxyValidationError
from appcraft.core.logging_config import logger
from appcraft.modules.proxy.cache import ResponseCache
from appcraft.modules.proxy.dispatcher import AttemptOutcome, Dispatcher, OutcomeKind
from appcraft.modules.proxy.formatter import (
    format_cache_hit,
    format_outcome,
    format_validation_failure,
)
from appcraft.modules.proxy.normalizer import NormalizedRequest, ProxyDefaults, normalize_request
from appcraft.modules.proxy.retry import RetryPolicy, SleepFn, run_with_retries
from appcraft.schemas.proxy import ProxyRequest, ProxyResult


def is_cacheable(request: NormalizedRequest, outcome: AttemptOutcome) -> bool:
    """
    Only successful GETs with non-empty, non-binary data.

    "Empty" means no body or an empty string. JSON ``0``, ``false``,
    ``[]`` and ``{}`` are real payloads and are cached.
    """
    if not request.is_cacheable_method or outcome.kind is not OutcomeKind.SUCCESS:
        return False
    if not (200 <= outcome.status < 300):
        return False
    if outcome.is_binary:
        return False
    return outcome.data is not None and outcome.data != ""


class ProxyService:
    """Outbound HTTP proxy with retry/backoff and GET response caching"""

    def __init__(
        self,
        cache: ResponseCache,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        defaults: Optional[ProxyDefaults] = None,
        user_agent: Optional[str] = None,
        backoff_base: Optional[float] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.cache = cache
        self.defaults = defaults or ProxyDefaults.from_settings()
        self.backoff_base = (
            backoff_base if backoff_base is not None else settings.PROXY_BACKOFF_BASE_SECONDS
        )
        self._sleep = sleep
        # Per-attempt deadlines come from each request's timeoutMs
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(None),
            follow_redirects=True,
        )
        self.dispatcher = Dispatcher(self._client, user_agent or settings.PROXY_USER_AGENT)

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()

    async def proxy(self, raw: Union[ProxyRequest, Mapping[str, Any]]) -> ProxyResult:
        start_time = time.perf_counter()

        try:
            request = normalize_request(raw, self.defaults)
        except ProxyValidationError as e:
            logger.warning(
                f"[Proxy] Rejected request: {e.code} - {e.message}",
                extra={"event_type": "proxy_validation_error", "error_code": e.code},
            )
            return format_validation_failure(e)

        if request.is_cacheable_method:
            entry = self.cache.lookup(request.cache_key, request.cache_ttl_ms)
            if entry is not None:
                logger.info(f"[Proxy] Cache hit: {request.method} {request.url}")
                return format_cache_hit(entry)

        policy = RetryPolicy(max_retries=request.max_retries, backoff_base=self.backoff_base)
        outcome = await run_with_retries(
            lambda attempt: self.dispatcher.dispatch(request, attempt),
            policy,
            sleep=self._sleep,
        )

        result = format_outcome(outcome, request)

        if is_cacheable(request, outcome):
            self.cache.store(request.cache_key, outcome.data)

        if outcome.is_transient:
            logger.error(
                f"[Proxy] {request.method} {request.url} failed after "
                f"{outcome.attempt} attempts: {outcome.message}",
                extra={
                    "event_type": "proxy_retries_exhausted",
                    "error_kind": outcome.error_kind.value,
                    "total_attempts": outcome.attempt,
                }
            )

        logger.log_performance(
            f"proxy {request.method} {request.url}",
            (time.perf_counter() - start_time) * 1000,
            threshold_ms=request.timeout_ms,
        )
        return result
