"""
Result Formatter - every outcome becomes a ProxySuccess or ProxyFailure.
"""

import time

from appcraft.core.exceptions import ProxyValidationError
from appcraft.modules.proxy.cache import CacheEntry
from appcraft.modules.proxy.dispatcher import AttemptOutcome, OutcomeKind
from appcraft.modules.proxy.normalizer import NormalizedRequest
from appcraft.schemas.proxy import ErrorKind, ProxyFailure, ProxyResult, ProxySuccess


def now_ms() -> int:
    return int(time.time() * 1000)


def format_validation_failure(error: ProxyValidationError) -> ProxyFailure:
    return ProxyFailure(
        error_kind=ErrorKind(error.kind),
        code=error.code,
        message=error.message,
        attempts=0,
        retries_exhausted=False,
        timestamp=now_ms(),
        details=error.details or None,
        allowed_methods=getattr(error, "allowed_methods", None),
    )


def format_cache_hit(entry: CacheEntry) -> ProxySuccess:
    # No live response behind a hit, so no status/headers
    return ProxySuccess(
        success=True,
        data=entry.data,
        cached=True,
        attempts=0,
        timestamp=entry.stored_at,
    )


def format_outcome(outcome: AttemptOutcome, request: NormalizedRequest) -> ProxyResult:
    if outcome.kind is OutcomeKind.SUCCESS:
        status = outcome.status
        ok = 200 <= status < 300
        error_kind = ErrorKind.HTTP_CLIENT_ERROR if 400 <= status < 500 else None
        return ProxySuccess(
            success=ok,
            status=status,
            status_text=outcome.status_text,
            data=outcome.data,
            headers=outcome.headers,
            url=request.url,
            method=request.method,
            cached=False,
            attempts=outcome.attempt,
            timestamp=now_ms(),
            error=None if ok else f"HTTP {status}: {outcome.status_text}",
            code=None if ok else f"HTTP_{status}",
            error_kind=error_kind,
        )

    exhausted = outcome.kind is OutcomeKind.TRANSIENT
    return ProxyFailure(
        error_kind=outcome.error_kind,
        code=outcome.code,
        message=outcome.message,
        url=request.url,
        method=request.method,
        status=outcome.status,
        attempts=outcome.attempt,
        total_attempts=outcome.attempt if exhausted else None,
        retries_exhausted=exhausted,
        timestamp=now_ms(),
    )
