"""
Dispatcher - one outbound HTTP attempt with a hard deadline.

Each attempt returns a tagged AttemptOutcome instead of raising, so the
retry loop can inspect the tag:

    SUCCESS    any response below 500 (4xx included, the caller inspects status)
    TRANSIENT  5xx, timeout, transport failure - eligible for retry
    FATAL      failure that a retry cannot fix
"""

import asyncio
import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from appcraft.core.logging_config import logger
from appcraft.modules.proxy.normalizer import NormalizedRequest
from appcraft.schemas.proxy import ErrorKind


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    TRANSIENT = "transient"
    FATAL = "fatal"


@dataclass
class AttemptOutcome:
    kind: OutcomeKind
    attempt: int
    url: str
    method: str
    duration_ms: float = 0.0
    status: Optional[int] = None
    status_text: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    data: Any = None
    is_binary: bool = False
    error_kind: Optional[ErrorKind] = None
    code: Optional[str] = None
    message: Optional[str] = None

    @property
    def is_transient(self) -> bool:
        return self.kind is OutcomeKind.TRANSIENT


def is_json_content_type(content_type: str) -> bool:
    content_type = content_type.lower()
    return "application/json" in content_type or "+json" in content_type


async def read_response_data(response: httpx.Response) -> Tuple[Any, bool]:
    """
    Read a streamed response body according to its content type.

    Returns (data, is_binary). Binary payloads are counted chunk by chunk
    and summarized rather than kept in memory.
    """
    content_type = response.headers.get("content-type", "")

    if is_json_content_type(content_type):
        await response.aread()
        try:
            return response.json(), False
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text, False

    if "text/" in content_type.lower():
        await response.aread()
        return response.text, False

    size = 0
    async for chunk in response.aiter_bytes():
        size += len(chunk)
    return {"type": "binary", "size": size, "contentType": content_type}, True


class Dispatcher:
    """Performs single attempts through a shared httpx.AsyncClient"""

    def __init__(self, client: httpx.AsyncClient, user_agent: str):
        self.client = client
        self.user_agent = user_agent

    def build_headers(self, caller_headers: Mapping[str, str]) -> httpx.Headers:
        """Default headers overlaid by caller headers (case-insensitive, caller wins)"""
        headers = httpx.Headers({
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        })
        headers.update(caller_headers)
        return headers

    async def _send(self, request: NormalizedRequest) -> Tuple[httpx.Response, Any, bool]:
        http_request = self.client.build_request(
            request.method,
            request.url,
            headers=self.build_headers(request.headers),
            content=request.content,
            timeout=httpx.Timeout(request.timeout_seconds),
        )
        response = await self.client.send(http_request, stream=True)
        try:
            data, is_binary = await read_response_data(response)
        finally:
            await response.aclose()
        return response, data, is_binary

    async def dispatch(self, request: NormalizedRequest, attempt: int) -> AttemptOutcome:
        """Run one attempt; the deadline covers connect, send and body read"""
        start_time = time.perf_counter()

        def failure(kind: OutcomeKind, error_kind: ErrorKind, code: str, message: str) -> AttemptOutcome:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.log_proxy_attempt(
                request.method, request.url, attempt, error_kind.value, duration_ms,
                error_message=message,
            )
            return AttemptOutcome(
                kind=kind,
                attempt=attempt,
                url=request.url,
                method=request.method,
                duration_ms=duration_ms,
                error_kind=error_kind,
                code=code,
                message=message,
            )

        try:
            response, data, is_binary = await asyncio.wait_for(
                self._send(request), timeout=request.timeout_seconds
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return failure(OutcomeKind.TRANSIENT, ErrorKind.TIMEOUT, "TIMEOUT", "Request timeout")
        except httpx.UnsupportedProtocol as e:
            return failure(OutcomeKind.FATAL, ErrorKind.NETWORK_ERROR, "FETCH_ERROR", str(e))
        except httpx.RequestError as e:
            message = str(e) or type(e).__name__
            return failure(OutcomeKind.TRANSIENT, ErrorKind.NETWORK_ERROR, "FETCH_ERROR", message)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        outcome = AttemptOutcome(
            kind=OutcomeKind.SUCCESS,
            attempt=attempt,
            url=request.url,
            method=request.method,
            duration_ms=duration_ms,
            status=status,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            data=data,
            is_binary=is_binary,
        )

        if status >= 500:
            outcome.kind = OutcomeKind.TRANSIENT
            outcome.error_kind = ErrorKind.HTTP_SERVER_ERROR
            outcome.code = f"HTTP_{status}"
            outcome.message = f"HTTP {status}: {response.reason_phrase}"

        logger.log_proxy_attempt(
            request.method, request.url, attempt,
            "success" if status < 400 else f"http_{status}",
            duration_ms, status_code=status,
        )
        return outcome
