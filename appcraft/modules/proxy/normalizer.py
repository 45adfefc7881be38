"""
Request Normalizer

Turns a raw proxy request descriptor into a NormalizedRequest, or fails
fast with one of the ProxyValidationError subclasses. No network call
is made for a request that fails here.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from appcraft.core.config import settings
from appcraft.core.exceptions import (
    InvalidBodyError,
    InvalidMethodError,
    InvalidRequestError,
    InvalidUrlError,
    MissingUrlError,
)
from appcraft.schemas.proxy import ALLOWED_METHODS, ProxyRequest


# Methods that carry a request body
BODY_METHODS = {"POST", "PUT", "PATCH"}


@dataclass(frozen=True)
class ProxyDefaults:
    """Adjustable defaults applied to every request"""
    base_url: str
    timeout_ms: int = 10000
    max_retries: int = 3
    cache_ttl_ms: int = 300000
    method: str = "GET"

    @classmethod
    def from_settings(cls) -> "ProxyDefaults":
        return cls(
            base_url=settings.PROXY_BASE_URL,
            timeout_ms=settings.PROXY_DEFAULT_TIMEOUT_MS,
            max_retries=settings.PROXY_DEFAULT_MAX_RETRIES,
            cache_ttl_ms=settings.PROXY_DEFAULT_CACHE_TTL_MS,
        )


@dataclass
class NormalizedRequest:
    url: str
    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    content: Optional[bytes] = None
    timeout_ms: int = 10000
    max_retries: int = 3
    cache_ttl_ms: int = 300000
    cache_key: str = ""

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def is_cacheable_method(self) -> bool:
        return self.method == "GET"


def resolve_url(url: str, base_url: str) -> str:
    """Absolute http(s) URLs pass through; anything else is joined to base_url"""
    if url.lower().startswith(("http://", "https://")):
        return url
    base = base_url.rstrip("/")
    return f"{base}{url}" if url.startswith("/") else f"{base}/{url}"


def validate_absolute_url(target_url: str) -> str:
    try:
        parsed = httpx.URL(target_url)
    except httpx.InvalidURL as e:
        raise InvalidUrlError(target_url, str(e))

    if parsed.scheme not in ("http", "https"):
        raise InvalidUrlError(target_url, "URL must use http or https")
    if not parsed.host:
        raise InvalidUrlError(target_url, "URL has no host")
    return target_url


def serialize_body(body: Any) -> bytes:
    """Strings are sent unmodified; everything else is JSON-encoded"""
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    try:
        return json.dumps(
            body, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidBodyError(str(e))


def build_cache_key(method: str, url: str, body: Any) -> str:
    return f"{method}:{url}:{json.dumps(body, sort_keys=True, default=str)}"


def normalize_request(
    raw: Union[ProxyRequest, Mapping[str, Any]],
    defaults: ProxyDefaults,
) -> NormalizedRequest:
    """
    Validate and canonicalize a proxy request.

    Only a missing (None) body counts as absent. Falsy bodies such as
    ``""``, ``0`` or ``false`` are serialized and sent like any other value.

    Raises:
        MissingUrlError: no URL supplied
        InvalidUrlError: URL does not resolve to an absolute http(s) address
        InvalidMethodError: method outside ALLOWED_METHODS
        InvalidBodyError: body could not be serialized
        InvalidRequestError: numeric fields out of range or wrong type
    """
    if not isinstance(raw, ProxyRequest):
        try:
            raw = ProxyRequest.model_validate(dict(raw))
        except ValidationError as e:
            raise InvalidRequestError(
                [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                 for err in e.errors()]
            )

    url = (raw.url or "").strip()
    if not url:
        raise MissingUrlError()

    target_url = validate_absolute_url(resolve_url(url, defaults.base_url))

    method = (raw.method if raw.method is not None else defaults.method).strip().upper()
    if method not in ALLOWED_METHODS:
        raise InvalidMethodError(method, ALLOWED_METHODS)

    body = raw.body if method in BODY_METHODS else None
    content = serialize_body(body) if body is not None else None

    return NormalizedRequest(
        url=target_url,
        method=method,
        headers=dict(raw.headers),
        body=body,
        content=content,
        timeout_ms=raw.timeout_ms if raw.timeout_ms is not None else defaults.timeout_ms,
        max_retries=raw.max_retries if raw.max_retries is not None else defaults.max_retries,
        cache_ttl_ms=raw.cache_ttl_ms if raw.cache_ttl_ms is not None else defaults.cache_ttl_ms,
        cache_key=build_cache_key(method, target_url, body),
    )
