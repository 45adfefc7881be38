"""
Proxy request/result schemas.

Wire format is camelCase JSON (``timeoutMs``, ``statusText``, ``retriesExhausted``);
Python code uses the snake_case field names.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


class ErrorKind(str, Enum):
    """Failure taxonomy reported in ``errorKind``"""
    MISSING_URL = "MissingUrlError"
    INVALID_URL = "InvalidUrlError"
    INVALID_METHOD = "InvalidMethodError"
    INVALID_BODY = "InvalidBodyError"
    INVALID_REQUEST = "InvalidRequestError"
    TIMEOUT = "Timeout"
    NETWORK_ERROR = "NetworkError"
    HTTP_SERVER_ERROR = "HttpServerError"
    HTTP_CLIENT_ERROR = "HttpClientError"


VALIDATION_ERROR_KINDS = {
    ErrorKind.MISSING_URL,
    ErrorKind.INVALID_URL,
    ErrorKind.INVALID_METHOD,
    ErrorKind.INVALID_BODY,
    ErrorKind.INVALID_REQUEST,
}


class ProxyRequest(BaseModel):
    """
    Raw proxy request descriptor.

    Every field is optional here; the normalizer applies defaults and
    reports missing or malformed values as structured failures.
    The legacy ``timeout``/``retries``/``cacheTime`` field names
    are accepted as aliases.
    """
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    url: Optional[str] = None
    method: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[Any] = None
    timeout_ms: Optional[int] = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("timeoutMs", "timeout_ms", "timeout"),
    )
    max_retries: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("maxRetries", "max_retries", "retries"),
    )
    cache_ttl_ms: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("cacheTtlMs", "cache_ttl_ms", "cacheTime"),
    )


class _ProxyResultModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def to_response(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys and unset fields dropped"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProxySuccess(_ProxyResultModel):
    """
    A completed call. ``success`` mirrors "status is 2xx"; 4xx results
    use this shape too and carry ``error``/``code``/``errorKind``.
    Cache hits have no status, headers, url or method.
    """
    success: bool = True
    status: Optional[int] = None
    status_text: Optional[str] = None
    data: Any = None
    headers: Optional[Dict[str, str]] = None
    url: Optional[str] = None
    method: Optional[str] = None
    cached: bool = False
    attempts: int = 1
    timestamp: int
    error: Optional[str] = None
    code: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


class ProxyFailure(_ProxyResultModel):
    """A call that produced no usable response"""
    success: Literal[False] = False
    error_kind: ErrorKind
    code: str
    message: str
    url: Optional[str] = None
    method: Optional[str] = None
    status: Optional[int] = None
    attempts: int = 0
    total_attempts: Optional[int] = None
    retries_exhausted: bool = False
    timestamp: int
    details: Optional[Dict[str, Any]] = None
    allowed_methods: Optional[List[str]] = None

    @property
    def is_validation_error(self) -> bool:
        return self.error_kind in VALIDATION_ERROR_KINDS


ProxyResult = Union[ProxySuccess, ProxyFailure]


class CacheStats(BaseModel):
    entries: int
    sweep_running: bool
    sweep_interval_ms: int
    retention_ms: int
