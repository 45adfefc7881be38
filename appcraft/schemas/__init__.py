# Pydantic schemas
from appcraft.schemas.proxy import (
    ALLOWED_METHODS,
    ErrorKind,
    ProxyRequest,
    ProxySuccess,
    ProxyFailure,
    ProxyResult,
    CacheStats,
)
from appcraft.schemas.chat import ChatRequest, ChatResponse, ClassifyResponse

__all__ = [
    "ALLOWED_METHODS",
    "ErrorKind",
    "ProxyRequest",
    "ProxySuccess",
    "ProxyFailure",
    "ProxyResult",
    "CacheStats",
    "ChatRequest",
    "ChatResponse",
    "ClassifyResponse",
]
