# API endpoints
from . import chat, health, proxy

__all__ = ["chat", "health", "proxy"]
