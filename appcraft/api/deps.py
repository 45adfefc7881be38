"""
FastAPI dependencies.

The services live on app.state; they are created and torn down by the
application lifespan in appcraft.main.
"""

from fastapi import Request

from appcraft.modules.proxy.cache import ResponseCache
from appcraft.modules.proxy.service import ProxyService
from appcraft.services.codegen_service import CodeGenerationService


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def get_proxy_service(request: Request) -> ProxyService:
    return request.app.state.proxy_service


def get_codegen_service(request: Request) -> CodeGenerationService:
    return request.app.state.codegen_service
