from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from appcraft import __version__
from appcraft.api.v1.router import api_router
from appcraft.core.config import settings
from appcraft.core.exceptions import AppCraftError, error_response
from appcraft.core.logging_config import logger
from appcraft.core.middleware import RequestLoggingMiddleware, RequestSizeLimitMiddleware
from appcraft.core.rate_limiter import limiter, rate_limit_exceeded_handler
from appcraft.modules.proxy.cache import ResponseCache
from appcraft.modules.proxy.service import ProxyService
from appcraft.services.codegen_service import CodeGenerationService


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Owns the response cache, its sweep task and the outbound HTTP client"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Proxy base URL: {settings.PROXY_BASE_URL}")
    logger.info("=" * 60)

    cache = ResponseCache()
    cache.start()
    proxy_service = ProxyService(cache)

    app.state.response_cache = cache
    app.state.proxy_service = proxy_service
    app.state.codegen_service = CodeGenerationService(proxy_service)

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await cache.stop()
    await proxy_service.aclose()
    logger.info(f"Released {len(cache)} cached responses")
    cache.clear()


async def appcraft_error_handler(request: Request, exc: AppCraftError):
    logger.warning(
        f"[API] {exc.code}: {exc.message}",
        extra={"event_type": "api_error", "error_code": exc.code, "http_path": request.url.path},
    )
    return JSONResponse(status_code=400, content=error_response(exc))


async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if settings.DEBUG else "An error occurred",
            }
        }
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Outbound HTTP proxy with retries and response caching, plus chat-driven code generation",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        redirect_slashes=False,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(AppCraftError, appcraft_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # Order matters - last added runs first
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE_BYTES)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": __version__,
            "docs": "/docs",
            "health": f"/api/{settings.API_VERSION}/health",
        }

    app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "appcraft.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )
