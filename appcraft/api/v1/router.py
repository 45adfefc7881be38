from fastapi import APIRouter

from appcraft.api.v1.endpoints import chat, health, proxy

api_router = APIRouter()

api_router.include_router(health.router)


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"status": "healthy", "service": "appcraft-backend"}


api_router.include_router(proxy.router)
api_router.include_router(chat.router)
