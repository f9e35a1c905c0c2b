"""
API v1 Router
Aggregates all API endpoints.
"""
from fastapi import APIRouter

from fisio_gossos.api.v1.endpoints import (
    auth,
    email_logs,
    errors,
    pwa,
    system_logs,
    users,
)

api_router = APIRouter()

# Health check for API
@api_router.get("/ping", tags=["Health"])
async def ping():
    """Simple ping endpoint to verify API is responding"""
    return {"message": "pong", "api_version": "v1"}

# Include endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(errors.router, prefix="/errors", tags=["User Errors"])
api_router.include_router(system_logs.router, prefix="/system-logs", tags=["System Logs"])
api_router.include_router(email_logs.router, prefix="/email-logs", tags=["Email Logs"])
api_router.include_router(pwa.router, prefix="/pwa", tags=["PWA"])
