"""
Fisio Gossos - booking backend for canine physiotherapy
FastAPI Application Entry Point
"""
import logging
import traceback
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from fisio_gossos.core.config import settings
from fisio_gossos.core.database import AsyncSessionLocal, engine
from fisio_gossos.core.logging_config import setup_logging
from fisio_gossos.api.v1 import api_router
from fisio_gossos.repositories.system_log_repository import SystemLogRepository
from fisio_gossos.services.system_log_service import SystemLogService

# Configure logging before anything else
setup_logging("api")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events.
    Handles startup and shutdown logic.
    """
    # Startup
    logger.info("%s v%s starting (env=%s debug=%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT, settings.DEBUG)

    yield

    # Shutdown
    await engine.dispose()
    logger.info("%s shutting down...", settings.APP_NAME)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Booking backend for canine physiotherapy: error tracking, system and email logs",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Trusted Host Middleware (security)
if not settings.DEBUG:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS,
    )

# Include API router
app.include_router(api_router, prefix="/api/v1")


async def record_unhandled_exception(request: Request, exc: Exception) -> None:
    """Write an UNHANDLED_EXCEPTION row to error_logs in its own session."""
    async with AsyncSessionLocal() as db:
        await SystemLogService(SystemLogRepository(db)).log_error(
            error_type="UNHANDLED_EXCEPTION",
            error_message=str(exc) or exc.__class__.__name__,
            component=request.url.path,
            error_code=exc.__class__.__name__,
            stack_trace="".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )[:5000],
            additional_data={"method": request.method, "query": str(request.url.query)},
            user_agent=request.headers.get("user-agent"),
        )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    await record_unhandled_exception(request, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - health check"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "operational",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Detailed health check endpoint.
    Returns service status and dependencies.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fisio_gossos.main:app",
        host="0.0.0.0",
        port=settings.UVICORN_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
