"""
GEOCITY - FastAPI Application Entry Point

Citizen incident reporting backend: photo reports on a live city map.

DESIGN PRINCIPLES:
- Upload + Firestore write must succeed; everything else is best-effort
- AI analysis is advisory only and never blocks a submission
- Reports disappear from the map once they expire
"""

import asyncio
import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from geocity.config.firebase import initialize_firestore
from geocity.core.settings import settings
from geocity.routes import analysis, auth, health, maintenance, map, realtime, reports, social, users
from geocity.services.cleanup_service import run_auto_cleanup_loop
from geocity.services.storage_service import MOCK_UPLOAD_URL_PREFIX

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Citizen incident reporting with a live city map",
    debug=settings.DEBUG
)

_cleanup_task = None


# Global exception handler to catch ALL exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(f"🔥 Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"🔥 Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup:
    Firestore connection and the expired report sweeper.
    """
    global _cleanup_task
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

    try:
        initialize_firestore()
    except Exception as e:
        logger.warning(f"Firestore initialization failed: {e}")
        logger.warning("The app will start but database operations may fail.")
        return

    if settings.AUTO_CLEANUP_ENABLED and _cleanup_task is None:
        _cleanup_task = asyncio.create_task(run_auto_cleanup_loop())


@app.on_event("shutdown")
async def shutdown_event():
    global _cleanup_task
    if _cleanup_task is not None:
        _cleanup_task.cancel()
        _cleanup_task = None
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router, prefix="/api")
app.include_router(reports.router, prefix="/api")
app.include_router(maintenance.router, prefix="/api")
app.include_router(map.router, prefix="/api")
app.include_router(analysis.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(social.router, prefix="/api")
app.include_router(realtime.router)

if settings.USE_MOCK_DB:
    os.makedirs(settings.MOCK_UPLOAD_DIR, exist_ok=True)
    app.mount(MOCK_UPLOAD_URL_PREFIX, StaticFiles(directory=settings.MOCK_UPLOAD_DIR), name="uploads")


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/api/health",
        "websocket": "/ws/reports",
    }
