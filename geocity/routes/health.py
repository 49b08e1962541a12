"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, HTTPException
from geocity.config.firebase import get_db
from geocity.core.settings import settings
from datetime import datetime, timezone


router = APIRouter(tags=["Health"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "message": f"{settings.APP_NAME} API is running successfully!",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": _now_iso(),
    }


@router.get("/health/db")
async def database_health():
    """
    Database connectivity check.
    Lists collections, which needs a working Firestore connection.
    """
    try:
        db = get_db()
        collections = list(db.collections())

        return {
            "status": "healthy",
            "database": "mock-firestore" if settings.USE_MOCK_DB else "firestore",
            "connected": True,
            "collections_count": len(collections),
            "timestamp": _now_iso(),
        }
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )


@router.get("/firebase-health")
async def firebase_health():
    """Firebase project wiring: Firestore reachable and auth configured."""
    try:
        db = get_db()
        list(db.collections())
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Firebase unhealthy: {str(e)}")

    return {
        "status": "healthy",
        "firebase": {
            "auth": "configured" if settings.FIREBASE_WEB_API_KEY else "not-configured",
            "firestore": "connected",
            "projectId": settings.FIREBASE_PROJECT_ID,
            "mock": settings.USE_MOCK_DB,
        },
        "timestamp": _now_iso(),
    }
