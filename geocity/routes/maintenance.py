"""
Maintenance and cron endpoints.

- expired report cleanup (manual + auto)
- coordinates migration
- emergency sensor monitor (manual + cron)

GET on the cleanup endpoints reports what would be removed; POST removes it.
"""

from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import APIRouter, Header, HTTPException, status

from geocity.core.settings import settings
from geocity.services.cleanup_service import get_cleanup_service
from geocity.services.emergency_monitor import get_emergency_monitor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Maintenance"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/cleanup-expired-reports")
@router.get("/auto-cleanup")
async def cleanup_stats():
    try:
        stats = get_cleanup_service().get_cleanup_stats()
        return {"success": True, **stats, "timestamp": _now_iso()}
    except Exception as e:
        logger.error(f"Error getting cleanup stats: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get cleanup stats: {str(e)}")


@router.post("/cleanup-expired-reports")
async def cleanup_expired_reports():
    try:
        details = await get_cleanup_service().cleanup_expired_reports()
        return {
            "success": True,
            "message": f"Cleanup completed. Deleted {details['deleted']} expired reports.",
            "details": details,
            "timestamp": _now_iso(),
        }
    except Exception as e:
        logger.error(f"Error in cleanup job: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to cleanup expired reports: {str(e)}")


@router.post("/auto-cleanup")
async def auto_cleanup():
    try:
        details = await get_cleanup_service().cleanup_expired_reports()
        return {
            "success": True,
            "message": f"Auto-cleanup completed. Deleted {details['deleted']} expired reports.",
            "deletedCount": details["deleted"],
            "timestamp": _now_iso(),
        }
    except Exception as e:
        logger.error(f"Auto-cleanup error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Auto-cleanup failed: {str(e)}")


@router.get("/migrate-coordinates")
async def describe_migration():
    return {
        "success": True,
        "message": "Coordinates migration API is operational",
        "endpoint": "/api/migrate-coordinates",
        "method": "POST",
        "description": "Migrate existing reports to include coordinates for better map performance",
        "timestamp": _now_iso(),
    }


@router.post("/migrate-coordinates")
async def migrate_coordinates():
    try:
        logger.info("🔄 Starting coordinates migration...")
        result = get_cleanup_service().migrate_coordinates()
        return {
            "success": True,
            "message": "Coordinates migration completed successfully",
            "data": result,
            "timestamp": _now_iso(),
        }
    except Exception as e:
        logger.error(f"❌ Migration failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to migrate coordinates: {str(e)}")


def _run_emergency_monitor():
    try:
        result = get_emergency_monitor().run()
        return {"success": True, **result, "timestamp": _now_iso()}
    except Exception as e:
        logger.error(f"❌ Emergency monitoring job failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Emergency monitoring job failed: {str(e)}")


@router.get("/emergency-monitor")
@router.post("/emergency-monitor")
async def emergency_monitor():
    return _run_emergency_monitor()


@router.get("/cron/emergency-monitor")
@router.post("/cron/emergency-monitor")
async def cron_emergency_monitor(authorization: Optional[str] = Header(None)):
    """Scheduler entry point. Requires `Bearer CRON_SECRET` when a secret is configured."""
    if settings.CRON_SECRET and authorization != f"Bearer {settings.CRON_SECRET}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return _run_emergency_monitor()
