"""
Cleanup service - maintenance jobs over the `raised-issue` collection.

- expired report sweep (manual endpoints, cron and the background sweeper)
- coordinates back-fill for reports stored before geocoding existed
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from firebase_admin import firestore

from geocity.config.firebase import get_db
from geocity.core.settings import settings
from geocity.services.expiration import get_expiration_hours, partition_reports
from geocity.services.geocoding.resolver import geocode
from geocity.services.map_service import get_report_coordinates
from geocity.services.realtime import get_connection_manager
from geocity.services.report_service import REPORTS_COLLECTION, broadcast_active_reports
from geocity.utils.firestore_helpers import document_to_dict

logger = logging.getLogger(__name__)


class CleanupService:
    """
    Expired report cleanup.

    Every report is checked independently: one failed delete never stops
    the rest of the sweep.
    """

    def __init__(self):
        self.db = get_db()

    def _all_reports(self) -> List[Dict]:
        return [document_to_dict(doc) for doc in self.db.collection(REPORTS_COLLECTION).stream()]

    def find_expired_reports(self, now: Optional[datetime] = None) -> List[Dict]:
        _, expired = partition_reports(self._all_reports(), now)
        return expired

    def get_cleanup_stats(self, now: Optional[datetime] = None) -> Dict:
        reports = self._all_reports()
        active, expired = partition_reports(reports, now)
        return {
            "stats": {
                "total": len(reports),
                "active": len(active),
                "expired": len(expired),
            },
            "expiredReports": [
                {
                    "id": r["id"],
                    "location": r.get("location"),
                    "createdAt": r.get("createdAt"),
                    "expirationHours": get_expiration_hours(r),
                }
                for r in expired
            ],
        }

    async def cleanup_expired_reports(self, now: Optional[datetime] = None) -> Dict:
        """
        Delete every expired report and tell live maps about each deletion,
        then send them the remaining active list.
        """
        expired = self.find_expired_reports(now)
        manager = get_connection_manager()
        results = []

        for report in expired:
            report_id = report["id"]
            try:
                self.db.collection(REPORTS_COLLECTION).document(report_id).delete()
                logger.info(f"Deleted expired report: {report_id}")
                results.append({"id": report_id, "status": "deleted"})
            except Exception as e:
                logger.error(f"Error deleting report {report_id}: {e}")
                results.append({"id": report_id, "status": "error", "error": str(e)})
                continue

            try:
                await manager.broadcast_report_expired(report_id)
            except Exception as e:
                logger.warning(f"⚠️ Could not broadcast expiry of {report_id}: {e}")

        deleted = sum(1 for r in results if r["status"] == "deleted")
        errors = sum(1 for r in results if r["status"] == "error")
        if expired:
            logger.info(f"✅ Cleanup completed: {deleted} deleted, {errors} errors")
        if deleted:
            await broadcast_active_reports(now)

        return {
            "totalExpired": len(expired),
            "deleted": deleted,
            "errors": errors,
            "results": results,
        }

    def migrate_coordinates(self) -> Dict:
        """Back-fill `coordinates` by forward geocoding each report's location."""
        results = []
        reports = self._all_reports()

        for report in reports:
            report_id = report["id"]
            if get_report_coordinates(report) is not None:
                continue

            location = (report.get("location") or "").strip()
            if not location:
                results.append({"id": report_id, "status": "skipped", "reason": "no location"})
                continue

            result = geocode(location)
            if result is None:
                results.append({"id": report_id, "status": "failed", "reason": "geocoding failed"})
                continue

            coordinates = {"lat": result["lat"], "lng": result["lng"]}
            try:
                self.db.collection(REPORTS_COLLECTION).document(report_id).update({
                    "coordinates": coordinates,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                })
                results.append({"id": report_id, "status": "updated", "coordinates": coordinates})
            except Exception as e:
                logger.error(f"Failed to store coordinates for {report_id}: {e}")
                results.append({"id": report_id, "status": "failed", "reason": str(e)})

        updated = sum(1 for r in results if r["status"] == "updated")
        logger.info(f"✅ Coordinates migration: {updated} of {len(reports)} reports updated")
        return {
            "total": len(reports),
            "updated": updated,
            "skipped": sum(1 for r in results if r["status"] == "skipped"),
            "failed": sum(1 for r in results if r["status"] == "failed"),
            "results": results,
        }


_cleanup_service = None


def get_cleanup_service() -> CleanupService:
    global _cleanup_service
    if _cleanup_service is None:
        _cleanup_service = CleanupService()
    return _cleanup_service


async def run_auto_cleanup_loop(interval_seconds: Optional[float] = None):
    """Background sweeper started on app startup when AUTO_CLEANUP_ENABLED."""
    interval = interval_seconds or settings.AUTO_CLEANUP_INTERVAL_SECONDS
    logger.info(f"Auto-cleanup sweeper started (every {interval}s)")
    while True:
        try:
            result = await get_cleanup_service().cleanup_expired_reports(datetime.now(timezone.utc))
            if result["deleted"]:
                logger.info(f"Auto-cleanup: deleted {result['deleted']} expired reports")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Auto-cleanup sweep failed: {e}", exc_info=True)
        await asyncio.sleep(interval)
