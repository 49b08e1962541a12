"""
Report service - Business logic for citizen report handling.
Handles Firestore CRUD operations for the `raised-issue` collection.

DESIGN NOTE:
- Photo upload and the Firestore write MUST succeed
- Geocoding, AI analysis, user counters, live broadcast and Discord are
  best-effort and never fail a submission
- AI output is advisory only: priority comes from the emergency flag
"""

from datetime import datetime
from typing import Dict, List, Optional
import logging

from firebase_admin import firestore

from geocity.config.firebase import get_db
from geocity.core.settings import settings
from geocity.models.report import ReportCreate, ReportSubmissionResult
from geocity.services import discord_service
from geocity.services.ai_plugin.registry import analyze_report_image
from geocity.services.expiration import get_time_remaining, partition_reports
from geocity.services.geocoding.resolver import geocode
from geocity.services.realtime import get_connection_manager
from geocity.services.storage_service import generate_unique_filename, upload_report_photo
from geocity.utils.firestore_helpers import document_to_dict

logger = logging.getLogger(__name__)

REPORTS_COLLECTION = "raised-issue"
USERS_COLLECTION = "user"


def _resolve_coordinates(report_data: ReportCreate) -> Optional[Dict[str, float]]:
    if report_data.coordinates is not None:
        return {"lat": report_data.coordinates.lat, "lng": report_data.coordinates.lng}

    result = geocode(report_data.location)
    if result is None:
        logger.warning(f"⚠️ Could not geocode report location: {report_data.location!r}")
        return None
    return {"lat": result["lat"], "lng": result["lng"]}


def _resolve_image_analysis(report_data: ReportCreate) -> Optional[Dict]:
    if report_data.image_analysis is not None:
        return report_data.image_analysis.to_firestore()
    if not settings.AI_ENABLED:
        return None

    analysis = analyze_report_image(report_data.photo)
    if analysis.confidence == 0:
        # Fallback analysis carries no signal; keep the marker at default priority
        logger.info("AI analysis unavailable for report; stored without imageAnalysis")
        return None
    return analysis.to_firestore()


def _increment_raised_issues(db, user_id: str) -> None:
    try:
        db.collection(USERS_COLLECTION).document(user_id).update({"raisedIssues": firestore.Increment(1)})
        logger.info(f"Incremented raisedIssues for user {user_id}")
    except Exception as e:
        logger.warning(f"⚠️ Could not increment raisedIssues for user {user_id}: {e}")


def build_report_document(
    report_data: ReportCreate,
    image_url: str,
    coordinates: Optional[Dict[str, float]],
    image_analysis: Optional[Dict],
) -> Dict:
    """Firestore document for a new report, in the camelCase schema the web client reads."""
    photo_details = report_data.photo_details
    device_info = report_data.device_info

    return {
        "photo": image_url,
        "photoDetails": {
            "name": photo_details.name,
            "size": photo_details.size,
            "type": photo_details.type,
            "lastModified": photo_details.last_modified,
            "user_id": report_data.user_id or "anonymous",
        },
        "location": report_data.location,
        "coordinates": coordinates,
        "description": report_data.description,
        "isEmergency": report_data.is_emergency,
        "emergencyType": report_data.emergency_type.value if report_data.emergency_type else None,
        "deviceInfo": {
            "publicIP": device_info.public_ip,
            "userAgent": device_info.user_agent,
            "screenResolution": device_info.screen_resolution,
            "timezone": device_info.timezone,
            "language": device_info.language,
            "timestamp": device_info.timestamp,
            "deviceType": device_info.device_type.value,
        },
        "imageAnalysis": image_analysis,
        "expirationHours": report_data.expiration_hours or settings.DEFAULT_EXPIRATION_HOURS,
        "userId": report_data.user_id or "",
        "createdAt": firestore.SERVER_TIMESTAMP,
        "updatedAt": firestore.SERVER_TIMESTAMP,
        "status": "pending",
        "priority": "high" if report_data.is_emergency else "medium",
        "assignedTo": None,
        "resolvedAt": None,
        "resolutionNotes": None,
    }


async def create_report(report_data: ReportCreate) -> ReportSubmissionResult:
    """
    Create a new citizen report.

    Flow:
    1. Upload the photo (must succeed)
    2. Resolve coordinates and AI analysis (best-effort)
    3. Store the report in Firestore (must succeed)
    4. Bump the reporter's raisedIssues, push `new-report` and the fresh
       `reports-list` to live maps, alert Discord for emergencies (all
       best-effort)

    Raises:
        ValueError: the photo could not be decoded
        RuntimeError: upload or Firestore write failed
    """
    db = get_db()

    logger.info(
        f"Processing report submission: location={report_data.location!r}, "
        f"emergency={report_data.is_emergency}, type={report_data.emergency_type}, "
        f"size={report_data.photo_details.size}, user={report_data.user_id}"
    )

    filename = generate_unique_filename(report_data.photo_details.name, report_data.photo_details.type)
    image_url = upload_report_photo(report_data.photo, filename, report_data.photo_details.type)
    logger.info(f"✅ Image uploaded successfully: {filename}")

    coordinates = _resolve_coordinates(report_data)
    image_analysis = _resolve_image_analysis(report_data)

    doc_ref = db.collection(REPORTS_COLLECTION).document()
    report_doc = build_report_document(report_data, image_url, coordinates, image_analysis)
    try:
        doc_ref.set(report_doc)
        logger.info(f"✅ Report saved to Firestore: {doc_ref.id}")
    except Exception as e:
        logger.error(f"Failed to save report to Firestore: {e}", exc_info=True)
        raise RuntimeError("Failed to save report to database")

    if report_data.user_id:
        _increment_raised_issues(db, report_data.user_id)

    stored = document_to_dict(doc_ref.get())

    try:
        await get_connection_manager().broadcast_new_report(stored)
    except Exception as e:
        logger.warning(f"⚠️ Live broadcast failed for report {doc_ref.id}: {e}")
    await broadcast_active_reports()

    if report_data.is_emergency:
        sent = discord_service.notify(
            discord_service.format_report_alert(stored),
            is_emergency=True,
            image_url=image_url,
        )
        logger.info(f"Discord emergency alert for {doc_ref.id}: {'sent' if sent else 'not sent'}")

    return ReportSubmissionResult(
        report_id=doc_ref.id,
        image_url=image_url,
        filename=filename,
        location=report_data.location,
        coordinates=coordinates,
        is_emergency=report_data.is_emergency,
        emergency_type=report_data.emergency_type,
        image_analysis=image_analysis,
        expiration_hours=report_doc["expirationHours"],
        user_id=report_data.user_id,
        status="pending",
        priority=report_doc["priority"],
    )


def _with_time_remaining(report: Dict, now: Optional[datetime]) -> Dict:
    report["timeRemaining"] = get_time_remaining(report, now)
    return report


def list_report_documents() -> List[Dict]:
    """Every stored report, newest first, as JSON-friendly dicts."""
    db = get_db()
    query = db.collection(REPORTS_COLLECTION).order_by("createdAt", direction=firestore.Query.DESCENDING)
    return [document_to_dict(doc) for doc in query.stream()]


async def get_all_reports(include_expired: bool = False, now: Optional[datetime] = None) -> List[Dict]:
    """
    Reports newest first. Expired reports (and reports without a creation
    time) are hidden unless include_expired is set.
    """
    reports = list_report_documents()
    if not include_expired:
        reports, _ = partition_reports(reports, now)
    return [_with_time_remaining(r, now) for r in reports]


async def broadcast_active_reports(now: Optional[datetime] = None) -> None:
    """Push the current active `reports-list` to every live map."""
    try:
        await get_connection_manager().broadcast_reports_list(await get_all_reports(now=now))
    except Exception as e:
        logger.warning(f"⚠️ Could not broadcast reports list: {e}")


async def get_report_by_id(report_id: str) -> Optional[Dict]:
    db = get_db()
    doc = db.collection(REPORTS_COLLECTION).document(report_id).get()
    if not doc.exists:
        return None
    return _with_time_remaining(document_to_dict(doc), None)


async def delete_report(report_id: str) -> bool:
    """Delete a report and tell live maps. False when it did not exist."""
    db = get_db()
    doc_ref = db.collection(REPORTS_COLLECTION).document(report_id)
    if not doc_ref.get().exists:
        return False

    doc_ref.delete()
    logger.info(f"Report deleted: {report_id}")
    await get_connection_manager().broadcast_report_expired(report_id)
    await broadcast_active_reports()
    return True
