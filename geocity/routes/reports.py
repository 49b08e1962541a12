"""
Report endpoints - API routes for citizen report submission and retrieval.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, HTTPException, Query, status

from geocity.models.report import ReportCreate
from geocity.services.report_service import (
    REPORTS_COLLECTION,
    create_report,
    delete_report,
    get_all_reports,
    get_report_by_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reports"])


@router.post("/report-issue", status_code=status.HTTP_201_CREATED)
async def submit_report(report: ReportCreate):
    """
    Submit a new citizen report.

    This endpoint:
    1. Uploads the photo to storage
    2. Stores the report in Firestore (raised-issue collection)
    3. Notifies live maps, and Discord for emergencies
    """
    try:
        logger.info(f"📝 POST /report-issue - location={report.location!r}, emergency={report.is_emergency}")
        result = await create_report(report)
        logger.info(f"✅ Report created successfully: {result.report_id}")
        return {
            "success": True,
            "data": result.model_dump(by_alias=True, mode="json"),
            "message": (
                "Emergency report submitted successfully. Authorities have been notified."
                if report.is_emergency
                else "Report submitted successfully. We will review and take appropriate action."
            ),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"❌ POST /report-issue - Report creation failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process report submission: {str(e)}"
        )


@router.get("/report-issue")
async def describe_report_endpoint():
    return {
        "success": True,
        "message": "Report submission API is operational",
        "endpoints": {
            "POST": "/api/report-issue",
            "description": "Submit a new issue report with image and metadata",
        },
        "requiredFields": [
            "photo (base64 image)",
            "photoDetails (name, size, type, lastModified)",
            "location (string)",
            "description (string)",
            "isEmergency (boolean)",
            "deviceInfo (publicIP, userAgent, screenResolution, timezone, language, timestamp, deviceType)",
        ],
        "optionalFields": [
            "emergencyType (MEDICAL | LAW_ENFORCEMENT | FIRE_HAZARD | ENVIRONMENTAL)",
            "imageAnalysis (AI analysis results)",
            "expirationHours (number)",
            "userId (string)",
            "coordinates ({lat, lng})",
        ],
        "collection": REPORTS_COLLECTION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/reports")
async def list_reports(include_expired: bool = Query(False, alias="includeExpired")):
    try:
        reports = await get_all_reports(include_expired=include_expired)
        return {"reports": reports, "count": len(reports)}
    except Exception as e:
        logger.error(f"Failed to retrieve reports: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to retrieve reports: {str(e)}",
        )


@router.get("/reports/{report_id}")
async def get_report(report_id: str):
    try:
        report = await get_report_by_id(report_id)
    except Exception as e:
        logger.error(f"Failed to retrieve report {report_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to retrieve report: {str(e)}")

    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.delete("/reports/{report_id}")
async def remove_report(report_id: str):
    try:
        deleted = await delete_report(report_id)
    except Exception as e:
        logger.error(f"Failed to delete report {report_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete report: {str(e)}")

    if not deleted:
        raise HTTPException(status_code=404, detail="Report not found")
    return {"message": "Report deleted successfully", "reportId": report_id}
