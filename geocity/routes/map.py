"""Map routes - active reports as marker clusters, and marker icons.

Clusters come back with their reports embedded, so the frontend can open
a cluster without another request.
"""

from typing import Optional
import logging

from fastapi import APIRouter, HTTPException, Query

from geocity.core.settings import settings
from geocity.models.report import Category, EmergencyType
from geocity.services.icons import generate_svg_icon, get_icon_config
from geocity.services.map_service import build_map_clusters
from geocity.services.report_service import list_report_documents

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/map", tags=["Map"])


@router.get("/clusters")
async def map_clusters(
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Map centre latitude"),
    lng: Optional[float] = Query(None, ge=-180, le=180, description="Map centre longitude"),
    radius_km: Optional[float] = Query(None, gt=0, description="Search radius around the centre"),
):
    """
    Active reports near the map centre, grouped by location.

    Without lat/lng every active report is clustered.
    """
    if (lat is None) != (lng is None):
        raise HTTPException(status_code=400, detail="lat and lng must be given together")

    center = {"lat": lat, "lng": lng} if lat is not None else None
    radius = radius_km if radius_km is not None else settings.MAP_VIEW_RADIUS_KM

    try:
        clusters = build_map_clusters(list_report_documents(), center=center, radius_km=radius)
    except Exception as e:
        logger.error(f"Failed to build map clusters: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to build map clusters: {str(e)}")

    return {
        "clusters": clusters,
        "count": len(clusters),
        "reportCount": sum(c["count"] for c in clusters),
        "center": center,
        "radiusKm": radius,
    }


@router.get("/icon")
async def map_icon(
    emergency_type: Optional[EmergencyType] = None,
    category: Optional[Category] = None,
):
    config = get_icon_config(
        emergency_type=emergency_type.value if emergency_type else None,
        category=category.value if category else None,
    )
    return {**config, "url": generate_svg_icon(config)}
