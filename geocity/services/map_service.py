"""
Map service - turn active reports into map marker clusters for the frontend.

Clustering is deliberately simple:
- keep reports within MAP_VIEW_RADIUS_KM of the current map centre
- group by normalized location string
- order each group emergency first, then newest first
"""

import math
import logging
from datetime import datetime
from typing import Dict, List, Optional

from geocity.core.settings import settings
from geocity.services.icons import generate_svg_icon, get_cluster_icon
from geocity.utils.firestore_helpers import parse_timestamp

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

CATEGORY_PRIORITIES = {
    "DANGER": "high",
    "WARNING": "medium",
    "SAFE": "safe",
}


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def get_report_coordinates(report: Dict) -> Optional[Dict[str, float]]:
    """Stored coordinates of a report, or None when missing."""
    coordinates = report.get("coordinates") or {}
    lat = coordinates.get("lat")
    lng = coordinates.get("lng")
    if lat and lng:
        return {"lat": float(lat), "lng": float(lng)}
    return None


def filter_reports_by_distance(
    reports: List[Dict],
    center: Optional[Dict[str, float]],
    radius_km: Optional[float] = None,
) -> List[Dict]:
    """Keep reports within radius_km of the map centre. No centre keeps everything."""
    if not center:
        return list(reports)

    radius = settings.MAP_VIEW_RADIUS_KM if radius_km is None else radius_km
    filtered = []
    for report in reports:
        coordinates = get_report_coordinates(report)
        if coordinates is None:
            continue
        distance = haversine_km(center["lat"], center["lng"], coordinates["lat"], coordinates["lng"])
        if distance <= radius:
            filtered.append(report)
    return filtered


def _created_at_sort_value(report: Dict) -> float:
    created_at = parse_timestamp(report.get("createdAt"))
    return created_at.timestamp() if created_at else 0.0


def _priority_from_analysis(reports: List[Dict]) -> str:
    with_analysis = next((r for r in reports if r.get("imageAnalysis")), None)
    if with_analysis is None:
        return "medium"
    category = (with_analysis.get("imageAnalysis") or {}).get("category")
    if not category:
        return "medium"
    return CATEGORY_PRIORITIES.get(category, "low")


def create_location_clusters(reports: List[Dict]) -> List[Dict]:
    """
    Group reports sharing a location string into one marker cluster.

    A cluster is placed at its first report's coordinates; groups whose first
    report has none are skipped.
    """
    groups: Dict[str, List[Dict]] = {}
    for report in reports:
        key = (report.get("location") or "").strip().lower()
        groups.setdefault(key, []).append(report)

    clusters = []
    for location, location_reports in groups.items():
        coordinates = get_report_coordinates(location_reports[0])
        if coordinates is None:
            logger.debug(f"Skipping cluster without coordinates: {location!r}")
            continue

        sorted_reports = sorted(
            location_reports,
            key=lambda r: (not r.get("isEmergency"), -_created_at_sort_value(r)),
        )

        is_emergency = any(r.get("isEmergency") for r in sorted_reports)
        emergency_type = next((r.get("emergencyType") for r in sorted_reports if r.get("isEmergency")), None)

        cluster = {
            "location": location,
            "coordinates": coordinates,
            "reports": sorted_reports,
            "count": len(sorted_reports),
            "isEmergency": is_emergency,
            "emergencyType": emergency_type,
            "priority": None if is_emergency else _priority_from_analysis(sorted_reports),
        }
        icon = get_cluster_icon(cluster)
        cluster["icon"] = {**icon, "url": generate_svg_icon(icon)}
        clusters.append(cluster)

    return clusters


def build_map_clusters(
    reports: List[Dict],
    center: Optional[Dict[str, float]] = None,
    radius_km: Optional[float] = None,
    now: Optional[datetime] = None,
) -> List[Dict]:
    """Active reports around the map centre, clustered by location."""
    from geocity.services.expiration import partition_reports

    active, _ = partition_reports(reports, now)
    nearby = filter_reports_by_distance(active, center, radius_km)
    return create_location_clusters(nearby)
