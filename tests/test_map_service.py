"""
Map clustering and marker icons.
"""

from datetime import datetime, timedelta, timezone
from urllib.parse import unquote

import pytest

from conftest import make_stored_report, seed_report

from geocity.services.icons import get_cluster_icon, get_icon_config, generate_svg_icon
from geocity.services.map_service import (
    build_map_clusters,
    create_location_clusters,
    filter_reports_by_distance,
    haversine_km,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
MG_ROAD = {"lat": 12.9756, "lng": 77.6050}


def _report(report_id, minutes_ago=10, **overrides):
    report = make_stored_report(createdAt=NOW - timedelta(minutes=minutes_ago), **overrides)
    report["id"] = report_id
    return report


# ---------------------------------------------------------------------------
# Distance filter
# ---------------------------------------------------------------------------

class TestDistance:

    def test_haversine_known_distance(self):
        # MG Road to Mysuru Palace is roughly 128 km as the crow flies
        assert haversine_km(12.9756, 77.6050, 12.3052, 76.6552) == pytest.approx(128, abs=3)

    def test_haversine_zero(self):
        assert haversine_km(10, 20, 10, 20) == 0

    def test_filter_keeps_nearby_only(self):
        near = _report("near", coordinates={"lat": 12.9784, "lng": 77.6408})
        far = _report("far", location="Mysuru Palace", coordinates={"lat": 12.3052, "lng": 76.6552})
        missing = _report("missing", coordinates=None)

        assert filter_reports_by_distance([near, far, missing], MG_ROAD, 10) == [near]

    def test_filter_without_centre_keeps_all(self):
        reports = [_report("a"), _report("b", coordinates=None)]
        assert filter_reports_by_distance(reports, None) == reports


# ---------------------------------------------------------------------------
# Clustering
# ---------------------------------------------------------------------------

class TestClusters:

    def test_reports_grouped_by_normalized_location(self):
        reports = [
            _report("a", location="MG Road, Bengaluru"),
            _report("b", location="  mg road, bengaluru "),
            _report("c", location="Indiranagar", coordinates={"lat": 12.9784, "lng": 77.6408}),
        ]

        clusters = create_location_clusters(reports)

        assert {c["location"]: c["count"] for c in clusters} == {"mg road, bengaluru": 2, "indiranagar": 1}

    def test_emergency_first_then_newest(self):
        reports = [
            _report("old", minutes_ago=50),
            _report("new", minutes_ago=5),
            _report("sos", minutes_ago=40, isEmergency=True, emergencyType="MEDICAL"),
        ]

        cluster = create_location_clusters(reports)[0]

        assert [r["id"] for r in cluster["reports"]] == ["sos", "new", "old"]
        assert cluster["isEmergency"] is True
        assert cluster["emergencyType"] == "MEDICAL"
        assert cluster["priority"] is None
        assert cluster["icon"]["icon"] == "ambulance"
        assert cluster["icon"]["url"].startswith("data:image/svg+xml;charset=UTF-8,")

    def test_cluster_without_coordinates_skipped(self):
        assert create_location_clusters([_report("a", coordinates=None)]) == []

    @pytest.mark.parametrize("category, priority", [
        ("DANGER", "high"),
        ("WARNING", "medium"),
        ("SAFE", "safe"),
        ("SOMETHING_ELSE", "low"),
    ])
    def test_priority_from_ai_category(self, category, priority):
        report = _report("a", imageAnalysis={"category": category, "confidence": 80})
        assert create_location_clusters([report])[0]["priority"] == priority

    def test_priority_without_analysis_is_medium(self):
        cluster = create_location_clusters([_report("a")])[0]
        assert cluster["priority"] == "medium"
        assert cluster["icon"]["icon"] == "alert-triangle"

    def test_priority_with_uncategorised_analysis_is_medium(self):
        report = _report("a", imageAnalysis={"description": "Fallen tree on the footpath"})
        assert create_location_clusters([report])[0]["priority"] == "medium"

    def test_build_drops_expired_and_distant_reports(self):
        reports = [
            _report("active"),
            _report("expired", minutes_ago=120, expirationHours=1),
            _report("far", location="Mysuru Palace", coordinates={"lat": 12.3052, "lng": 76.6552}),
        ]

        clusters = build_map_clusters(reports, center=MG_ROAD, radius_km=10, now=NOW)

        assert len(clusters) == 1
        assert [r["id"] for r in clusters[0]["reports"]] == ["active"]


# ---------------------------------------------------------------------------
# Icons
# ---------------------------------------------------------------------------

class TestIcons:

    def test_emergency_type_beats_category(self):
        assert get_icon_config(emergency_type="FIRE_HAZARD", category="SAFE")["icon"] == "flame"

    def test_category_icon(self):
        assert get_icon_config(category="SAFE")["color"] == "#10B981"

    def test_default_is_warning(self):
        assert get_icon_config() == get_icon_config(category="WARNING")

    def test_config_is_a_copy(self):
        get_icon_config(category="SAFE")["color"] = "#000000"
        assert get_icon_config(category="SAFE")["color"] == "#10B981"

    def test_blink_icon_carries_rate(self):
        svg = unquote(generate_svg_icon(get_icon_config(emergency_type="FIRE_HAZARD")))
        assert 'width="32"' in svg
        assert "#EF4444" in svg
        assert "blink 500ms infinite" in svg

    def test_static_icon_has_no_animation(self):
        svg = unquote(generate_svg_icon(get_icon_config(category="SAFE")))
        assert "<style>" not in svg

    def test_cluster_icon_follows_priority(self):
        assert get_cluster_icon({"isEmergency": False, "priority": "high"})["icon"] == "alert-circle"
        assert get_cluster_icon({"isEmergency": True, "emergencyType": "LAW_ENFORCEMENT"})["icon"] == "shield"


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------

class TestMapApi:

    def test_clusters_endpoint(self, client, db):
        now = datetime.now(timezone.utc)
        seed_report(db, "a", createdAt=now - timedelta(minutes=5))
        seed_report(db, "b", createdAt=now - timedelta(minutes=8), isEmergency=True, emergencyType="MEDICAL")
        seed_report(db, "old", createdAt=now - timedelta(hours=5))

        body = client.get("/api/map/clusters", params={"lat": 12.97, "lng": 77.6, "radius_km": 5}).json()

        assert body["count"] == 1
        assert body["reportCount"] == 2
        assert body["radiusKm"] == 5
        assert [r["id"] for r in body["clusters"][0]["reports"]] == ["b", "a"]

    def test_lat_without_lng_rejected(self, client):
        assert client.get("/api/map/clusters", params={"lat": 12.97}).status_code == 400

    def test_icon_endpoint(self, client):
        body = client.get("/api/map/icon", params={"emergency_type": "MEDICAL"}).json()
        assert body["icon"] == "ambulance"
        assert body["url"].startswith("data:image/svg+xml")

    def test_icon_endpoint_rejects_unknown_type(self, client):
        assert client.get("/api/map/icon", params={"emergency_type": "ALIENS"}).status_code == 422
