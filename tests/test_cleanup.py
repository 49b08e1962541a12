"""
Maintenance jobs: expired report cleanup and the coordinates migration.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from conftest import seed_report

from geocity.services.cleanup_service import get_cleanup_service


def _seed_mixed(db):
    now = datetime.now(timezone.utc)
    seed_report(db, "active", createdAt=now - timedelta(minutes=10))
    seed_report(db, "expired-1", createdAt=now - timedelta(hours=2), expirationHours=1)
    seed_report(db, "expired-2", createdAt=now - timedelta(hours=30), expirationHours=None)
    seed_report(db, "undated", createdAt=None)


class TestCleanupService:

    def test_stats(self, db):
        _seed_mixed(db)

        result = get_cleanup_service().get_cleanup_stats()

        assert result["stats"] == {"total": 4, "active": 1, "expired": 2}
        expired = {r["id"]: r for r in result["expiredReports"]}
        assert set(expired) == {"expired-1", "expired-2"}
        assert expired["expired-2"]["expirationHours"] == 24.0

    def test_cleanup_deletes_only_expired(self, db):
        _seed_mixed(db)

        result = asyncio.run(get_cleanup_service().cleanup_expired_reports())

        assert result["totalExpired"] == 2
        assert result["deleted"] == 2
        assert result["errors"] == 0
        remaining = {doc.id for doc in db.collection("raised-issue").stream()}
        assert remaining == {"active", "undated"}

    def test_nothing_to_clean(self, db):
        seed_report(db, "active")
        result = asyncio.run(get_cleanup_service().cleanup_expired_reports())
        assert result == {"totalExpired": 0, "deleted": 0, "errors": 0, "results": []}

    def test_migrate_coordinates(self, db, geocoder):
        seed_report(db, "has-coords")
        seed_report(db, "needs-coords", location="Indiranagar, Bengaluru", coordinates=None)
        seed_report(db, "unknown-place", location="Atlantis", coordinates=None)
        seed_report(db, "no-location", location="  ", coordinates=None)

        result = get_cleanup_service().migrate_coordinates()

        assert (result["total"], result["updated"], result["skipped"], result["failed"]) == (4, 1, 1, 1)
        stored = db.collection("raised-issue").document("needs-coords").get().to_dict()
        assert stored["coordinates"] == {"lat": 12.9784, "lng": 77.6408}
        assert geocoder.forward_calls == ["Indiranagar, Bengaluru", "Atlantis"]


class TestMaintenanceApi:

    def test_get_reports_stats(self, client, db):
        _seed_mixed(db)

        for path in ("/api/cleanup-expired-reports", "/api/auto-cleanup"):
            body = client.get(path).json()
            assert body["success"] is True
            assert body["stats"]["expired"] == 2

    def test_post_cleanup(self, client, db):
        _seed_mixed(db)

        body = client.post("/api/cleanup-expired-reports").json()

        assert body["details"]["deleted"] == 2
        assert body["message"] == "Cleanup completed. Deleted 2 expired reports."

    def test_post_auto_cleanup(self, client, db):
        _seed_mixed(db)
        assert client.post("/api/auto-cleanup").json()["deletedCount"] == 2

    def test_cleanup_broadcasts_expiry(self, client, db):
        seed_report(db, "gone", createdAt=datetime.now(timezone.utc) - timedelta(hours=2), expirationHours=1)

        with client.websocket_connect("/ws/reports") as ws:
            ws.receive_json()
            ws.receive_json()

            client.post("/api/cleanup-expired-reports")
            assert ws.receive_json() == {"type": "report-expired", "reportId": "gone"}

    def test_cleanup_sends_remaining_reports(self, client, db):
        now = datetime.now(timezone.utc)
        seed_report(db, "kept", createdAt=now - timedelta(minutes=5))
        seed_report(db, "gone", createdAt=now - timedelta(hours=2), expirationHours=1)

        with client.websocket_connect("/ws/reports") as ws:
            ws.receive_json()
            ws.receive_json()

            client.post("/api/cleanup-expired-reports")
            assert ws.receive_json() == {"type": "report-expired", "reportId": "gone"}
            listing = ws.receive_json()

        assert listing["type"] == "reports-list"
        assert [r["id"] for r in listing["reports"]] == ["kept"]

    def test_migrate_endpoint(self, client, db):
        seed_report(db, "needs-coords", location="Mysuru Palace", coordinates=None)

        assert client.get("/api/migrate-coordinates").json()["method"] == "POST"
        body = client.post("/api/migrate-coordinates").json()
        assert body["data"]["updated"] == 1
