"""
Shared test fixtures for the GEOCITY test suite.

Everything runs against the in-process mock Firestore; outbound HTTP
(geocoding, Discord, Identity Toolkit, AI providers) is patched per test.
"""

import base64
import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Ensure test env vars before any app imports
os.environ["USE_MOCK_DB"] = "true"
os.environ["MOCK_DB_PATH"] = ""
os.environ["MOCK_UPLOAD_DIR"] = tempfile.mkdtemp(prefix="geocity-uploads-")
os.environ["AUTO_CLEANUP_ENABLED"] = "false"
os.environ["AI_ENABLED"] = "false"
os.environ["GEMINI_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["GOOGLE_MAPS_API_KEY"] = ""
os.environ["DISCORD_WEBHOOK_URL"] = ""
os.environ["CRON_SECRET"] = ""
os.environ["FIREBASE_WEB_API_KEY"] = "test-web-api-key"

from fastapi.testclient import TestClient  # noqa: E402

from geocity.config import firebase  # noqa: E402
from geocity.config.mock_firestore import reset_mock_db  # noqa: E402
from geocity.services import auth_service, cleanup_service, emergency_monitor, user_service  # noqa: E402
from geocity.services.ai_plugin import registry  # noqa: E402
from geocity.services.geocoding import resolver  # noqa: E402
from geocity.services.realtime import get_connection_manager  # noqa: E402

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


class FakeGeocoder:
    """Deterministic geocoding provider; unknown addresses do not resolve."""

    def __init__(self, places=None, addresses=None):
        self.places = places or {}
        self.addresses = addresses or {}
        self.forward_calls = []
        self.reverse_calls = []

    def geocode(self, address):
        self.forward_calls.append(address)
        point = self.places.get(address)
        if point is None:
            return None
        return {"lat": point[0], "lng": point[1], "formatted_address": address, "provider": "fake"}

    def reverse_geocode(self, latitude, longitude):
        self.reverse_calls.append((latitude, longitude))
        return {"formatted_address": self.addresses.get((latitude, longitude)), "provider": "fake"}


@pytest.fixture(autouse=True)
def clean_state():
    """Fresh mock database, provider caches and service singletons for every test."""
    reset_mock_db()
    firebase.reset_db()
    registry.reset_registry()
    resolver.reset_geocoding_provider()
    user_service._user_service = None
    auth_service._auth_service = None
    cleanup_service._cleanup_service = None
    emergency_monitor._monitor = None
    get_connection_manager().active = []
    yield
    reset_mock_db()
    firebase.reset_db()
    resolver.reset_geocoding_provider()


@pytest.fixture
def geocoder(monkeypatch):
    fake = FakeGeocoder(places={
        "MG Road, Bengaluru": (12.9756, 77.6050),
        "Indiranagar, Bengaluru": (12.9784, 77.6408),
        "Mysuru Palace": (12.3052, 76.6552),
    })
    monkeypatch.setattr(resolver, "_provider_instance", fake)
    return fake


@pytest.fixture
def db():
    return firebase.get_db()


@pytest.fixture
def client(geocoder):
    from geocity.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def discord_calls(monkeypatch):
    """Capture Discord webhook posts instead of sending them."""
    from geocity.routes import social
    from geocity.services import discord_service

    calls = []

    def fake_send(payload):
        calls.append(payload)
        return True

    monkeypatch.setattr(discord_service, "send_discord_message", fake_send)
    monkeypatch.setattr(social, "send_discord_message", fake_send)
    return calls


def make_report_payload(**overrides):
    payload = {
        "photo": PNG_DATA_URI,
        "photoDetails": {
            "name": "pothole photo.png",
            "size": len(PNG_BYTES),
            "type": "image/png",
            "lastModified": "2024-05-01T10:00:00Z",
        },
        "location": "MG Road, Bengaluru",
        "description": "Deep pothole in the left lane",
        "isEmergency": False,
        "deviceInfo": {
            "publicIP": "203.0.113.10",
            "userAgent": "pytest",
            "screenResolution": "1920x1080",
            "timezone": "Asia/Kolkata",
            "language": "en-IN",
            "timestamp": "2024-05-01T10:00:05Z",
            "deviceType": "mobile",
        },
    }
    payload.update(overrides)
    return payload


def make_stored_report(**overrides):
    """A report document as it sits in the `raised-issue` collection."""
    report = {
        "photo": "/uploads/photo.png",
        "location": "MG Road, Bengaluru",
        "coordinates": {"lat": 12.9756, "lng": 77.6050},
        "description": "Streetlight out",
        "isEmergency": False,
        "emergencyType": None,
        "imageAnalysis": None,
        "expirationHours": 1,
        "userId": "",
        "createdAt": datetime.now(timezone.utc) - timedelta(minutes=10),
        "status": "pending",
        "priority": "medium",
    }
    report.update(overrides)
    return report


def seed_report(db, report_id, **overrides):
    db.collection("raised-issue").document(report_id).set(make_stored_report(**overrides))
    return report_id
