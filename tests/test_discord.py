"""
Discord webhook notifications.
"""

from unittest.mock import MagicMock

import requests

from geocity.core.settings import settings
from geocity.services import discord_service
from geocity.services.discord_service import build_discord_embed, format_report_alert, send_discord_message

WEBHOOK = "https://discord.example/api/webhooks/1/abc"


class TestEmbed:

    def test_emergency_embed(self):
        embed = build_discord_embed("Fire at the market", is_emergency=True, image_url="https://img")["embeds"][0]
        assert embed["title"] == "🚨 EMERGENCY ALERT"
        assert embed["color"] == 0xFF0000
        assert embed["image"] == {"url": "https://img"}
        assert embed["footer"]["text"] == "GeoCity Emergency Monitoring System"

    def test_report_embed(self):
        embed = build_discord_embed("Pothole")["embeds"][0]
        assert embed["title"] == "📋 ISSUE REPORT"
        assert embed["color"] == 0x00FF00
        assert "image" not in embed

    def test_report_alert_text(self):
        text = format_report_alert({
            "emergencyType": "MEDICAL",
            "location": "MG Road",
            "coordinates": {"lat": 12.9, "lng": 77.6},
            "description": "Person collapsed",
            "imageAnalysis": {"humanReadableDescription": "A person lies on the pavement."},
        })
        assert "Type: MEDICAL" in text
        assert "Coordinates: 12.9, 77.6" in text
        assert "AI summary: A person lies on the pavement." in text


class TestSend:

    def test_not_configured(self, monkeypatch):
        post = MagicMock()
        monkeypatch.setattr(discord_service.requests, "post", post)
        assert send_discord_message({"embeds": []}) is False
        post.assert_not_called()

    def test_posts_to_webhook(self, monkeypatch):
        monkeypatch.setattr(settings, "DISCORD_WEBHOOK_URL", WEBHOOK)
        post = MagicMock(return_value=MagicMock(ok=True))
        monkeypatch.setattr(discord_service.requests, "post", post)

        assert send_discord_message({"embeds": []}) is True
        post.assert_called_once_with(WEBHOOK, json={"embeds": []}, timeout=discord_service.TIMEOUT_SECONDS)

    def test_webhook_rejection(self, monkeypatch):
        monkeypatch.setattr(settings, "DISCORD_WEBHOOK_URL", WEBHOOK)
        monkeypatch.setattr(
            discord_service.requests, "post", MagicMock(return_value=MagicMock(ok=False, status_code=400, text="bad"))
        )
        assert send_discord_message({"embeds": []}) is False

    def test_network_error(self, monkeypatch):
        monkeypatch.setattr(settings, "DISCORD_WEBHOOK_URL", WEBHOOK)
        monkeypatch.setattr(
            discord_service.requests, "post", MagicMock(side_effect=requests.ConnectionError("offline"))
        )
        assert send_discord_message({"embeds": []}) is False


class TestSocialApi:

    def test_missing_message(self, client):
        assert client.post("/api/social/discord", json={}).status_code == 400

    def test_send_failure(self, client):
        assert client.post("/api/social/discord", json={"message": "hello"}).status_code == 500

    def test_send(self, client, discord_calls):
        resp = client.post("/api/social/discord", json={"message": "Road closed", "isEmergency": True})

        assert resp.status_code == 200
        assert discord_calls[0]["embeds"][0]["description"] == "Road closed"

    def test_setup_instructions(self, client):
        assert client.get("/api/social/discord").json()["requiredEnvVars"] == ["DISCORD_WEBHOOK_URL"]
