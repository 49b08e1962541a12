"""
AI image analysis: provider chain, fallback and the Gemini REST provider.
"""

import json
from unittest.mock import MagicMock

import pytest

from conftest import PNG_DATA_URI

from geocity.core.settings import settings
from geocity.models.report import Authenticity, Category, EmergencyLevel
from geocity.services.ai_plugin import gemini_provider, registry
from geocity.services.ai_plugin.base import fallback_analysis, parse_json_text, split_image_data_uri
from geocity.services.ai_plugin.gemini_provider import GeminiAIProvider
from geocity.services.ai_plugin.mock_provider import MockAIProvider
from geocity.services.ai_plugin.openai_provider import OpenAIProvider


def _gemini_reply(payload):
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {"candidates": [{"content": {"parts": [{"text": json.dumps(payload)}]}}]}
    return response


class TestHelpers:

    def test_split_data_uri(self):
        mime, data = split_image_data_uri("data:image/jpeg;base64,AAAA")
        assert (mime, data) == ("image/jpeg", "AAAA")

    def test_split_rejects_plain_text(self):
        with pytest.raises(ValueError):
            split_image_data_uri("hello")

    def test_parse_fenced_json(self):
        assert parse_json_text('```json\n{"category": "SAFE"}\n```') == {"category": "SAFE"}

    def test_parse_without_json(self):
        with pytest.raises(ValueError):
            parse_json_text("I cannot help with that")

    def test_fallback_analysis(self):
        analysis = fallback_analysis()
        assert analysis.authenticity == Authenticity.UNCERTAIN
        assert analysis.emergency_level == EmergencyLevel.NONE
        assert analysis.category == Category.SAFE
        assert analysis.confidence == 0


class TestRegistry:

    def test_disabled_ai_uses_mock_only(self):
        reg = registry.AIProviderRegistry()
        assert [type(p) for p in reg.providers] == [MockAIProvider]
        assert reg.analyze_with_fallback(PNG_DATA_URI).confidence == 0

    def test_provider_order_follows_setting(self, monkeypatch):
        monkeypatch.setattr(settings, "AI_ENABLED", True)
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "g-key")
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "o-key")

        monkeypatch.setattr(settings, "AI_PROVIDER", "gemini")
        assert [type(p) for p in registry.AIProviderRegistry().providers] == [
            GeminiAIProvider, OpenAIProvider, MockAIProvider,
        ]

        monkeypatch.setattr(settings, "AI_PROVIDER", "openai")
        assert [type(p) for p in registry.AIProviderRegistry().providers] == [
            OpenAIProvider, GeminiAIProvider, MockAIProvider,
        ]

    def test_providers_without_keys_skipped(self, monkeypatch):
        monkeypatch.setattr(settings, "AI_ENABLED", True)
        assert [type(p) for p in registry.AIProviderRegistry().providers] == [MockAIProvider]

    def test_failing_provider_falls_through(self, monkeypatch):
        monkeypatch.setattr(settings, "AI_ENABLED", True)
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "g-key")
        monkeypatch.setattr(gemini_provider.requests, "post", MagicMock(side_effect=ConnectionError("down")))

        assert registry.analyze_report_image(PNG_DATA_URI) == fallback_analysis()


class TestGemini:

    def test_three_step_analysis(self, monkeypatch):
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "g-key")
        post = MagicMock(side_effect=[
            _gemini_reply({"authenticity": "REAL", "confidence": 91, "reasoning": "Natural noise"}),
            _gemini_reply({"description": "Car on fire", "emergencyLevel": "CRITICAL", "category": "DANGER"}),
            _gemini_reply({"humanReadableDescription": "A car is burning on the highway."}),
        ])
        monkeypatch.setattr(gemini_provider.requests, "post", post)

        analysis = GeminiAIProvider().analyze_image(PNG_DATA_URI)

        assert analysis.authenticity == Authenticity.REAL
        assert analysis.emergency_level == EmergencyLevel.CRITICAL
        assert analysis.category == Category.DANGER
        assert analysis.confidence == 91
        assert analysis.human_readable_description == "A car is burning on the highway."

        assert post.call_count == 3
        first_url = post.call_args_list[0].args[0]
        assert first_url.endswith(":generateContent?key=g-key")
        parts = post.call_args_list[0].kwargs["json"]["contents"][0]["parts"]
        assert parts[1]["inline_data"]["mime_type"] == "image/png"
        # the rewrite step is text only
        assert len(post.call_args_list[2].kwargs["json"]["contents"][0]["parts"]) == 1

    def test_http_error_returns_none(self, monkeypatch):
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "g-key")
        response = MagicMock(status_code=500, text="boom")
        monkeypatch.setattr(gemini_provider.requests, "post", MagicMock(return_value=response))

        assert GeminiAIProvider().analyze_image(PNG_DATA_URI) is None

    def test_disabled_without_key(self):
        assert GeminiAIProvider().analyze_image(PNG_DATA_URI) is None


class TestAnalyzeImageApi:

    def test_fallback_returned_when_ai_disabled(self, client):
        resp = client.post("/api/analyze-image", json={"imageDataUri": PNG_DATA_URI})

        assert resp.status_code == 200
        body = resp.json()
        assert body["authenticity"] == "UNCERTAIN"
        assert body["emergencyLevel"] == "NONE"
        assert body["category"] == "SAFE"
        assert body["confidence"] == 0
        assert "humanReadableDescription" in body

    def test_rejects_non_image(self, client):
        assert client.post("/api/analyze-image", json={"imageDataUri": "hello"}).status_code == 422
