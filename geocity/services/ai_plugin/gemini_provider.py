"""
Gemini AI Provider.

Calls the Gemini generateContent REST endpoint with the photo sent as
inline data. Fails gracefully so the registry can fall back.
"""

from typing import Dict, Optional
import logging

import requests

from geocity.core.settings import settings
from geocity.services.ai_plugin.base import VisionLLMProvider, split_image_data_uri

logger = logging.getLogger(__name__)


class GeminiAIProvider(VisionLLMProvider):
    """
    Google Gemini provider.

    Requires GEMINI_API_KEY in environment variables.
    """

    MODEL_VERSION = "v1beta"
    API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(self):
        self.api_key = settings.GEMINI_API_KEY
        self.model_name = settings.GEMINI_MODEL
        self.enabled = bool(self.api_key and self.api_key.strip())

        if self.enabled:
            logger.info(f"✅ Gemini AI Provider initialized: {self.model_name}")
        else:
            logger.info("⚠️ Gemini AI Provider disabled: No API key configured")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.model_name, "version": self.MODEL_VERSION}

    def get_timeout_seconds(self) -> float:
        return settings.AI_TIMEOUT_SECONDS

    def _generate(self, prompt: str, image_data_uri: Optional[str] = None) -> str:
        url = f"{self.API_BASE_URL}/{self.model_name}:generateContent?key={self.api_key}"

        parts = [{"text": prompt}]
        if image_data_uri:
            mime_type, data = split_image_data_uri(image_data_uri)
            parts.append({"inline_data": {"mime_type": mime_type, "data": data}})

        payload = {
            "contents": [{"parts": parts}],
            "generationConfig": {"temperature": 0.2, "responseMimeType": "application/json"},
        }

        response = requests.post(url, json=payload, timeout=self.get_timeout_seconds())
        if response.status_code != 200:
            raise RuntimeError(f"Gemini API returned status {response.status_code}: {response.text[:300]}")

        data = response.json()
        return data.get("candidates", [{}])[0].get("content", {}).get("parts", [{}])[0].get("text", "")
