"""
OpenAI AI Provider.

Chat completions with the photo passed as an image_url content part.
"""

from typing import Dict, Optional
import logging

import requests

from geocity.core.settings import settings
from geocity.services.ai_plugin.base import VisionLLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(VisionLLMProvider):

    MODEL_VERSION = "v1"
    API_URL = "https://api.openai.com/v1/chat/completions"

    def __init__(self):
        self.api_key = settings.OPENAI_API_KEY
        self.model_name = settings.OPENAI_MODEL
        self.enabled = bool(self.api_key and self.api_key.strip())

        if self.enabled:
            logger.info(f"✅ OpenAI Provider initialized: {self.model_name}")
        else:
            logger.info("⚠️ OpenAI Provider disabled: No API key configured")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.model_name, "version": self.MODEL_VERSION}

    def get_timeout_seconds(self) -> float:
        return settings.AI_TIMEOUT_SECONDS

    def _generate(self, prompt: str, image_data_uri: Optional[str] = None) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        content = [{"type": "text", "text": prompt}]
        if image_data_uri:
            content.append({"type": "image_url", "image_url": {"url": image_data_uri}})

        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": "You assess photos for a citizen incident reporting system. Output only valid JSON."},
                {"role": "user", "content": content},
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.2,
            "max_tokens": 600,
        }

        response = requests.post(self.API_URL, headers=headers, json=payload, timeout=self.get_timeout_seconds())
        if response.status_code != 200:
            raise RuntimeError(f"OpenAI API returned status {response.status_code}: {response.text[:300]}")

        data = response.json()
        return data.get("choices", [{}])[0].get("message", {}).get("content", "")
