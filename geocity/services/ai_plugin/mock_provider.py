"""
Mock AI Provider - Fallback provider when AI is disabled or every hosted
model failed. Makes no network calls and never fails.
"""

from typing import Dict, Optional
import logging

from geocity.models.report import ImageAnalysis
from geocity.services.ai_plugin.base import AIProvider, fallback_analysis

logger = logging.getLogger(__name__)


class MockAIProvider(AIProvider):
    """Returns the deterministic "manual review" analysis."""

    MODEL_NAME = "mock-image-analysis"
    MODEL_VERSION = "1.0.0"
    TIMEOUT_SECONDS = 0.1

    def is_enabled(self) -> bool:
        return True

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.MODEL_NAME, "version": self.MODEL_VERSION}

    def get_timeout_seconds(self) -> float:
        return self.TIMEOUT_SECONDS

    def analyze_image(self, image_data_uri: str) -> Optional[ImageAnalysis]:
        return fallback_analysis()
