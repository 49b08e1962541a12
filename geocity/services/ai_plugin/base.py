"""
AI Provider Base Interface.

Defines the contract for image analysis providers.
All providers must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
import json
import logging

from geocity.models.report import ImageAnalysis
from geocity.services.ai_plugin.prompts import (
    CONTENT_ANALYSIS_PROMPT,
    HUMAN_READABLE_PROMPT,
    VERIFY_IMAGE_PROMPT,
)

logger = logging.getLogger(__name__)


def fallback_analysis() -> ImageAnalysis:
    """Analysis returned whenever no provider could assess the image."""
    return ImageAnalysis(
        authenticity="UNCERTAIN",
        description="Unable to analyze image due to technical issues. Please review manually.",
        human_readable_description=(
            "Image analysis service is temporarily unavailable. "
            "The report has been submitted for manual review."
        ),
        emergency_level="NONE",
        category="SAFE",
        reasoning="Analysis failed due to technical issues with the AI service.",
        confidence=0,
    )


def split_image_data_uri(image_data_uri: str) -> Tuple[str, str]:
    """Split `data:image/png;base64,xxxx` into ("image/png", "xxxx")."""
    header, sep, data = image_data_uri.partition(",")
    if not sep or not header.startswith("data:image/") or ";base64" not in header:
        raise ValueError("Expected a base64 image data URI")
    mime_type = header[len("data:"):].split(";", 1)[0]
    return mime_type, data


def parse_json_text(text: str) -> Dict[str, Any]:
    """Parse model output that should be JSON, tolerating ```json fences."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1:
        raise ValueError(f"No JSON object in model output: {text[:200]}")
    return json.loads(cleaned[start:end + 1])


class AIProvider(ABC):
    """
    Abstract base class for image analysis providers.

    analyze_image MUST:
    - never raise (log and return None instead)
    - respect the provider timeout
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        pass

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        """Dict with 'name' and 'version' keys."""
        pass

    @abstractmethod
    def get_timeout_seconds(self) -> float:
        pass

    @abstractmethod
    def analyze_image(self, image_data_uri: str) -> Optional[ImageAnalysis]:
        """
        Assess a citizen report photo.

        Returns:
            ImageAnalysis, or None when the provider failed
        """
        pass


class VisionLLMProvider(AIProvider):
    """
    Three step analysis shared by the hosted multimodal models:

    1. authenticity verification (REAL / AI_GENERATED / UNCERTAIN)
    2. content analysis (description, emergency level, category)
    3. rewrite of the description as a short news-style paragraph
    """

    @abstractmethod
    def _generate(self, prompt: str, image_data_uri: Optional[str] = None) -> str:
        """Send one prompt (optionally with the image) and return the raw text."""
        pass

    def analyze_image(self, image_data_uri: str) -> Optional[ImageAnalysis]:
        name = self.get_model_info()["name"]
        if not self.is_enabled():
            return None

        try:
            verification = parse_json_text(self._generate(VERIFY_IMAGE_PROMPT, image_data_uri))
            logger.info(f"✅ Image verification completed ({name}): {verification.get('authenticity')}")

            content = parse_json_text(self._generate(CONTENT_ANALYSIS_PROMPT, image_data_uri))
            description = content.get("description") or "Unable to analyze image content"
            emergency_level = content.get("emergencyLevel") or "NONE"
            category = content.get("category") or "SAFE"
            logger.info(f"✅ Content analysis completed ({name}): level={emergency_level}, category={category}")

            readable = parse_json_text(self._generate(HUMAN_READABLE_PROMPT.format(
                description=description,
                emergency_level=emergency_level,
                category=category,
            )))

            return ImageAnalysis(
                authenticity=verification.get("authenticity") or "UNCERTAIN",
                description=description,
                human_readable_description=readable.get("humanReadableDescription") or "Image analysis unavailable",
                emergency_level=emergency_level,
                category=category,
                reasoning=verification.get("reasoning") or "",
                confidence=verification.get("confidence") or 0,
            )
        except Exception as e:
            logger.warning(f"⚠️ {name} image analysis failed: {e}")
            return None
