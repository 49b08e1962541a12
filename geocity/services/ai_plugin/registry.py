"""
AI Provider Registry.

Manages provider selection and fallback logic.
"""

from typing import List, Optional
import logging

from geocity.core.settings import settings
from geocity.models.report import ImageAnalysis
from geocity.services.ai_plugin.base import AIProvider, fallback_analysis
from geocity.services.ai_plugin.gemini_provider import GeminiAIProvider
from geocity.services.ai_plugin.mock_provider import MockAIProvider
from geocity.services.ai_plugin.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)


class AIProviderRegistry:
    """
    Registry for image analysis providers.

    Order: the provider named by AI_PROVIDER, then the other hosted one,
    then the mock (always last, always enabled).
    """

    def __init__(self):
        self.providers: List[AIProvider] = []
        self._initialize_providers()

    def _initialize_providers(self):
        if not settings.AI_ENABLED:
            logger.info("⚠️ AI is disabled globally (AI_ENABLED=false), using mock provider only")
            self.providers.append(MockAIProvider())
            return

        hosted = [GeminiAIProvider(), OpenAIProvider()]
        if (settings.AI_PROVIDER or "").lower() == "openai":
            hosted.reverse()

        for provider in hosted:
            if provider.is_enabled():
                self.providers.append(provider)
                logger.info(f"✅ AI provider registered: {provider.get_model_info()['name']}")

        self.providers.append(MockAIProvider())
        logger.info("✅ Mock AI Provider registered (fallback)")

    def analyze_with_fallback(self, image_data_uri: str) -> ImageAnalysis:
        """
        Try providers in priority order until one returns an analysis.
        Always returns a valid ImageAnalysis.
        """
        for provider in self.providers:
            name = provider.get_model_info()["name"]
            try:
                logger.info(f"Trying AI provider: {name}")
                analysis = provider.analyze_image(image_data_uri)
                if analysis is None:
                    logger.warning(f"Provider {name} returned no analysis")
                    continue
                logger.info(f"✅ Image analysis successful using {name}")
                return analysis
            except Exception as e:
                logger.warning(f"Provider {name} failed: {e}")
                continue

        logger.error("⚠️ All AI providers failed, using safe defaults")
        return fallback_analysis()


_registry: Optional[AIProviderRegistry] = None


def get_registry() -> AIProviderRegistry:
    global _registry
    if _registry is None:
        _registry = AIProviderRegistry()
    return _registry


def reset_registry():
    """Drop the cached registry so settings changes take effect."""
    global _registry
    _registry = None


def analyze_report_image(image_data_uri: str) -> ImageAnalysis:
    """
    Main entry point for photo analysis.

    Never raises: a failure anywhere yields the UNCERTAIN / NONE / SAFE
    analysis with confidence 0.
    """
    try:
        return get_registry().analyze_with_fallback(image_data_uri)
    except Exception as e:
        logger.error(f"❌ Error in image analysis: {e}", exc_info=True)
        return fallback_analysis()
