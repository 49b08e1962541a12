"""
AI Plug-in Architecture.

Optional photo analysis for citizen reports. Fails gracefully and never
blocks report submission.
"""

from geocity.services.ai_plugin.base import AIProvider, fallback_analysis
from geocity.services.ai_plugin.gemini_provider import GeminiAIProvider
from geocity.services.ai_plugin.mock_provider import MockAIProvider
from geocity.services.ai_plugin.openai_provider import OpenAIProvider
from geocity.services.ai_plugin.registry import analyze_report_image

__all__ = [
    "AIProvider",
    "GeminiAIProvider",
    "MockAIProvider",
    "OpenAIProvider",
    "analyze_report_image",
    "fallback_analysis",
]
