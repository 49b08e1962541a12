"""
Image analysis endpoint - lets the report form preview the AI assessment
before the citizen submits.
"""

import logging

from fastapi import APIRouter

from geocity.models.report import ImageAnalysis, ImageAnalysisRequest
from geocity.services.ai_plugin.registry import analyze_report_image

logger = logging.getLogger(__name__)

router = APIRouter(tags=["AI"])


@router.post("/analyze-image", response_model=ImageAnalysis, response_model_by_alias=True)
async def analyze_image(request: ImageAnalysisRequest):
    """Never fails on provider errors: the fallback analysis is returned instead."""
    logger.info("🔍 Starting image analysis...")
    analysis = analyze_report_image(request.image_data_uri)
    logger.info(f"🎉 Image analysis completed: {analysis.category.value} / {analysis.emergency_level.value}")
    return analysis
