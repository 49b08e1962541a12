"""
Social notification endpoints (Discord webhook).
"""

from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from geocity.services.discord_service import build_discord_embed, send_discord_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/social", tags=["Social"])


class DiscordMessageRequest(BaseModel):
    message: Optional[str] = None
    is_emergency: bool = Field(False, alias="isEmergency")
    image_url: Optional[str] = Field(None, alias="imageUrl")

    model_config = {"populate_by_name": True}


@router.post("/discord")
async def post_discord(request: DiscordMessageRequest):
    if not request.message:
        raise HTTPException(status_code=400, detail="Missing required field: message")

    payload = build_discord_embed(request.message, request.is_emergency, request.image_url)
    if not send_discord_message(payload):
        raise HTTPException(status_code=500, detail="Failed to send Discord notification")

    return {
        "success": True,
        "message": "Discord notification sent successfully",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/discord")
async def discord_setup():
    return {
        "success": True,
        "message": "Discord API endpoint is operational",
        "requiredEnvVars": ["DISCORD_WEBHOOK_URL"],
        "setupInstructions": [
            "1. Create a Discord server",
            "2. Create a webhook in a channel",
            "3. Copy the webhook URL",
            "4. Add DISCORD_WEBHOOK_URL to your .env file",
        ],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
