"""
Discord webhook notifications.

Every alert is posted as a single embed: red for emergencies, green for
regular issue reports.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import requests

from geocity.core.settings import settings

logger = logging.getLogger(__name__)

EMERGENCY_TITLE = "🚨 EMERGENCY ALERT"
REPORT_TITLE = "📋 ISSUE REPORT"
EMERGENCY_COLOR = 0xFF0000
REPORT_COLOR = 0x00FF00
FOOTER_TEXT = "GeoCity Emergency Monitoring System"
TIMEOUT_SECONDS = 5.0


def build_discord_embed(message: str, is_emergency: bool = False, image_url: Optional[str] = None) -> Dict:
    """Webhook payload with one embed."""
    embed = {
        "title": EMERGENCY_TITLE if is_emergency else REPORT_TITLE,
        "description": message,
        "color": EMERGENCY_COLOR if is_emergency else REPORT_COLOR,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "footer": {"text": FOOTER_TEXT},
    }
    if image_url:
        embed["image"] = {"url": image_url}
    return {"embeds": [embed]}


def send_discord_message(payload: Dict) -> bool:
    """POST a payload to the configured webhook. Never raises."""
    webhook_url = settings.DISCORD_WEBHOOK_URL
    if not webhook_url:
        logger.warning("⚠️ Discord webhook URL not configured")
        return False

    try:
        response = requests.post(webhook_url, json=payload, timeout=TIMEOUT_SECONDS)
    except requests.RequestException as e:
        logger.error(f"❌ Error sending Discord notification: {e}")
        return False

    if response.ok:
        logger.info("✅ Discord notification sent successfully")
        return True

    logger.error(f"❌ Discord notification failed: {response.status_code} {response.text[:200]}")
    return False


def notify(message: str, is_emergency: bool = False, image_url: Optional[str] = None) -> bool:
    return send_discord_message(build_discord_embed(message, is_emergency, image_url))


def format_report_alert(report: Dict) -> str:
    """Message body for a newly submitted emergency report."""
    lines = [
        f"Type: {report.get('emergencyType') or 'UNSPECIFIED'}",
        f"Location: {report.get('location') or 'Unknown'}",
    ]
    coordinates = report.get("coordinates")
    if coordinates:
        lines.append(f"Coordinates: {coordinates.get('lat')}, {coordinates.get('lng')}")
    if report.get("description"):
        lines.append("")
        lines.append(report["description"])
    analysis = report.get("imageAnalysis") or {}
    if analysis.get("humanReadableDescription"):
        lines.append("")
        lines.append(f"AI summary: {analysis['humanReadableDescription']}")
    return "\n".join(lines)
