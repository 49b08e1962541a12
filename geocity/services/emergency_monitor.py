"""
Emergency monitor - scheduled job over the IoT sensor feed.

Sensor stations write their latest readings under /weatherData in the
Firebase Realtime Database. Every reading flagged `isEmergency` is
reverse geocoded, announced on Discord and logged to
`emergency-social-logs`.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List

from firebase_admin import firestore

from geocity.config.firebase import get_db, get_realtime_value
from geocity.services import discord_service
from geocity.services.geocoding.base import format_coordinates
from geocity.services.geocoding.resolver import reverse_geocode

logger = logging.getLogger(__name__)

SENSOR_PATH = "/weatherData"
SOCIAL_LOGS_COLLECTION = "emergency-social-logs"


def is_sensor_emergency(reading: Dict) -> bool:
    return bool(reading.get("isEmergency"))


def resolve_sensor_location(reading: Dict) -> str:
    latitude = reading.get("latitude")
    longitude = reading.get("longitude")
    if latitude is None or longitude is None:
        return "Unknown location"
    try:
        address = reverse_geocode(latitude, longitude).get("formatted_address")
    except Exception as e:
        logger.warning(f"Reverse geocoding failed for sensor at {latitude}, {longitude}: {e}")
        address = None
    return address or format_coordinates(latitude, longitude)


def format_sensor_alert(location: str, zipcode: str, reading: Dict) -> str:
    return (
        f"🚨 EMERGENCY ALERT\n\n"
        f"Location: {location}\n"
        f"Zipcode: {zipcode}\n\n"
        f"Sensor Data:\n"
        f"• Temperature: {reading.get('temperature')}°C\n"
        f"• Humidity: {reading.get('humidity')}%\n"
        f"• Air Quality: {reading.get('airQuality')}\n"
        f"• Rain Level: {reading.get('rainValue')}\n"
        f"• Flame Detected: {'YES' if reading.get('flameDetected') else 'NO'}\n"
        f"• Fluid Level: {reading.get('fluidLevel')}"
    )


class EmergencyMonitor:

    def __init__(self):
        self.db = get_db()

    def collect_emergencies(self) -> List[Dict]:
        data = get_realtime_value(SENSOR_PATH) or {}
        if not isinstance(data, dict):
            logger.warning(f"Unexpected sensor payload type at {SENSOR_PATH}: {type(data).__name__}")
            return []

        emergencies = []
        for key, reading in data.items():
            if not isinstance(reading, dict) or not is_sensor_emergency(reading):
                continue
            zipcode = str(reading.get("zipcode") or key)
            location = resolve_sensor_location(reading)
            logger.info(f"🚨 Emergency detected: zipcode={zipcode}, location={location}")
            emergencies.append({
                "zipcode": zipcode,
                "location": location,
                "sensorData": reading,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            })
        return emergencies

    def _log_social_status(self, zipcode: str, location: str, discord_success: bool):
        """Record the alert outcome. A failed write never hides an alert that went out."""
        try:
            self.db.collection(SOCIAL_LOGS_COLLECTION).add({
                "zipcode": zipcode,
                "location": location,
                "timestamp": firestore.SERVER_TIMESTAMP,
                "socialMediaStatus": {"discord": discord_success},
                "status": "completed",
            })
        except Exception as e:
            logger.error(f"❌ Could not log social media status for {zipcode}: {e}")

    def run(self) -> Dict:
        """
        Process every emergency reading.

        A failure while handling one emergency is logged and the job moves on.
        Reading the sensor feed itself may raise.
        """
        logger.info("🚨 Starting emergency monitoring job...")
        emergencies = self.collect_emergencies()

        if not emergencies:
            logger.info("✅ No emergencies to process")
            return {
                "message": "Emergency monitoring completed. No emergencies found.",
                "processed": 0,
                "emergencies": [],
            }

        processed = []
        for emergency in emergencies:
            zipcode = emergency["zipcode"]
            try:
                message = format_sensor_alert(emergency["location"], zipcode, emergency["sensorData"])
                discord_success = discord_service.notify(message, is_emergency=True)
                self._log_social_status(zipcode, emergency["location"], discord_success)
                processed.append({
                    "zipcode": zipcode,
                    "location": emergency["location"],
                    "timestamp": emergency["timestamp"],
                    "discord": discord_success,
                })
                logger.info(f"✅ Emergency processed for {zipcode}: Discord {'✅' if discord_success else '❌'}")
            except Exception as e:
                logger.error(f"❌ Error processing emergency for {zipcode}: {e}", exc_info=True)

        return {
            "message": f"Emergency monitoring completed. Processed {len(emergencies)} emergencies.",
            "processed": len(emergencies),
            "emergencies": processed,
        }


_monitor = None


def get_emergency_monitor() -> EmergencyMonitor:
    global _monitor
    if _monitor is None:
        _monitor = EmergencyMonitor()
    return _monitor
