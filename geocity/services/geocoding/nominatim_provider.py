import logging
from typing import Dict, Any, Optional

import requests

from .base import GeocodingProvider, empty_result

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    """
    OpenStreetMap Nominatim provider.

    - No API key required.
    - Includes a User-Agent header as required by Nominatim usage policy.
    - Never raises upstream exceptions.
    """

    BASE_URL = "https://nominatim.openstreetmap.org"
    TIMEOUT_SECONDS = 5.0

    def __init__(self, user_agent: str = "geocity/1.0"):
        self.user_agent = user_agent

    def _get(self, endpoint: str, params: Dict[str, Any]):
        return requests.get(
            f"{self.BASE_URL}/{endpoint}",
            params={**params, "format": "json"},
            headers={"User-Agent": self.user_agent},
            timeout=self.TIMEOUT_SECONDS,
        )

    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, str]:
        try:
            resp = self._get("reverse", {"lat": latitude, "lon": longitude, "addressdetails": 1})
            if resp.status_code != 200:
                logger.warning(f"Nominatim reverse-geocode failed with status {resp.status_code}")
                return empty_result("nominatim")

            data: Dict[str, Any] = resp.json()
            address = data.get("address") or {}

            locality = (
                address.get("suburb")
                or address.get("neighbourhood")
                or address.get("quarter")
                or address.get("village")
                or address.get("town")
            )

            return {
                "formatted_address": data.get("display_name"),
                "locality": locality,
                "city": address.get("city") or address.get("town") or address.get("village"),
                "state": address.get("state"),
                "country": address.get("country"),
                "provider": "nominatim",
            }
        except Exception as e:
            logger.warning(f"Nominatim reverse-geocode error: {e}")
            return empty_result("nominatim")

    def geocode(self, address: str) -> Optional[Dict]:
        if not address or not address.strip():
            return None

        try:
            resp = self._get("search", {"q": address, "limit": 1})
            if resp.status_code != 200:
                logger.warning(f"Nominatim geocode failed with status {resp.status_code}")
                return None

            results = resp.json() or []
            if not results:
                return None
            first = results[0]
            return {
                "lat": float(first["lat"]),
                "lng": float(first["lon"]),
                "formatted_address": first.get("display_name"),
                "provider": "nominatim",
            }
        except Exception as e:
            logger.warning(f"Nominatim geocode error for {address!r}: {e}")
            return None
