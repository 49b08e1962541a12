import logging
from typing import Dict, Any, Optional

import requests

from .base import GeocodingProvider, empty_result

logger = logging.getLogger(__name__)


class GoogleMapsProvider(GeocodingProvider):
    """
    Google Maps Geocoding API provider.

    - Used when GEOCODING_PROVIDER=google AND GOOGLE_MAPS_API_KEY is set.
    - Same output schema as other providers.
    - Fails gracefully and never raises upstream exceptions.
    """

    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
    TIMEOUT_SECONDS = 5.0

    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key

    def _request(self, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        resp = requests.get(self.BASE_URL, params={**params, "key": self.api_key}, timeout=self.TIMEOUT_SECONDS)
        if resp.status_code != 200:
            logger.warning(f"Google Maps geocode failed with status {resp.status_code}")
            return None
        data: Dict[str, Any] = resp.json()
        if data.get("status") not in (None, "OK"):
            logger.warning(f"Google Maps geocode status: {data.get('status')}")
            return None
        results = data.get("results") or []
        return results[0] if results else None

    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, str]:
        if not self.api_key:
            logger.info("GoogleMapsProvider called without API key; returning empty result.")
            return empty_result("google")

        try:
            first = self._request({"latlng": f"{latitude},{longitude}"})
            if first is None:
                return empty_result("google")

            components = first.get("address_components") or []

            def _get_component(types):
                for c in components:
                    if any(t in c.get("types", []) for t in types):
                        return c.get("long_name")
                return None

            return {
                "formatted_address": first.get("formatted_address"),
                "locality": _get_component(["sublocality", "neighborhood"]),
                "city": _get_component(["locality", "postal_town"]),
                "state": _get_component(["administrative_area_level_1"]),
                "country": _get_component(["country"]),
                "provider": "google",
            }
        except Exception as e:
            logger.warning(f"Google Maps reverse-geocode error: {e}")
            return empty_result("google")

    def geocode(self, address: str) -> Optional[Dict]:
        if not self.api_key or not address or not address.strip():
            return None

        try:
            first = self._request({"address": address})
            if first is None:
                return None
            location = (first.get("geometry") or {}).get("location") or {}
            if location.get("lat") is None or location.get("lng") is None:
                return None
            return {
                "lat": float(location["lat"]),
                "lng": float(location["lng"]),
                "formatted_address": first.get("formatted_address"),
                "provider": "google",
            }
        except Exception as e:
            logger.warning(f"Google Maps geocode error for {address!r}: {e}")
            return None
