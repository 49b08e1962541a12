import logging
from typing import Dict, Optional

from geocity.core.settings import settings
from .base import GeocodingProvider, format_coordinates
from .nominatim_provider import NominatimProvider
from .google_provider import GoogleMapsProvider

logger = logging.getLogger(__name__)

_provider_instance: Optional[GeocodingProvider] = None


def get_geocoding_provider() -> GeocodingProvider:
    """
    Resolve the active geocoding provider based on settings.

    Rules:
    - GEOCODING_PROVIDER='google' AND GOOGLE_MAPS_API_KEY set: Google.
    - Otherwise Nominatim (no API key required).
    """
    global _provider_instance
    if _provider_instance is not None:
        return _provider_instance

    provider_name = (settings.GEOCODING_PROVIDER or "nominatim").lower()

    if provider_name == "google" and settings.GOOGLE_MAPS_API_KEY:
        _provider_instance = GoogleMapsProvider(api_key=settings.GOOGLE_MAPS_API_KEY)
        logger.info("Geocoding provider initialized: google")
        return _provider_instance

    _provider_instance = NominatimProvider(user_agent=f"{settings.APP_NAME.lower()}/{settings.APP_VERSION}")
    logger.info("Geocoding provider initialized: nominatim")
    return _provider_instance


def reset_geocoding_provider():
    global _provider_instance
    _provider_instance = None


def geocode(address: str) -> Optional[Dict]:
    """Forward geocode a free-text location. None when unresolved."""
    return get_geocoding_provider().geocode(address)


def reverse_geocode(latitude: float, longitude: float) -> Dict[str, str]:
    return get_geocoding_provider().reverse_geocode(latitude, longitude)


def describe_location(latitude: float, longitude: float) -> str:
    """Formatted address for a point, falling back to "lat, lng"."""
    result = reverse_geocode(latitude, longitude)
    return result.get("formatted_address") or format_coordinates(latitude, longitude)
