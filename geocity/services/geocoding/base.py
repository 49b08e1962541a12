from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


class GeocodingProvider(ABC):
    """
    Abstract geocoding provider.

    Contract:
    - reverse_geocode(latitude, longitude) returns a dict with well-known keys:
      {
        "formatted_address": str | None,
        "locality": str | None,
        "city": str | None,
        "state": str | None,
        "country": str | None,
        "provider": str
      }
      and empty fields on failure.
    - geocode(address) returns {"lat", "lng", "formatted_address", "provider"}
      or None when the address could not be resolved.
    - MUST NEVER raise upstream exceptions.
    - Implementations should enforce a network timeout <= 5 seconds.
    """

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, str]:
        raise NotImplementedError

    @abstractmethod
    def geocode(self, address: str) -> Optional[Dict]:
        raise NotImplementedError


def empty_result(provider: str) -> Dict[str, str]:
    return {
        "formatted_address": None,
        "locality": None,
        "city": None,
        "state": None,
        "country": None,
        "provider": provider,
    }


def format_coordinates(latitude: float, longitude: float) -> str:
    """Fallback location label when reverse geocoding yields nothing."""
    return f"{latitude}, {longitude}"
