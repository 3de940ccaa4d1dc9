"""Address geocoding."""

from .client import GeocodingClient, confidence_for

__all__ = ["GeocodingClient", "confidence_for"]
