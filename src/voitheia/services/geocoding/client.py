"""HTTP client for a Nominatim-compatible geocoding service."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ...config import settings
from ...exceptions import GeocodingUnavailable
from ...models.domain import ConfidenceLevel, Coordinate, GeocodeResult

# Nominatim place_rank thresholds: 26+ resolves to a street or finer, 16+ to a town.
STREET_PLACE_RANK = 26
TOWN_PLACE_RANK = 16

logger = logging.getLogger(__name__)


def confidence_for(place: dict[str, Any]) -> ConfidenceLevel:
    try:
        rank = int(place.get("place_rank", 0))
    except (TypeError, ValueError):
        rank = 0
    if rank >= STREET_PLACE_RANK:
        return ConfidenceLevel.HIGH
    if rank >= TOWN_PLACE_RANK:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


class GeocodingClient:
    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("Geocoder base URL is not configured.")
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.geocoder_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.geocoder_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            transport=self._transport,
        )

    def _search(self, params: dict[str, str]) -> list[dict[str, Any]]:
        url = f"{self.base_url}/search"
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, list):
                        raise ValueError("Geocoder response is not a list of places.")
                    return data
                except httpx.HTTPStatusError as e:
                    # Client errors will not improve with a retry
                    if e.response.status_code < 500:
                        raise GeocodingUnavailable(
                            f"Geocoder rejected the request with status {e.response.status_code}"
                        ) from e
                    attempt += 1
                    if attempt > self.max_retries:
                        raise GeocodingUnavailable(f"Geocoder failed after {attempt} attempts: {e}") from e
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Geocoder unreachable after {self.max_retries} retries: {e}")
                        raise GeocodingUnavailable(f"Geocoder at {self.base_url} is not reachable: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))  # Exponential backoff
                    logger.debug(
                        f"Geocoder network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}"
                    )
                    time.sleep(wait_time)
                except ValueError as e:
                    raise GeocodingUnavailable(f"Geocoder returned an unreadable response: {e}") from e
        finally:
            client.close()

    def geocode(self, *, street: str, city: str, zip_code: str, country: str) -> GeocodeResult | None:
        """Resolve a postal address to the single best matching coordinate.

        Returns None when the geocoder finds nothing.
        """
        params = {
            "street": street,
            "city": city,
            "postalcode": zip_code,
            "country": country,
            "format": "jsonv2",
            "limit": "1",
        }
        places = self._search({key: value for key, value in params.items() if value})
        if not places:
            logger.info(f"No geocoding match for '{street}, {zip_code} {city}, {country}'")
            return None

        best = places[0]
        try:
            coordinate = Coordinate(float(best["lat"]), float(best["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingUnavailable(f"Geocoder returned an invalid coordinate: {e}") from e
        return GeocodeResult(
            coordinate=coordinate,
            confidence=confidence_for(best),
            display_name=best.get("display_name", ""),
        )
