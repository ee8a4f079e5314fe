"""Google Maps Geocoding API provider."""

from typing import Any, Optional

from address_resolver.models import Coordinate

from ..base import GeocodeProvider
from ..registry import ProviderRegistry


@ProviderRegistry.register
class GoogleMapsProvider(GeocodeProvider):
    """Google Maps Geocoding API implementation.

    Premium quality geocoding service with global coverage, biased towards
    the configured region.
    Requires: API key.
    """

    name = "google"

    @property
    def endpoint(self) -> str:
        return f"{self.provider_config.base_url}/maps/api/geocode/json"

    def build_request(self, query: str) -> dict[str, Any]:
        return {
            "address": query,
            "key": self.api_key,
            "region": self.provider_config.region,
        }

    def results(self, payload: Any) -> list[Any]:
        """Return matches, treating ``ZERO_RESULTS`` as an empty list.

        Raises:
            ValueError: If Google reports any other non-OK status
        """
        status = payload.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            message = payload.get("error_message", "")
            raise ValueError(f"Google Maps API status {status}: {message}".rstrip(": "))
        return payload.get("results") or []

    def extract_coordinate(self, match: Any) -> Coordinate:
        location = match["geometry"]["location"]
        return Coordinate(lat=float(location["lat"]), lon=float(location["lng"]))

    def matched_address(self, match: Any) -> Optional[str]:
        return match.get("formatted_address")
