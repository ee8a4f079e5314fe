"""Geoapify geocoding provider."""

from typing import Any, Optional

from address_resolver.models import Coordinate

from ..base import GeoJSONProvider
from ..registry import ProviderRegistry


@ProviderRegistry.register
class GeoapifyProvider(GeoJSONProvider):
    """Geoapify forward geocoding.

    The GeoJSON response carries ``lat``/``lon`` in each feature's properties.
    Requires: API key.
    """

    name = "geoapify"

    @property
    def endpoint(self) -> str:
        return f"{self.provider_config.base_url}/v1/geocode/search"

    def build_request(self, query: str) -> dict[str, Any]:
        return {
            "apiKey": self.api_key,
            "text": query,
            "limit": 1,
            "lang": self.provider_config.lang,
        }

    def extract_coordinate(self, match: Any) -> Coordinate:
        properties = match["properties"]
        return Coordinate(lat=float(properties["lat"]), lon=float(properties["lon"]))

    def matched_address(self, match: Any) -> Optional[str]:
        return match.get("properties", {}).get("formatted")
