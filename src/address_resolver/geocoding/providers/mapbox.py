"""Mapbox Geocoding API (v6) provider."""

from typing import Any, Optional

from ..base import GeoJSONProvider
from ..registry import ProviderRegistry


@ProviderRegistry.register
class MapboxProvider(GeoJSONProvider):
    """Mapbox v6 forward geocoding.

    The response is a GeoJSON FeatureCollection:
    {
        "type": "FeatureCollection",
        "features": [
            {
                "geometry": {"type": "Point", "coordinates": [lon, lat]},
                "properties": {"full_address": "string", ...}
            }
        ]
    }
    Requires: access token.
    """

    name = "mapbox"

    @property
    def endpoint(self) -> str:
        return (
            f"{self.provider_config.base_url}/search/geocode/"
            f"{self.provider_config.api_version}/forward"
        )

    def build_request(self, query: str) -> dict[str, Any]:
        return {
            "q": query,
            "access_token": self.api_key,
            "country": self.provider_config.country,
            "limit": 1,
        }

    def matched_address(self, match: Any) -> Optional[str]:
        properties = match.get("properties", {})
        return properties.get("full_address") or properties.get("name")
