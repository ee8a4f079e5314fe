"""openrouteservice (Pelias) geocoding provider."""

import json
from typing import Any, Optional

from ..base import GeoJSONProvider
from ..registry import ProviderRegistry


@ProviderRegistry.register
class OpenRouteServiceProvider(GeoJSONProvider):
    """openrouteservice forward geocoding.

    Returns GeoJSON features with ``[lon, lat]`` point geometry. Results are
    restricted to the configured country boundary.
    Requires: API key.
    """

    name = "openrouteservice"

    @property
    def endpoint(self) -> str:
        return f"{self.provider_config.base_url}/geocode/search"

    def build_request(self, query: str) -> dict[str, Any]:
        return {
            "api_key": self.api_key,
            "text": query,
            "boundary": json.dumps({"country": [self.provider_config.country]}),
            "size": 1,
        }

    def matched_address(self, match: Any) -> Optional[str]:
        return match.get("properties", {}).get("label")
