"""Abstract base class for geocoding providers."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from address_resolver.config import ProviderConfig, Settings
from address_resolver.models import Coordinate


class GeocodeProvider(ABC):
    """One third-party HTTP geocoding API.

    A provider only knows how to shape a request and read a response. The
    HTTP call itself is made by the race so that every provider shares the
    same client, timeout and headers.
    """

    name: str = ""

    def __init__(self, config: Settings):
        """Initialize the provider and read its credential.

        Args:
            config: Settings object containing provider configuration
        """
        self.config = config
        self.provider_config: ProviderConfig = getattr(config.providers, self.name)
        self.api_key: Optional[str] = self.provider_config.api_key or None

    @property
    def credential_key(self) -> str:
        """Environment variable that supplies this provider's API key."""
        return f"ADDRESS_RESOLVER_PROVIDERS__{self.name.upper()}__API_KEY"

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Full URL of the forward geocoding endpoint."""
        pass

    @abstractmethod
    def build_request(self, query: str) -> dict[str, Any]:
        """Build query-string parameters for a free-form address.

        Args:
            query: Address text to geocode

        Returns:
            Parameters passed to the GET request
        """
        pass

    @abstractmethod
    def results(self, payload: Any) -> list[Any]:
        """Return the list of matches in a decoded JSON response."""
        pass

    @abstractmethod
    def extract_coordinate(self, match: Any) -> Coordinate:
        """Read the coordinate pair from a single match.

        Raises:
            KeyError, IndexError, TypeError, ValueError: On malformed matches
        """
        pass

    def matched_address(self, match: Any) -> Optional[str]:
        """Human readable label of a match, if the provider returns one."""
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} credential={self.has_credential}>"


class GeoJSONProvider(GeocodeProvider):
    """Provider whose response is a GeoJSON FeatureCollection."""

    def results(self, payload: Any) -> list[Any]:
        if not isinstance(payload, dict):
            return []
        return payload.get("features") or []

    def extract_coordinate(self, match: Any) -> Coordinate:
        lon, lat = match["geometry"]["coordinates"][:2]
        return Coordinate(lat=float(lat), lon=float(lon))
