"""Address Resolver: turn free-form postal addresses into coordinates."""

from address_resolver.errors import GeocodingError, GeocodingNotFound
from address_resolver.models import Coordinate, GeocodeResult
from address_resolver.orchestrator import GeocodingOrchestrator

__all__ = [
    "Coordinate",
    "GeocodeResult",
    "GeocodingError",
    "GeocodingNotFound",
    "GeocodingOrchestrator",
]
