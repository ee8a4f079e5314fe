"""Static, low-precision city fallback table."""

from typing import Optional

from loguru import logger

from address_resolver.errors import GeocodingNotFound
from address_resolver.models import APPROXIMATE_SOURCE, Coordinate, GeocodeResult

# City centres; iteration order breaks ties when several names match
CITY_FALLBACKS: dict[str, Coordinate] = {
    "ahmedabad": Coordinate(23.0225, 72.5714),
    "mumbai": Coordinate(19.0760, 72.8777),
    "delhi": Coordinate(28.6139, 77.2090),
    "bangalore": Coordinate(12.9716, 77.5946),
    "chennai": Coordinate(13.0827, 80.2707),
    "kolkata": Coordinate(22.5726, 88.3639),
    "hyderabad": Coordinate(17.3850, 78.4867),
    "pune": Coordinate(18.5204, 73.8567),
}


class CityFallbackTable:
    """Last-resort lookup of a city name contained in the address."""

    def __init__(self, entries: Optional[dict[str, Coordinate]] = None):
        source = CITY_FALLBACKS if entries is None else entries
        self._entries: dict[str, Coordinate] = {
            city.lower(): coordinate for city, coordinate in source.items()
        }

    @property
    def cities(self) -> list[str]:
        return list(self._entries)

    def match(self, address: str) -> Optional[str]:
        """Return the first city key contained in the address, if any."""
        lowered = address.lower()
        for city in self._entries:
            if city in lowered:
                return city
        return None

    def lookup(self, address: str) -> GeocodeResult:
        """
        Resolve an address to its city's fixed coordinate.

        Args:
            address: Original address text.

        Returns:
            GeocodeResult with source 'approximate'.

        Raises:
            GeocodingNotFound: If no known city name appears in the address.
        """
        city = self.match(address)
        if city is None:
            logger.debug("No city fallback for '{}'", address)
            raise GeocodingNotFound(address)

        logger.info("Using approximate coordinates for {}", city)
        return GeocodeResult.from_coordinate(self._entries[city], APPROXIMATE_SOURCE)
