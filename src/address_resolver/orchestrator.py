"""End-to-end address resolution pipeline.

Each call moves forward through the stages below and never back:

    plus code check -> provider race -> variation retry -> city fallback

and ends either with a GeocodeResult or with GeocodingNotFound.
"""

from typing import Any, Optional

import httpx
from loguru import logger

from address_resolver.city_fallback import CityFallbackTable
from address_resolver.config import Settings, get_settings
from address_resolver.errors import GeocodingError, GeocodingNotFound
from address_resolver.geocoding import ProviderRegistry
from address_resolver.models import GeocodeResult
from address_resolver.plus_code import PlusCodeResolver
from address_resolver.race import ProviderRace
from address_resolver.variations import AddressVariationGenerator


class GeocodingOrchestrator:
    """Public entry point used by business services to resolve an address.

    Owns the immutable provider registry and city table for its lifetime,
    plus one shared HTTP client. Safe to call from several threads at once.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None,
        codec: Any = None,
        registry: Optional[ProviderRegistry] = None,
        city_fallback: Optional[CityFallbackTable] = None,
    ):
        """
        Wire up the pipeline.

        Args:
            settings: Application settings; loaded from the environment if omitted.
            client: HTTP client shared by every provider call. One with
                keep-alive pooling is created (and later closed) if omitted.
            codec: Plus code codec; defaults to the openlocationcode module.
            registry: Provider registry; built from settings if omitted.
            city_fallback: City table; the built-in table if omitted.
        """
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self.client = client or httpx.Client(
            headers={"User-Agent": self.settings.user_agent},
            timeout=self.settings.request_timeout,
            limits=httpx.Limits(max_keepalive_connections=10),
        )
        self.registry = registry or ProviderRegistry.from_settings(self.settings)
        self.city_fallback = city_fallback or CityFallbackTable()
        self.variations = AddressVariationGenerator.from_settings(self.settings)
        self.race = ProviderRace(
            registry=self.registry,
            client=self.client,
            settings=self.settings,
            variations=self.variations,
            city_fallback=self.city_fallback,
        )
        self.plus_codes = PlusCodeResolver(self.race, codec=codec)

    def geocode(self, address: str) -> GeocodeResult:
        """
        Resolve an address to an approximate coordinate.

        Args:
            address: Free-form postal address, optionally containing a plus code.

        Returns:
            GeocodeResult tagged with the stage or provider that produced it.

        Raises:
            GeocodingNotFound: If every stage is exhausted.
        """
        if not address or not address.strip():
            raise GeocodingNotFound(address or "", "Address is empty")

        logger.info("Starting geocoding for '{}'", address)

        result = self.plus_codes.attempt(address)
        if result is not None:
            logger.info("Resolved '{}' from plus code", address)
            return result

        return self.race.race(address)

    def geocode_with_fallback(self, address: str) -> GeocodeResult:
        """
        Like :meth:`geocode`, with one more city fallback probe on failure.

        Any failure of the primary pipeline, expected or not, leads to the
        probe. The error raised when the probe also misses keeps the original
        failure's message and error code, and chains it as ``__cause__``.

        Raises:
            GeocodingNotFound: If the address cannot be resolved.
        """
        try:
            return self.geocode(address)
        except GeocodingError as error:
            logger.info("Primary geocoding failed: {}", error.message)
            failure: Exception = error
        except Exception as error:
            logger.opt(exception=error).error("Unexpected failure geocoding '{}'", address)
            failure = error

        try:
            return self.city_fallback.lookup(address or "")
        except GeocodingNotFound:
            logger.warning("Geocoding failed for '{}': {}", address, failure)

        if isinstance(failure, GeocodingError):
            raise GeocodingNotFound(
                address or "",
                failure.message,
                status_code=failure.status_code,
                error_code=failure.error_code,
                details={**failure.details, "original_error": failure.message},
            ) from failure
        raise GeocodingNotFound(
            address or "",
            f"Geocoding failed: {failure}",
            status_code=500,
            error_code="GEOCODING_FAILURE",
            details={"original_error": repr(failure)},
        ) from failure

    def close(self) -> None:
        """Close the HTTP client if it was created here."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "GeocodingOrchestrator":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
