"""Concurrent provider race with variation retry."""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Optional

import httpx
from loguru import logger

from address_resolver.city_fallback import CityFallbackTable
from address_resolver.config import Settings
from address_resolver.errors import (
    AllProvidersFailed,
    MissingCredential,
    ProviderError,
    ProviderNoResult,
    ProviderRequestError,
    ProviderTimeout,
)
from address_resolver.geocoding import GeocodeProvider, ProviderRegistry
from address_resolver.models import GeocodeResult
from address_resolver.variations import AddressVariationGenerator

# Extra wait on top of the request timeout before a branch counts as timed out
RACE_GRACE_SECONDS = 0.5


class ProviderRace:
    """Queries every registered provider in parallel and keeps the first hit.

    Each race runs its branches on its own short-lived thread pool, one
    worker per provider, sharing one ``httpx.Client``. The caller blocks
    until a branch succeeds or every branch has failed. Losing branches are
    left to finish on their own.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        client: httpx.Client,
        settings: Settings,
        variations: AddressVariationGenerator,
        city_fallback: CityFallbackTable,
    ):
        self.registry = registry
        self.client = client
        self.settings = settings
        self.variations = variations
        self.city_fallback = city_fallback

    @property
    def race_timeout(self) -> float:
        return self.settings.request_timeout + RACE_GRACE_SECONDS

    def race(self, query: str, skip_variations: bool = False) -> GeocodeResult:
        """
        Geocode a query against all providers at once.

        Args:
            query: Address text sent to every provider.
            skip_variations: When True, a failed race raises instead of
                retrying the variation ladder.

        Returns:
            The first successful GeocodeResult.

        Raises:
            AllProvidersFailed: If every provider fails and skip_variations is set.
            GeocodingNotFound: If variations and the city fallback also fail.
        """
        try:
            return self._race_providers(query)
        except AllProvidersFailed as error:
            if skip_variations:
                raise
            logger.info("{}; trying address variations", error.message)
            return self.retry_variations(query)

    def retry_variations(self, query: str) -> GeocodeResult:
        """
        Retry the first few ladder variations, then the city fallback.

        Each variation is raced with variation expansion disabled, so the
        retry never nests.

        Raises:
            GeocodingNotFound: If nothing matches.
        """
        ladder = self.variations.ladder(query)[: self.settings.max_variation_attempts]
        for variation in ladder:
            logger.debug("Trying address variation '{}'", variation)
            try:
                result = self.race(variation, skip_variations=True)
            except AllProvidersFailed as error:
                logger.debug("Variation failed: {}", error.message)
                continue
            result.variation_used = variation
            return result

        logger.info("All variations failed for '{}'; trying city fallback", query)
        return self.city_fallback.lookup(query)

    def _race_providers(self, query: str) -> GeocodeResult:
        failures: list[ProviderError] = []
        keyed: list[GeocodeProvider] = []

        for provider in self.registry:
            if not provider.has_credential:
                failures.append(
                    MissingCredential(provider.name, f"API key not set ({provider.credential_key})")
                )
                continue
            keyed.append(provider)

        if not keyed:
            raise AllProvidersFailed(query, failures)

        # One worker per branch, so every branch starts as soon as it is submitted
        executor = ThreadPoolExecutor(
            max_workers=len(keyed),
            thread_name_prefix="provider-race",
        )
        try:
            pending: dict[Future, GeocodeProvider] = {
                executor.submit(self._query_provider, provider, query): provider
                for provider in keyed
            }
            result = self._first_success(pending, failures)
        finally:
            # Losing branches finish on their own
            executor.shutdown(wait=False)

        if result is not None:
            return result
        raise AllProvidersFailed(query, failures)

    def _first_success(
        self, pending: dict[Future, GeocodeProvider], failures: list[ProviderError]
    ) -> Optional[GeocodeResult]:
        settled: set[Future] = set()
        try:
            for future in as_completed(pending, timeout=self.race_timeout):
                settled.add(future)
                result = self._settle(future, failures)
                if result is not None:
                    return result
        except FuturesTimeout:
            for future, provider in pending.items():
                if future in settled:
                    continue
                if future.done():
                    result = self._settle(future, failures)
                    if result is not None:
                        return result
                else:
                    failures.append(
                        ProviderTimeout(provider.name, f"no answer within {self.race_timeout:.1f}s")
                    )
        return None

    @staticmethod
    def _settle(future: Future, failures: list[ProviderError]) -> Optional[GeocodeResult]:
        try:
            result = future.result()
        except ProviderError as error:
            logger.debug("Provider failed: {}", error.message)
            failures.append(error)
            return None
        logger.info("Resolved via {}", result.source)
        return result

    def _query_provider(self, provider: GeocodeProvider, query: str) -> GeocodeResult:
        """Run one provider branch. Every failure is raised as a ProviderError."""
        try:
            return self._request(provider, query)
        except ProviderError:
            raise
        except Exception as e:
            logger.warning("{} failed unexpectedly: {!r}", provider.name, e)
            raise ProviderRequestError(provider.name, f"{type(e).__name__}: {e}") from e

    def _request(self, provider: GeocodeProvider, query: str) -> GeocodeResult:
        timeout = self.settings.request_timeout
        try:
            response = self.client.get(
                provider.endpoint,
                params=provider.build_request(query),
                headers={"User-Agent": self.settings.user_agent},
                timeout=timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            raise ProviderTimeout(provider.name, f"timed out after {timeout}s") from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (401, 403):
                logger.warning("{} authentication failed - check API key", provider.name)
            raise ProviderRequestError(
                provider.name, f"HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderRequestError(provider.name, str(e)) from e

        try:
            matches = provider.results(payload)
            if not matches:
                raise ProviderNoResult(provider.name, f"no results for '{query}'")
            match = matches[0]
            coordinate = provider.extract_coordinate(match)
            matched_address = provider.matched_address(match)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise ProviderRequestError(provider.name, f"unexpected response: {e}") from e

        return GeocodeResult.from_coordinate(
            coordinate, provider.name, matched_address=matched_address
        )
