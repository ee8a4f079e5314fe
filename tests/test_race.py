"""Tests for the concurrent provider race and variation retry."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from address_resolver.config import (
    GeoapifyConfig,
    GoogleMapsConfig,
    MapboxConfig,
    OpenRouteServiceConfig,
    ProvidersConfig,
    Settings,
)
from address_resolver.errors import (
    AllProvidersFailed,
    GeocodingNotFound,
    MissingCredential,
    ProviderNoResult,
    ProviderRequestError,
    ProviderTimeout,
)
from address_resolver.orchestrator import GeocodingOrchestrator

ORS_URL = "https://api.openrouteservice.org/geocode/search"
GEOAPIFY_URL = "https://api.geoapify.com/v1/geocode/search"
MAPBOX_URL = "https://api.mapbox.com/search/geocode/v6/forward"


class TestProviderRace:
    """Tests for a single race across providers."""

    def test_first_success_wins(self, orchestrator, route, geojson, no_results):
        """Test that a provider with results wins over one with none."""
        route(lambda url, query: geojson(23.03, 72.58, "Navrangpura") if url == GEOAPIFY_URL else no_results)

        result = orchestrator.race.race("Navrangpura, Ahmedabad", skip_variations=True)

        assert result.source == "geoapify"
        assert result.lat == 23.03
        assert result.lon == 72.58
        assert result.matched_address == "Navrangpura"

    def test_faster_provider_wins(self, orchestrator, route, geojson):
        """Test that the race resolves without waiting for a slow sibling."""
        release = threading.Event()

        def handler(url, query):
            if url == ORS_URL:
                release.wait(2)
                return geojson(1.0, 1.0)
            return geojson(19.07, 72.87)

        route(handler)
        try:
            result = orchestrator.race.race("Mumbai", skip_variations=True)
        finally:
            release.set()

        assert result.source == "geoapify"

    def test_sends_user_agent_and_timeout(self, orchestrator, route, geojson, http_client):
        """Test that every request carries the identifying header and timeout."""
        route(lambda url, query: geojson(12.97, 77.59))

        orchestrator.race.race("Bangalore", skip_variations=True)

        for call in http_client.get.call_args_list:
            assert call.kwargs["headers"] == {"User-Agent": "AddressResolver/1.0"}
            assert call.kwargs["timeout"] == 0.5

    def test_provider_without_credential_is_never_queried(
        self, http_client, route, geojson, test_settings, queried
    ):
        """Test that a provider missing its API key issues no request."""
        test_settings.providers.openrouteservice.api_key = None
        route(lambda url, query: geojson(28.61, 77.20))

        with GeocodingOrchestrator(test_settings, client=http_client) as orchestrator:
            result = orchestrator.race.race("Delhi", skip_variations=True)

        assert result.source == "geoapify"
        assert [url for url, _ in queried()] == [GEOAPIFY_URL]

    def test_all_failed_carries_every_reason(self, orchestrator, route, no_results):
        """Test the aggregate error when both providers come back empty."""
        route(lambda url, query: no_results)

        with pytest.raises(AllProvidersFailed) as exc_info:
            orchestrator.race.race("Nowhere", skip_variations=True)

        failures = exc_info.value.failures
        assert len(failures) == 2
        assert all(isinstance(f, ProviderNoResult) for f in failures)
        assert {f.provider for f in failures} == {"openrouteservice", "geoapify"}

    def test_missing_credentials_reported_in_aggregate(self, http_client):
        """Test that unkeyed providers show up as MissingCredential failures."""
        settings = Settings(provider_order=["geoapify"])

        with GeocodingOrchestrator(settings, client=http_client) as orchestrator:
            with pytest.raises(AllProvidersFailed) as exc_info:
                orchestrator.race.race("Pune", skip_variations=True)

        assert [type(f) for f in exc_info.value.failures] == [MissingCredential]
        http_client.get.assert_not_called()

    def test_timeout_and_transport_errors(self, orchestrator, route):
        """Test that httpx errors are mapped to provider failures."""

        def handler(url, query):
            if url == ORS_URL:
                return httpx.ReadTimeout("slow")
            return httpx.ConnectError("down")

        route(handler)

        with pytest.raises(AllProvidersFailed) as exc_info:
            orchestrator.race.race("Chennai", skip_variations=True)

        by_provider = {f.provider: f for f in exc_info.value.failures}
        assert isinstance(by_provider["openrouteservice"], ProviderTimeout)
        assert isinstance(by_provider["geoapify"], ProviderRequestError)

    def test_http_status_error(self, orchestrator, route, geojson):
        """Test that a 401 from one provider does not stop the other."""

        def handler(url, query):
            if url == ORS_URL:
                request = httpx.Request("GET", url)
                return httpx.HTTPStatusError(
                    "Unauthorized", request=request, response=httpx.Response(401, request=request)
                )
            return geojson(22.57, 88.36)

        route(handler)

        result = orchestrator.race.race("Kolkata", skip_variations=True)

        assert result.source == "geoapify"

    def test_malformed_and_out_of_range_payloads(self, orchestrator, route):
        """Test that unreadable payloads count as request errors."""

        def handler(url, query):
            if url == ORS_URL:
                return {"features": [{"geometry": {}}]}
            return {"features": [{"properties": {"lat": 123.0, "lon": 72.0}}]}

        route(handler)

        with pytest.raises(AllProvidersFailed) as exc_info:
            orchestrator.race.race("Hyderabad", skip_variations=True)

        assert all(isinstance(f, ProviderRequestError) for f in exc_info.value.failures)

    def test_race_wait_is_bounded(self, http_client, route, no_results, test_settings):
        """Test that a hanging provider is recorded as a timeout."""
        test_settings.request_timeout = 0.2
        release = threading.Event()

        def handler(url, query):
            if url == ORS_URL:
                release.wait(3)
            return no_results

        route(handler)

        with GeocodingOrchestrator(test_settings, client=http_client) as orchestrator:
            started = time.monotonic()
            try:
                with pytest.raises(AllProvidersFailed) as exc_info:
                    orchestrator.race.race("Ahmedabad", skip_variations=True)
                elapsed = time.monotonic() - started
            finally:
                release.set()

        assert elapsed < 2
        by_provider = {f.provider: f for f in exc_info.value.failures}
        assert isinstance(by_provider["openrouteservice"], ProviderTimeout)
        assert isinstance(by_provider["geoapify"], ProviderNoResult)

    def test_concurrent_races_do_not_queue_branches(self, http_client, route, geojson, no_results):
        """Test that busy concurrent races still give every branch its full timeout."""
        settings = Settings(
            request_timeout=0.8,
            providers=ProvidersConfig(
                openrouteservice=OpenRouteServiceConfig(api_key="ors-key"),
                geoapify=GeoapifyConfig(api_key="geoapify-key"),
                google=GoogleMapsConfig(api_key="google-key"),
                mapbox=MapboxConfig(api_key="mapbox-key"),
            ),
        )

        def handler(url, query):
            time.sleep(0.7)
            if url == MAPBOX_URL:
                return geojson(19.07, 72.88, "Andheri")
            return no_results

        route(handler)
        queries = ["Andheri East, Mumbai", "Bandra West, Mumbai", "Powai, Mumbai"]

        with GeocodingOrchestrator(settings, client=http_client) as orchestrator:
            with ThreadPoolExecutor(max_workers=len(queries)) as callers:
                results = list(
                    callers.map(lambda q: orchestrator.race.race(q, skip_variations=True), queries)
                )

        assert [result.source for result in results] == ["mapbox", "mapbox", "mapbox"]

    def test_unexpected_client_error_is_a_provider_failure(self, orchestrator, route, geojson):
        """Test that an error outside the usual httpx families only loses one branch."""

        def handler(url, query):
            if url == ORS_URL:
                return httpx.InvalidURL("Invalid non-printable ASCII character in URL")
            return geojson(23.03, 72.58, "Navrangpura")

        route(handler)

        result = orchestrator.race.race("Navrangpura, Ahmedabad", skip_variations=True)

        assert result.source == "geoapify"

    def test_unexpected_client_error_recorded_in_aggregate(self, orchestrator, route, no_results):
        def handler(url, query):
            if url == ORS_URL:
                return httpx.InvalidURL("bad url")
            return no_results

        route(handler)

        with pytest.raises(AllProvidersFailed) as exc_info:
            orchestrator.race.race("Surat", skip_variations=True)

        by_provider = {f.provider: f for f in exc_info.value.failures}
        assert isinstance(by_provider["openrouteservice"], ProviderRequestError)
        assert isinstance(by_provider["openrouteservice"].__cause__, httpx.InvalidURL)
        assert isinstance(by_provider["geoapify"], ProviderNoResult)


class TestVariationRetry:
    """Tests for the variation ladder retry after a failed race."""

    def test_variation_success_tagged_with_provider(self, orchestrator, route, geojson, no_results):
        """Test that a variation hit keeps the provider name as source."""

        def handler(url, query):
            if url == ORS_URL and query == "Ahmedabad, Gujarat, India":
                return geojson(23.02, 72.57)
            return no_results

        route(handler)

        result = orchestrator.race.race("Street 5, Area 9, Ahmedabad, Gujarat, India")

        assert result.source == "openrouteservice"
        assert result.variation_used == "Ahmedabad, Gujarat, India"

    def test_at_most_three_variations(self, orchestrator, route, no_results, queried):
        """Test that only the first three variations are retried."""
        route(lambda url, query: no_results)
        address = "Street 5, Area 9, Somewhere, Gujarat"

        with pytest.raises(GeocodingNotFound):
            orchestrator.race.race(address)

        queries = [query for _, query in queried()]
        # One initial race plus three variations, two providers each
        assert len(queries) == 8
        assert set(queries) == {address, "Area 9, Somewhere, Gujarat", "Somewhere, Gujarat"}
        assert "Gujarat" not in queries

    def test_variation_attempts_configurable(self, http_client, route, no_results, test_settings, queried):
        """Test that max_variation_attempts limits the ladder."""
        test_settings.max_variation_attempts = 1
        route(lambda url, query: no_results)

        with GeocodingOrchestrator(test_settings, client=http_client) as orchestrator:
            with pytest.raises(GeocodingNotFound):
                orchestrator.race.race("Plot 7, Sector 21, Gandhinagar, Gujarat")

        assert len(queried()) == 4

    def test_city_fallback_after_variations(self, orchestrator, route, no_results):
        """Test that the city table answers when all variations fail."""
        route(lambda url, query: no_results)

        result = orchestrator.race.race("sjsjjsjsjs, Ahmedabad")

        assert result.source == "approximate"
        assert result.lat == 23.0225
        assert result.lon == 72.5714

    def test_skip_variations_never_retries(self, orchestrator, route, no_results, queried):
        """Test that the guard surfaces the aggregate failure directly."""
        route(lambda url, query: no_results)

        with pytest.raises(AllProvidersFailed):
            orchestrator.race.race("sjsjjsjsjs, Ahmedabad", skip_variations=True)

        assert len(queried()) == 2


def test_geoapify_only_registry(http_client, route, geojson):
    """Test a registry reduced to a single provider."""
    settings = Settings(
        provider_order=["geoapify"],
        providers={"geoapify": GeoapifyConfig(api_key="k")},
    )
    route(lambda url, query: geojson(18.52, 73.85))

    with GeocodingOrchestrator(settings, client=http_client) as orchestrator:
        result = orchestrator.race.race("Pune")

    assert result.source == "geoapify"
