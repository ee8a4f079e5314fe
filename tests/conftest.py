"""Pytest configuration and fixtures for Address Resolver tests."""

import os
from typing import Any, Callable
from unittest.mock import Mock

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
from address_resolver.orchestrator import GeocodingOrchestrator

ENV_PREFIX = "ADDRESS_RESOLVER_"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the developer's ADDRESS_RESOLVER_* variables and .env out of Settings()."""
    for name in list(os.environ):
        if name.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _query_of(params: dict[str, Any]) -> str:
    return params.get("text") or params.get("q") or params.get("address")


def _response(payload: Any) -> Mock:
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status = Mock()
    return response


@pytest.fixture
def test_settings() -> Settings:
    """
    Provide test settings with two keyed providers and a short timeout.

    Returns:
        Settings instance configured for testing.
    """
    return Settings(
        log_level="DEBUG",
        log_file="logs/test.log",
        request_timeout=0.5,
        providers=ProvidersConfig(
            openrouteservice=OpenRouteServiceConfig(api_key="ors-test-key"),
            geoapify=GeoapifyConfig(api_key="geoapify-test-key"),
            google=GoogleMapsConfig(enabled=False),
            mapbox=MapboxConfig(enabled=False),
        ),
    )


@pytest.fixture
def http_client() -> Mock:
    """Stand-in for the shared httpx.Client."""
    return Mock(spec=httpx.Client)


@pytest.fixture
def route(http_client: Mock) -> Callable:
    """
    Install a handler answering every GET made through ``http_client``.

    The handler receives ``(url, query)`` and returns either a JSON payload
    or an exception instance, which is raised from ``client.get``.
    """

    def install(handler: Callable[[str, str], Any]) -> Mock:
        def get(url, params=None, headers=None, timeout=None):
            outcome = handler(url, _query_of(params or {}))
            if isinstance(outcome, Exception):
                raise outcome
            return _response(outcome)

        http_client.get.side_effect = get
        return http_client

    return install


@pytest.fixture
def geojson() -> Callable[..., dict[str, Any]]:
    """Build a one-feature GeoJSON payload readable by every GeoJSON provider."""

    def build(lat: float, lon: float, label: str = "Matched place") -> dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "geometry": {"type": "Point", "coordinates": [lon, lat]},
                    "properties": {
                        "lat": lat,
                        "lon": lon,
                        "label": label,
                        "formatted": label,
                    },
                }
            ],
        }

    return build


@pytest.fixture
def no_results() -> dict[str, Any]:
    return {"type": "FeatureCollection", "features": []}


@pytest.fixture
def queried(http_client: Mock) -> Callable[[], list[tuple[str, str]]]:
    """Return the ``(url, query)`` pairs sent so far."""

    def calls() -> list[tuple[str, str]]:
        return [
            (call.args[0], _query_of(call.kwargs["params"]))
            for call in http_client.get.call_args_list
        ]

    return calls


@pytest.fixture
def orchestrator(test_settings: Settings, http_client: Mock):
    """
    Provide an orchestrator wired to the mock HTTP client.

    Yields:
        GeocodingOrchestrator instance, closed after the test.
    """
    orchestrator = GeocodingOrchestrator(test_settings, client=http_client)
    try:
        yield orchestrator
    finally:
        orchestrator.close()
