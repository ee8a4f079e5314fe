"""Geocoding providers for Address Resolver.

This package provides the provider interface and the registry of concrete
third-party geocoding APIs raced by the resolver.
"""

from .base import GeocodeProvider, GeoJSONProvider
from .registry import ProviderRegistry

from . import providers  # noqa: F401,E402  (registers the built-in providers)

__all__ = [
    "GeocodeProvider",
    "GeoJSONProvider",
    "ProviderRegistry",
]
