"""Geocoding provider implementations."""

# Providers register themselves on import
from . import geoapify  # noqa: F401
from . import google_maps  # noqa: F401
from . import mapbox  # noqa: F401
from . import openrouteservice  # noqa: F401

__all__ = ["openrouteservice", "geoapify", "google_maps", "mapbox"]
