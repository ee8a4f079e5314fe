"""Configuration management for Address Resolver using pydantic-settings."""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderConfig(BaseModel):
    """Base configuration for a geocoding provider."""

    enabled: bool = True
    api_key: Optional[str] = None
    base_url: str = ""


class OpenRouteServiceConfig(ProviderConfig):
    """Configuration for the openrouteservice geocoder."""

    base_url: str = "https://api.openrouteservice.org"
    country: str = "IN"  # Boundary filter, ISO 3166-1 alpha-2


class GeoapifyConfig(ProviderConfig):
    """Configuration for the Geoapify geocoder."""

    base_url: str = "https://api.geoapify.com"
    lang: str = "en"


class GoogleMapsConfig(ProviderConfig):
    """Configuration for the Google Maps geocoder."""

    base_url: str = "https://maps.googleapis.com"
    region: str = "in"


class MapboxConfig(ProviderConfig):
    """Configuration for the Mapbox Geocoding API."""

    base_url: str = "https://api.mapbox.com"
    api_version: str = "v6"
    country: str = "in"


class ProvidersConfig(BaseModel):
    """Container for all provider configurations."""

    openrouteservice: OpenRouteServiceConfig = Field(default_factory=OpenRouteServiceConfig)
    geoapify: GeoapifyConfig = Field(default_factory=GeoapifyConfig)
    google: GoogleMapsConfig = Field(default_factory=GoogleMapsConfig)
    mapbox: MapboxConfig = Field(default_factory=MapboxConfig)


DEFAULT_LOCAL_KEYWORDS = [
    "india",
    "gujarat",
    "maharashtra",
    "delhi",
    "mumbai",
    "bangalore",
    "chennai",
    "kolkata",
    "hyderabad",
    "pune",
    "ahmedabad",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRESS_RESOLVER_",
        env_file=".env",
        env_nested_delimiter="__",  # ADDRESS_RESOLVER_PROVIDERS__GEOAPIFY__API_KEY
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_file: str = Field(
        default="logs/address-resolver.log",
        description="Path to log file",
    )
    user_agent: str = Field(
        default="AddressResolver/1.0",
        description="User-Agent header sent to every provider",
    )
    request_timeout: float = Field(
        default=3.0,
        description="Per-provider request timeout in seconds",
    )
    max_variation_attempts: int = Field(
        default=3,
        description="How many address variations are retried after a failed race",
    )

    # Provider configurations
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    provider_order: list[str] = Field(
        default_factory=lambda: ["openrouteservice", "geoapify", "google", "mapbox"],
        description="Providers raced for every query, in registry order",
    )

    # Locale used by the variation ladder
    local_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LOCAL_KEYWORDS),
        description="Country/region/city keywords that mark an address as local",
    )
    local_country: str = Field(
        default="India",
        description="Country suffix appended to local addresses",
    )
    generic_country_suffixes: list[str] = Field(
        default_factory=lambda: ["USA"],
        description="Trailing country names stripped from non-local addresses",
    )


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
