"""Provider registry for geocoding providers."""

from typing import Iterable, Iterator

from loguru import logger

from address_resolver.config import Settings

from .base import GeocodeProvider


class ProviderRegistry:
    """Immutable, ordered list of provider instances.

    Provider classes are collected in a class-level catalog by the
    :meth:`register` decorator. An instance is built once at startup with
    :meth:`from_settings` and never changes afterwards.
    """

    _catalog: dict[str, type[GeocodeProvider]] = {}

    @classmethod
    def register(
        cls, provider_class: type[GeocodeProvider]
    ) -> type[GeocodeProvider]:
        """Decorator to register a provider class.

        Args:
            provider_class: GeocodeProvider subclass to register

        Returns:
            The same provider class (for use as decorator)

        Example:
            @ProviderRegistry.register
            class GeoapifyProvider(GeoJSONProvider):
                name = "geoapify"
        """
        cls._catalog[provider_class.name] = provider_class
        return provider_class

    @classmethod
    def available(cls) -> list[str]:
        """List all registered provider names.

        Returns:
            List of provider identifiers
        """
        return sorted(cls._catalog.keys())

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        """Instantiate the configured providers in ``provider_order``.

        Disabled providers are skipped. Providers without a credential are
        kept; they fail locally when raced.

        Raises:
            ValueError: If a provider name is not registered
        """
        providers = []
        for name in settings.provider_order:
            if name not in cls._catalog:
                available = ", ".join(cls.available())
                raise ValueError(
                    f"Unknown geocoding provider: {name}. "
                    f"Available providers: {available}"
                )
            provider = cls._catalog[name](settings)
            if not provider.provider_config.enabled:
                logger.debug("Provider {} disabled, not registering", name)
                continue
            if not provider.has_credential:
                logger.warning(
                    "Provider {} has no API key; set {} to enable it",
                    name,
                    provider.credential_key,
                )
            providers.append(provider)

        logger.debug("Provider registry built: {}", [p.name for p in providers])
        return cls(providers)

    def __init__(self, providers: Iterable[GeocodeProvider]):
        self._providers: tuple[GeocodeProvider, ...] = tuple(providers)

    def __iter__(self) -> Iterator[GeocodeProvider]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    @property
    def names(self) -> list[str]:
        return [provider.name for provider in self._providers]
