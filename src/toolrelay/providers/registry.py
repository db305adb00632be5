"""
Registry of configured provider adapters, plus the factory that builds them.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterator, List

from ..exceptions import ProviderConfigurationError, ProviderNotFoundError
from .anthropic_provider import AnthropicProvider
from .base import Provider, ProviderConfig
from .groq_provider import GroqProvider
from .openai_provider import OpenAIProvider
from .stubs import LocalProvider

logger = logging.getLogger(__name__)


def create_provider(provider_type: str, config: ProviderConfig) -> Provider:
    """
    Build an adapter for ``provider_type``.

    Known backends get their dedicated adapter. ``local`` is the offline echo
    stub unless ``config.base_url`` points at a local OpenAI-compatible server.
    Any other type is treated as an OpenAI-compatible server named after the
    type and needs ``config.base_url``.

    Raises:
        ProviderConfigurationError: If an OpenAI-compatible type has no base URL.
    """
    provider_type = provider_type.lower()
    if provider_type == "groq":
        return GroqProvider(config)
    if provider_type == "openai":
        return OpenAIProvider(config)
    if provider_type == "anthropic":
        return AnthropicProvider(config)
    if provider_type == "local":
        if config.base_url:
            # Local servers ignore the key but the SDK requires one.
            return OpenAIProvider(replace(config, api_key=config.api_key or "local"), name="local")
        return LocalProvider(config.api_key or "local")

    if not config.base_url:
        raise ProviderConfigurationError(provider_type, "API base URL for OpenAI-compatible provider")
    return OpenAIProvider(config, name=provider_type)


class ProviderRegistry:
    """
    Holds configured adapters by name.

    Lookups return the stored instance itself, and reinitialization mutates that
    instance, so every holder of an adapter sees refreshed credentials.
    """

    def __init__(self) -> None:
        self._providers: Dict[str, Provider] = {}

    def add(self, provider: Provider) -> Provider:
        if provider.name in self._providers:
            logger.info("Replacing provider %s", provider.name)
        self._providers[provider.name] = provider
        return provider

    def configure(self, provider_type: str, config: ProviderConfig) -> Provider:
        """Create an adapter with ``create_provider`` and add it."""
        return self.add(create_provider(provider_type, config))

    def get(self, name: str) -> Provider:
        """
        Return the adapter registered under ``name``.

        Raises:
            ProviderNotFoundError: If no adapter has that name. There is no fallback.
        """
        try:
            return self._providers[name]
        except KeyError:
            raise ProviderNotFoundError(name, self._providers.keys()) from None

    def remove(self, name: str) -> Provider:
        provider = self.get(name)
        del self._providers[name]
        return provider

    def reinitialize(self, name: str, api_key: str, **kwargs: Any) -> Provider:
        """Swap credentials on the stored adapter without replacing it."""
        provider = self.get(name)
        provider.update_api_key(api_key, **kwargs)
        return provider

    def names(self) -> List[str]:
        return list(self._providers)

    def ready_names(self) -> List[str]:
        return [name for name, provider in self._providers.items() if provider.is_ready()]

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[Provider]:
        return iter(list(self._providers.values()))


__all__ = ["ProviderRegistry", "create_provider"]
