"""Provider implementations for various LLM backends."""

from .anthropic_provider import AnthropicProvider
from .base import Provider, ProviderConfig
from .groq_provider import GroqProvider
from .openai_provider import OpenAIProvider
from .registry import ProviderRegistry, create_provider
from .stubs import LocalProvider

__all__ = [
    "Provider",
    "ProviderConfig",
    "ProviderRegistry",
    "create_provider",
    "OpenAIProvider",
    "GroqProvider",
    "AnthropicProvider",
    "LocalProvider",
]
