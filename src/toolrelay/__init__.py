"""Public exports for the toolrelay package."""

from . import toolbox
from .exceptions import (
    ProviderCancelledError,
    ProviderConfigurationError,
    ProviderError,
    ProviderNotFoundError,
    ToolNotFoundError,
    ToolrelayError,
    ToolValidationError,
)
from .providers import (
    AnthropicProvider,
    GroqProvider,
    LocalProvider,
    OpenAIProvider,
    Provider,
    ProviderConfig,
    ProviderRegistry,
    create_provider,
)
from .tools import (
    Permission,
    RegisteredTool,
    ToolDispatcher,
    ToolParameter,
    ToolRegistry,
    ToolResult,
    ToolSchema,
    object_schema,
)
from .types import CompletionOptions, FinishReason, Message, Role, StreamChunk, ToolCall
from .usage import SessionUsage, UsageStats

__version__ = "0.1.0"

__all__ = [
    "toolbox",
    # Messages and chunks
    "Message",
    "Role",
    "ToolCall",
    "StreamChunk",
    "FinishReason",
    "CompletionOptions",
    # Providers
    "Provider",
    "ProviderConfig",
    "ProviderRegistry",
    "create_provider",
    "OpenAIProvider",
    "GroqProvider",
    "AnthropicProvider",
    "LocalProvider",
    # Tools
    "Permission",
    "ToolParameter",
    "ToolSchema",
    "ToolResult",
    "RegisteredTool",
    "ToolRegistry",
    "ToolDispatcher",
    "object_schema",
    # Exceptions
    "ToolrelayError",
    "ProviderError",
    "ProviderConfigurationError",
    "ProviderCancelledError",
    "ProviderNotFoundError",
    "ToolNotFoundError",
    "ToolValidationError",
    # Usage tracking
    "UsageStats",
    "SessionUsage",
]
