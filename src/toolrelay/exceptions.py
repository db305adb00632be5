"""
Custom exceptions with helpful error messages and suggestions.

Provider failures end a turn and are raised to the caller. Tool failures are
recovered by the dispatcher and never reach the orchestration loop as
exceptions, so only registry lookups and tool definitions raise here.
"""

from __future__ import annotations

from typing import Iterable, Optional


def _boxed(title: str, body: str, suggestion: str = "") -> str:
    message = f"\n{'='*60}\n"
    message += f"❌ {title}\n"
    message += f"{'='*60}\n\n"
    message += body
    if suggestion:
        message += f"\n💡 Suggestion: {suggestion}\n"
    message += f"\n{'='*60}\n"
    return message


class ToolrelayError(Exception):
    """Base exception for all toolrelay errors."""

    pass


class ProviderError(ToolrelayError):
    """Raised when an adapter cannot complete a request."""


class ProviderConfigurationError(ProviderError):
    """Raised when a provider is used before it has a client and API key."""

    def __init__(self, provider_name: str, missing_config: str, env_var: str = ""):
        self.provider_name = provider_name
        self.missing_config = missing_config
        self.env_var = env_var

        body = f"Missing: {missing_config}\n"
        if env_var:
            body += "\n💡 How to fix:\n"
            body += "  1. Set the environment variable:\n"
            body += f"     export {env_var}='your-api-key'\n"
            body += "  2. Or reinitialize the provider:\n"
            body += f"     registry.reinitialize('{provider_name}', api_key='your-api-key')\n"

        super().__init__(_boxed(f"Provider Configuration Error: '{provider_name}'", body))


class ProviderCancelledError(ProviderError):
    """Raised when a completion is aborted through its cancellation signal."""

    def __init__(self, provider_name: str):
        self.provider_name = provider_name
        super().__init__(f"Request to provider '{provider_name}' was cancelled")


class ProviderNotFoundError(ToolrelayError, KeyError):
    """Raised when a provider name has not been configured."""

    def __init__(self, name: str, available: Iterable[str] = ()):
        self.name = name
        self.available = sorted(available)

        body = f"Provider: {name}\n"
        body += f"Configured: {', '.join(self.available) or '(none)'}\n"
        super().__init__(
            _boxed(
                f"Provider Not Found: '{name}'",
                body,
                "Add the provider to the registry before selecting it",
            )
        )

    def __str__(self) -> str:
        return Exception.__str__(self)


class ToolNotFoundError(ToolrelayError, KeyError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str, available: Optional[Iterable[str]] = None):
        self.name = name
        self.available = list(available or [])
        message = f"Unknown tool: {name}"
        if self.available:
            message += f". Available tools: {', '.join(self.available)}"
        super().__init__(message)

    def __str__(self) -> str:
        return Exception.__str__(self)


class ToolValidationError(ToolrelayError):
    """Raised when a tool definition is invalid."""

    def __init__(self, tool_name: str, field_name: str, issue: str, suggestion: str = ""):
        self.tool_name = tool_name
        self.field_name = field_name
        self.issue = issue
        self.suggestion = suggestion

        body = f"Field: {field_name}\n"
        body += f"Issue: {issue}\n"
        super().__init__(_boxed(f"Tool Validation Error: '{tool_name}'", body, suggestion))


__all__ = [
    "ToolrelayError",
    "ProviderError",
    "ProviderConfigurationError",
    "ProviderCancelledError",
    "ProviderNotFoundError",
    "ToolNotFoundError",
    "ToolValidationError",
]
