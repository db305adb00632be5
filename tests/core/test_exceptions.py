"""
Tests for the exception hierarchy and its messages.
"""

import pytest

from toolrelay import (
    ProviderCancelledError,
    ProviderConfigurationError,
    ProviderError,
    ProviderNotFoundError,
    ToolNotFoundError,
    ToolrelayError,
    ToolValidationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_cls",
        [
            ProviderError,
            ProviderConfigurationError,
            ProviderCancelledError,
            ProviderNotFoundError,
            ToolNotFoundError,
            ToolValidationError,
        ],
    )
    def test_all_derive_from_base(self, exc_cls):
        assert issubclass(exc_cls, ToolrelayError)

    def test_provider_failures_share_a_parent(self):
        assert issubclass(ProviderConfigurationError, ProviderError)
        assert issubclass(ProviderCancelledError, ProviderError)

    def test_lookup_errors_are_key_errors(self):
        assert issubclass(ProviderNotFoundError, KeyError)
        assert issubclass(ToolNotFoundError, KeyError)


class TestMessages:
    def test_configuration_error_includes_fix(self):
        error = ProviderConfigurationError("groq", "API key or client", "GROQ_API_KEY")
        text = str(error)

        assert "Provider Configuration Error: 'groq'" in text
        assert "export GROQ_API_KEY" in text
        assert "reinitialize('groq'" in text

    def test_configuration_error_without_env_var(self):
        text = str(ProviderConfigurationError("vllm", "API base URL"))

        assert "Missing: API base URL" in text
        assert "export" not in text

    def test_cancelled_names_provider(self):
        assert str(ProviderCancelledError("groq")) == "Request to provider 'groq' was cancelled"

    def test_provider_not_found_lists_configured(self):
        error = ProviderNotFoundError("openai", ["local", "groq"])

        assert error.available == ["groq", "local"]
        assert "Configured: groq, local" in str(error)

    def test_tool_not_found_message_is_not_quoted(self):
        error = ToolNotFoundError("ghost", ["echo"])

        assert str(error) == "Unknown tool: ghost. Available tools: echo"

    def test_validation_error_fields(self):
        error = ToolValidationError("t", "name", "empty", "give it a name")

        assert error.suggestion == "give it a name"
        assert "💡 Suggestion: give it a name" in str(error)
