"""
Pytest configuration for toolrelay tests.

Adds the ``--run-e2e`` switch for tests that hit real provider APIs and the
shared fixtures used across the provider and tool suites.
"""

from types import SimpleNamespace

import pytest

from toolrelay import ToolRegistry

_PROVIDER_ENV_VARS = ("OPENAI_API_KEY", "GROQ_API_KEY", "ANTHROPIC_API_KEY")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run end-to-end tests with real API calls",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "e2e: mark test as end-to-end (requires real API keys, use --run-e2e to run)"
    )
    config.addinivalue_line("markers", "openai: mark test as requiring OpenAI API key")
    config.addinivalue_line("markers", "groq: mark test as requiring Groq API key")
    config.addinivalue_line("markers", "anthropic: mark test as requiring Anthropic API key")


def pytest_collection_modifyitems(config, items):
    """Skip e2e tests unless --run-e2e is passed."""
    if config.getoption("--run-e2e"):
        return

    skip_e2e = pytest.mark.skip(reason="Need --run-e2e option to run end-to-end tests")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


@pytest.fixture
def no_provider_keys(monkeypatch, tmp_path):
    """Remove provider credentials and keep .env files out of reach."""
    for var in _PROVIDER_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("toolrelay.env.load_default_env", lambda: None)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry()


def _openai_response(
    content=None,
    tool_calls=None,
    finish_reason="stop",
    reasoning=None,
    usage=None,
    reasoning_attr="reasoning",
):
    """Build an object shaped like an OpenAI ChatCompletion."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    setattr(message, reasoning_attr, reasoning)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message, finish_reason=finish_reason)],
        usage=usage,
    )


def _openai_tool_call(call_id, name, arguments):
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )


def _openai_usage(prompt=10, completion=5, total=15, cached=None):
    details = SimpleNamespace(cached_tokens=cached) if cached is not None else None
    return SimpleNamespace(
        prompt_tokens=prompt,
        completion_tokens=completion,
        total_tokens=total,
        prompt_tokens_details=details,
    )


@pytest.fixture
def openai_response():
    """Factory for fake OpenAI-shaped ChatCompletion objects."""
    return _openai_response


@pytest.fixture
def openai_tool_call():
    return _openai_tool_call


@pytest.fixture
def openai_usage():
    return _openai_usage
