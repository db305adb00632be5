"""
Groq provider adapter.

Groq exposes an OpenAI-compatible endpoint, so requests go through the OpenAI
SDK; only the response details differ.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from ..types import StreamChunk
from ..usage import UsageStats
from .openai_provider import (
    OpenAIProvider,
    _map_finish_reason,
    _tool_calls_from_message,
    _usage_from_response,
)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


def normalize_groq_response(response: Any) -> Tuple[StreamChunk, Optional[UsageStats]]:
    """
    Translate a Groq chat completion into the primary chunk and usage.

    Groq's reasoning models return their latent text in ``message.reasoning``.
    """
    choice = response.choices[0]
    message = choice.message
    tool_calls = _tool_calls_from_message(message)

    primary = StreamChunk(
        content=getattr(message, "content", None) or None,
        tool_calls=tool_calls,
        reasoning=getattr(message, "reasoning", None) or None,
        finish_reason=_map_finish_reason(choice.finish_reason, bool(tool_calls)),
    )
    return primary, _usage_from_response(response)


class GroqProvider(OpenAIProvider):
    """Adapter for Groq's chat completions API."""

    name = "groq"
    env_var = "GROQ_API_KEY"
    default_base_url = GROQ_BASE_URL

    def _normalize(self, response: Any) -> Tuple[StreamChunk, Optional[UsageStats]]:
        return normalize_groq_response(response)


__all__ = ["GroqProvider", "GROQ_BASE_URL", "normalize_groq_response"]
