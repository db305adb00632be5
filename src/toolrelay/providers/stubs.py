"""
Local provider for offline testing and development.

This provider doesn't call any external API and simply echoes user messages.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Optional, Sequence

from ..types import CompletionOptions, FinishReason, Message, Role, StreamChunk
from ..usage import UsageStats
from .base import Provider, check_cancelled, ensure_ready, validate_messages


class LocalProvider(Provider):
    """
    Local fallback provider.

    This does not call a model. It echoes the latest user content and reports
    whitespace-separated word counts as usage, which makes it handy for
    exercising the streaming contract without credentials.
    """

    name = "local"

    def __init__(self, api_key: Optional[str] = "local"):
        self.api_key = api_key

    def is_ready(self) -> bool:
        return bool(self.api_key)

    def update_api_key(self, api_key: str, **kwargs: Any) -> None:
        self.api_key = api_key

    async def stream(
        self,
        messages: Sequence[Message],
        options: CompletionOptions,
    ) -> AsyncIterator[StreamChunk]:
        validate_messages(messages)
        ensure_ready(self)
        check_cancelled(options.signal, self.name)
        # Yield control once so callers can cancel between turns.
        await asyncio.sleep(0)
        check_cancelled(options.signal, self.name)

        last_user = next((m for m in reversed(messages) if m.role == Role.USER), None)
        user_text = last_user.content if last_user else ""
        text = f"[local provider: {options.model}] {user_text or 'No user message provided.'}"
        yield StreamChunk(content=text, finish_reason=FinishReason.STOP)

        prompt_tokens = sum(len(m.content.split()) for m in messages)
        yield StreamChunk.for_usage(
            UsageStats(prompt_tokens=prompt_tokens, completion_tokens=len(text.split()))
        )


__all__ = ["LocalProvider"]
