"""
OpenAI provider adapter.

Also serves any OpenAI-compatible server (Ollama, LM Studio, vLLM, ...) when
constructed with a ``base_url`` and a custom ``name``.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from ..env import resolve_api_key
from ..exceptions import ProviderError
from ..types import CompletionOptions, FinishReason, Message, StreamChunk, ToolCall
from ..usage import UsageStats
from .base import (
    Provider,
    ProviderConfig,
    check_cancelled,
    ensure_ready,
    request_with_signal,
    validate_messages,
)

logger = logging.getLogger(__name__)

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "tool_calls": FinishReason.TOOL_CALLS,
    "function_call": FinishReason.TOOL_CALLS,
    "length": FinishReason.LENGTH,
    "content_filter": FinishReason.ERROR,
}


def _map_finish_reason(raw: Optional[str], has_tool_calls: bool) -> FinishReason:
    if raw is None:
        return FinishReason.TOOL_CALLS if has_tool_calls else FinishReason.STOP
    return _FINISH_REASONS.get(raw, FinishReason.STOP)


def _tool_calls_from_message(message: Any) -> Optional[List[ToolCall]]:
    raw_calls = getattr(message, "tool_calls", None) or []
    calls = [
        ToolCall(
            id=call.id,
            name=call.function.name,
            arguments=call.function.arguments or "{}",
        )
        for call in raw_calls
    ]
    return calls or None


def _usage_from_response(response: Any) -> Optional[UsageStats]:
    usage = getattr(response, "usage", None)
    if usage is None:
        return None
    details = getattr(usage, "prompt_tokens_details", None)
    return UsageStats(
        prompt_tokens=getattr(usage, "prompt_tokens", None) or 0,
        completion_tokens=getattr(usage, "completion_tokens", None) or 0,
        total_tokens=getattr(usage, "total_tokens", None) or 0,
        cached_tokens=getattr(details, "cached_tokens", None) or 0,
    )


def normalize_openai_response(response: Any) -> Tuple[StreamChunk, Optional[UsageStats]]:
    """
    Translate a Chat Completions response into the primary chunk and usage.

    Reasoning is not part of the OpenAI schema; compatible servers expose it as
    ``reasoning`` or ``reasoning_content`` on the message.
    """
    choice = response.choices[0]
    message = choice.message
    tool_calls = _tool_calls_from_message(message)
    reasoning = getattr(message, "reasoning", None) or getattr(message, "reasoning_content", None)

    primary = StreamChunk(
        content=getattr(message, "content", None) or None,
        tool_calls=tool_calls,
        reasoning=reasoning or None,
        finish_reason=_map_finish_reason(choice.finish_reason, bool(tool_calls)),
    )
    return primary, _usage_from_response(response)


class OpenAIProvider(Provider):
    """Adapter that speaks to OpenAI's Chat Completions API (non-streamed)."""

    name = "openai"
    env_var = "OPENAI_API_KEY"
    default_base_url: Optional[str] = None

    def __init__(self, config: Optional[ProviderConfig] = None, name: Optional[str] = None):
        if name:
            self.name = name.lower()
            # Compatible servers do not share OpenAI's credential.
            if self.name != type(self).name:
                self.env_var = ""
        self._client: Any = None
        self.api_key: Optional[str] = None
        self.base_url: Optional[str] = None
        self.additional_headers: Optional[Dict[str, str]] = None
        self._initialize(config or ProviderConfig(), use_env=True)

    def _initialize(self, config: ProviderConfig, *, use_env: bool) -> None:
        api_key = config.api_key
        if use_env and self.env_var:
            api_key = resolve_api_key(api_key, self.env_var)
        self.base_url = config.base_url or self.default_base_url
        self.additional_headers = config.additional_headers

        if not api_key:
            self._client = None
            self.api_key = None
            return

        try:
            from openai import AsyncOpenAI
        except ImportError as exc:
            raise ProviderError(
                "openai package not installed. Install with `pip install openai`."
            ) from exc

        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            default_headers=self.additional_headers,
            http_client=config.http_client,
        )
        self.api_key = api_key

    def is_ready(self) -> bool:
        return self._client is not None and bool(self.api_key)

    def update_api_key(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        http_client: Optional[Any] = None,
    ) -> None:
        """Replace the client on this same instance; in-flight streams keep whichever client they hold."""
        self._initialize(
            ProviderConfig(
                api_key=api_key,
                base_url=base_url or self.base_url,
                additional_headers=self.additional_headers,
                http_client=http_client,
            ),
            use_env=False,
        )
        logger.debug("Reinitialized provider %s (ready=%s)", self.name, self.is_ready())

    def _build_request(
        self, messages: Sequence[Message], options: CompletionOptions
    ) -> Dict[str, Any]:
        request_args: Dict[str, Any] = {
            "model": options.model,
            "messages": [message.to_dict() for message in messages],
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "stream": False,
        }
        if options.tools:
            request_args["tools"] = options.tools
            request_args["tool_choice"] = "auto"
        return request_args

    def _normalize(self, response: Any) -> Tuple[StreamChunk, Optional[UsageStats]]:
        return normalize_openai_response(response)

    async def stream(
        self,
        messages: Sequence[Message],
        options: CompletionOptions,
    ) -> AsyncIterator[StreamChunk]:
        validate_messages(messages)
        ensure_ready(self, self.env_var)

        request_args = self._build_request(messages, options)
        logger.debug(
            "Sending request to %s model %s (%d messages, %d tools)",
            self.name,
            options.model,
            len(messages),
            len(options.tools or []),
        )
        client = self._client
        response = await request_with_signal(
            client.chat.completions.create(**request_args), options.signal, self.name
        )

        primary, usage = self._normalize(response)
        yield primary

        if usage is not None:
            check_cancelled(options.signal, self.name)
            yield StreamChunk.for_usage(usage)


__all__ = ["OpenAIProvider", "normalize_openai_response"]
