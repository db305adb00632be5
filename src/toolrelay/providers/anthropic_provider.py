"""
Anthropic provider adapter.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from ..env import resolve_api_key
from ..exceptions import ProviderError
from ..types import CompletionOptions, FinishReason, Message, Role, StreamChunk, ToolCall
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

_STOP_REASONS = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "tool_use": FinishReason.TOOL_CALLS,
    "max_tokens": FinishReason.LENGTH,
}


def _tool_input(arguments: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(arguments or "{}")
    except json.JSONDecodeError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def convert_tools(tools: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert OpenAI function schemas to Anthropic tool definitions."""
    converted = []
    for tool in tools:
        function = tool.get("function", tool)
        converted.append(
            {
                "name": function["name"],
                "description": function.get("description", ""),
                "input_schema": function.get("parameters") or {"type": "object", "properties": {}},
            }
        )
    return converted


def format_messages(messages: Sequence[Message]) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Split out the system prompt and build Anthropic content-block messages.

    Tool results become ``tool_result`` blocks inside a user turn, and
    consecutive messages with the same role are merged because the Messages API
    requires alternating roles.
    """
    system_parts: List[str] = []
    formatted: List[Dict[str, Any]] = []

    for message in messages:
        if message.role == Role.SYSTEM:
            if message.content:
                system_parts.append(message.content)
            continue

        blocks: List[Dict[str, Any]] = []
        if message.role == Role.TOOL:
            role = "user"
            blocks.append(
                {
                    "type": "tool_result",
                    "tool_use_id": message.tool_call_id,
                    "content": message.content,
                }
            )
        else:
            role = message.role.value
            if message.content:
                blocks.append({"type": "text", "text": message.content})
            for call in message.tool_calls or []:
                blocks.append(
                    {
                        "type": "tool_use",
                        "id": call.id,
                        "name": call.name,
                        "input": _tool_input(call.arguments),
                    }
                )

        if not blocks:
            continue
        if formatted and formatted[-1]["role"] == role:
            formatted[-1]["content"].extend(blocks)
        else:
            formatted.append({"role": role, "content": blocks})

    return "\n\n".join(system_parts), formatted


def normalize_anthropic_response(response: Any) -> Tuple[StreamChunk, Optional[UsageStats]]:
    """Translate a Messages API response into the primary chunk and usage."""
    text_parts: List[str] = []
    thinking_parts: List[str] = []
    tool_calls: List[ToolCall] = []

    for block in response.content:
        block_type = getattr(block, "type", None)
        if block_type == "text":
            text_parts.append(block.text)
        elif block_type == "thinking":
            thinking_parts.append(block.thinking)
        elif block_type == "tool_use":
            tool_calls.append(
                ToolCall(id=block.id, name=block.name, arguments=json.dumps(block.input or {}))
            )

    primary = StreamChunk(
        content="".join(text_parts) or None,
        tool_calls=tool_calls or None,
        reasoning="".join(thinking_parts) or None,
        finish_reason=_STOP_REASONS.get(response.stop_reason, FinishReason.STOP),
    )

    usage = getattr(response, "usage", None)
    if usage is None:
        return primary, None
    return primary, UsageStats(
        prompt_tokens=getattr(usage, "input_tokens", None) or 0,
        completion_tokens=getattr(usage, "output_tokens", None) or 0,
        cached_tokens=getattr(usage, "cache_read_input_tokens", None) or 0,
    )


class AnthropicProvider(Provider):
    """Anthropic Messages API adapter."""

    name = "anthropic"
    env_var = "ANTHROPIC_API_KEY"

    def __init__(self, config: Optional[ProviderConfig] = None):
        self._client: Any = None
        self.api_key: Optional[str] = None
        self.base_url: Optional[str] = None
        self.additional_headers: Optional[Dict[str, str]] = None
        self._initialize(config or ProviderConfig(), use_env=True)

    def _initialize(self, config: ProviderConfig, *, use_env: bool) -> None:
        api_key = resolve_api_key(config.api_key, self.env_var) if use_env else config.api_key
        self.base_url = config.base_url
        self.additional_headers = config.additional_headers

        if not api_key:
            self._client = None
            self.api_key = None
            return

        try:
            from anthropic import AsyncAnthropic
        except ImportError as exc:
            raise ProviderError(
                "anthropic package not installed. Install with `pip install anthropic`."
            ) from exc

        client_args: Dict[str, Any] = {"api_key": api_key, "base_url": self.base_url}
        if self.additional_headers:
            client_args["default_headers"] = self.additional_headers
        if config.http_client is not None:
            client_args["http_client"] = config.http_client
        self._client = AsyncAnthropic(**client_args)
        self.api_key = api_key

    def is_ready(self) -> bool:
        return self._client is not None and bool(self.api_key)

    def update_api_key(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        http_client: Optional[Any] = None,
    ) -> None:
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
        system_prompt, payload = format_messages(messages)
        request_args: Dict[str, Any] = {
            "model": options.model,
            "messages": payload,
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
        }
        if system_prompt:
            request_args["system"] = system_prompt
        if options.tools:
            request_args["tools"] = convert_tools(options.tools)
            request_args["tool_choice"] = {"type": "auto"}
        return request_args

    async def stream(
        self,
        messages: Sequence[Message],
        options: CompletionOptions,
    ) -> AsyncIterator[StreamChunk]:
        validate_messages(messages)
        ensure_ready(self, self.env_var)

        request_args = self._build_request(messages, options)
        logger.debug("Sending request to anthropic model %s", options.model)
        response = await request_with_signal(
            self._client.messages.create(**request_args), options.signal, self.name
        )

        primary, usage = normalize_anthropic_response(response)
        yield primary

        if usage is not None:
            check_cancelled(options.signal, self.name)
            yield StreamChunk.for_usage(usage)


__all__ = ["AnthropicProvider", "normalize_anthropic_response", "format_messages", "convert_tools"]
