"""
Tests for the Anthropic adapter: message formatting, tool conversion, and
response normalization.
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from toolrelay import (
    AnthropicProvider,
    CompletionOptions,
    FinishReason,
    Message,
    ProviderConfig,
    ProviderConfigurationError,
    Role,
    ToolCall,
)
from toolrelay.providers.anthropic_provider import (
    convert_tools,
    format_messages,
    normalize_anthropic_response,
)


def _response(blocks, stop_reason="end_turn", usage=None):
    return SimpleNamespace(content=blocks, stop_reason=stop_reason, usage=usage)


def _text(text):
    return SimpleNamespace(type="text", text=text)


def _tool_use(block_id, name, tool_input):
    return SimpleNamespace(type="tool_use", id=block_id, name=name, input=tool_input)


# =============================================================================
# Message formatting
# =============================================================================


class TestFormatMessages:
    def test_system_prompt_lifted_out(self):
        system, payload = format_messages(
            [
                Message(role=Role.SYSTEM, content="You are terse."),
                Message(role=Role.USER, content="hi"),
            ]
        )

        assert system == "You are terse."
        assert payload == [{"role": "user", "content": [{"type": "text", "text": "hi"}]}]

    def test_tool_round_trip_blocks(self):
        call = ToolCall(id="toolu_1", name="read_file", arguments='{"file_path": "a.py"}')
        _, payload = format_messages(
            [
                Message(role=Role.USER, content="open a.py"),
                Message(role=Role.ASSISTANT, tool_calls=[call]),
                Message(role=Role.TOOL, content="print(1)", tool_call_id="toolu_1"),
            ]
        )

        assert payload[1] == {
            "role": "assistant",
            "content": [
                {"type": "tool_use", "id": "toolu_1", "name": "read_file", "input": {"file_path": "a.py"}}
            ],
        }
        assert payload[2] == {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": "toolu_1", "content": "print(1)"}],
        }

    def test_consecutive_tool_results_merge_into_one_turn(self):
        _, payload = format_messages(
            [
                Message(role=Role.USER, content="go"),
                Message(
                    role=Role.ASSISTANT,
                    tool_calls=[ToolCall(id="a", name="x"), ToolCall(id="b", name="y")],
                ),
                Message(role=Role.TOOL, content="1", tool_call_id="a"),
                Message(role=Role.TOOL, content="2", tool_call_id="b"),
            ]
        )

        assert [turn["role"] for turn in payload] == ["user", "assistant", "user"]
        assert [block["tool_use_id"] for block in payload[2]["content"]] == ["a", "b"]

    def test_malformed_arguments_become_empty_input(self):
        _, payload = format_messages(
            [Message(role=Role.ASSISTANT, tool_calls=[ToolCall(id="a", name="x", arguments="{oops")])]
        )
        assert payload[0]["content"][0]["input"] == {}

    def test_empty_messages_skipped(self):
        _, payload = format_messages(
            [Message(role=Role.USER, content="hi"), Message(role=Role.ASSISTANT, content="")]
        )
        assert len(payload) == 1


class TestConvertTools:
    def test_function_schema_converted(self):
        params = {"type": "object", "properties": {"q": {"type": "string"}}, "required": ["q"]}
        converted = convert_tools(
            [{"type": "function", "function": {"name": "search", "description": "Find", "parameters": params}}]
        )

        assert converted == [{"name": "search", "description": "Find", "input_schema": params}]


# =============================================================================
# Response normalization
# =============================================================================


class TestNormalizeAnthropicResponse:
    def test_text_and_usage(self):
        usage = SimpleNamespace(input_tokens=20, output_tokens=4, cache_read_input_tokens=16)
        primary, stats = normalize_anthropic_response(
            _response([_text("Hello"), _text(" world")], usage=usage)
        )

        assert primary.content == "Hello world"
        assert primary.finish_reason == FinishReason.STOP
        assert stats.to_dict() == {
            "prompt_tokens": 20,
            "completion_tokens": 4,
            "total_tokens": 24,
            "cached_tokens": 16,
        }

    def test_tool_use_blocks(self):
        primary, _ = normalize_anthropic_response(
            _response(
                [_text("Let me look."), _tool_use("toolu_9", "list_files", {"directory": "src"})],
                stop_reason="tool_use",
            )
        )

        assert primary.finish_reason == FinishReason.TOOL_CALLS
        assert primary.tool_calls[0].id == "toolu_9"
        assert json.loads(primary.tool_calls[0].arguments) == {"directory": "src"}

    def test_thinking_blocks_become_reasoning(self):
        thinking = SimpleNamespace(type="thinking", thinking="step by step")
        primary, _ = normalize_anthropic_response(_response([thinking, _text("done")]))

        assert primary.reasoning == "step by step"
        assert primary.content == "done"

    def test_max_tokens_maps_to_length(self):
        primary, _ = normalize_anthropic_response(_response([_text("trunc")], stop_reason="max_tokens"))
        assert primary.finish_reason == FinishReason.LENGTH


# =============================================================================
# Adapter behavior
# =============================================================================


class TestAnthropicProvider:
    def test_not_ready_without_key(self, no_provider_keys):
        provider = AnthropicProvider()

        assert provider.name == "anthropic"
        assert not provider.is_ready()

    @pytest.mark.asyncio
    async def test_stream_before_ready_raises(self, no_provider_keys):
        with pytest.raises(ProviderConfigurationError):
            async for _ in AnthropicProvider().stream(
                [Message(role=Role.USER, content="hi")], CompletionOptions(model="claude")
            ):
                pass

    @pytest.mark.asyncio
    async def test_stream_request_and_chunks(self):
        provider = AnthropicProvider(ProviderConfig(api_key="sk-ant-test"))
        usage = SimpleNamespace(input_tokens=5, output_tokens=1, cache_read_input_tokens=None)
        create = AsyncMock(return_value=_response([_text("Hi")], usage=usage))
        provider._client = SimpleNamespace(messages=SimpleNamespace(create=create))
        tools = [{"type": "function", "function": {"name": "noop", "description": "n", "parameters": {}}}]

        chunks = [
            chunk
            async for chunk in provider.stream(
                [Message(role=Role.SYSTEM, content="sys"), Message(role=Role.USER, content="hi")],
                CompletionOptions(model="claude-sonnet", tools=tools),
            )
        ]

        kwargs = create.await_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["max_tokens"] == 8000
        assert kwargs["tools"][0]["name"] == "noop"
        assert kwargs["tool_choice"] == {"type": "auto"}
        assert chunks[0].content == "Hi"
        assert chunks[1].is_usage
        assert chunks[1].usage.cached_tokens == 0

    def test_update_api_key(self, no_provider_keys):
        provider = AnthropicProvider()
        provider.update_api_key("sk-ant-new")

        assert provider.is_ready()
        assert provider.name == "anthropic"
