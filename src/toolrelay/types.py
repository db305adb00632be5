"""
Core message and chunk types shared by providers, the dispatcher, and tests.

These primitives are provider-agnostic: each adapter translates them to and
from its backend's wire format.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .usage import UsageStats


class Role(str, Enum):
    """Conversation role."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


class FinishReason(str, Enum):
    """Why a chunk ended. ``USAGE`` marks the synthetic token-accounting chunk."""

    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    LENGTH = "length"
    USAGE = "usage"
    ERROR = "error"


@dataclass
class ToolCall:
    """A model-issued request to run a tool. ``arguments`` is raw JSON text."""

    id: str
    name: str
    arguments: str = "{}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class Message:
    """
    One conversation turn.

    Tool results are sent back as ``Role.TOOL`` messages and must reference the
    call they answer through ``tool_call_id``.
    """

    role: Role
    content: str = ""
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None

    def __post_init__(self) -> None:
        self.role = Role(self.role)
        if self.role == Role.TOOL and not self.tool_call_id:
            raise ValueError("Tool messages must carry a tool_call_id")

    def to_dict(self) -> Dict[str, Any]:
        """Return the OpenAI chat-completions shape of this message."""
        payload: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            payload["tool_calls"] = [call.to_dict() for call in self.tool_calls]
            # content is null alongside tool calls on the OpenAI wire
            if not self.content:
                payload["content"] = None
        if self.tool_call_id:
            payload["tool_call_id"] = self.tool_call_id
        return payload


@dataclass
class StreamChunk:
    """
    One unit of a provider's normalized output.

    A chunk whose ``finish_reason`` is ``FinishReason.USAGE`` is out-of-band: it
    carries ``usage`` and never content.
    """

    content: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    reasoning: Optional[str] = None
    finish_reason: Optional[FinishReason] = None
    usage: Optional[UsageStats] = None

    def __post_init__(self) -> None:
        if self.finish_reason is not None:
            self.finish_reason = FinishReason(self.finish_reason)
        if self.is_usage and (self.content or self.tool_calls):
            raise ValueError("Usage chunks cannot carry content or tool calls")

    @property
    def is_usage(self) -> bool:
        return self.finish_reason == FinishReason.USAGE

    @classmethod
    def for_usage(cls, usage: UsageStats) -> "StreamChunk":
        return cls(finish_reason=FinishReason.USAGE, usage=usage)


@dataclass
class CompletionOptions:
    """
    Per-request settings passed to ``Provider.stream``.

    Attributes:
        model: Backend model identifier. Not validated locally.
        temperature: Sampling temperature. Default: 0.0.
        tools: OpenAI-style function schemas offered to the model.
        max_tokens: Completion token ceiling. Default: 8000.
        signal: Cooperative cancellation. Setting the event aborts the request.
    """

    model: str
    temperature: float = 0.0
    tools: Optional[List[Dict[str, Any]]] = None
    max_tokens: int = 8000
    signal: Optional[asyncio.Event] = field(default=None, repr=False)


__all__ = [
    "Role",
    "FinishReason",
    "ToolCall",
    "Message",
    "StreamChunk",
    "CompletionOptions",
]
