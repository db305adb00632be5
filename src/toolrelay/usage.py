"""
Usage tracking for provider completions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List

if TYPE_CHECKING:
    from .types import StreamChunk


@dataclass
class UsageStats:
    """
    Token counts reported by a backend for a single completion.

    Only these four fields are copied out of a provider response; anything
    else the backend reports is dropped.

    Attributes:
        prompt_tokens: Tokens in the request.
        completion_tokens: Tokens generated.
        total_tokens: Prompt plus completion.
        cached_tokens: Prompt tokens served from the backend's prompt cache.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cached_tokens: int = 0

    def __post_init__(self):
        """Ensure total_tokens is consistent."""
        if self.total_tokens == 0 and (self.prompt_tokens or self.completion_tokens):
            self.total_tokens = self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> Dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "cached_tokens": self.cached_tokens,
        }


@dataclass
class SessionUsage:
    """
    Aggregates usage chunks across the turns of a session.

    Attributes:
        total_prompt_tokens: Cumulative prompt tokens.
        total_completion_tokens: Cumulative completion tokens.
        total_tokens: Cumulative total tokens.
        total_cached_tokens: Cumulative cached prompt tokens.
        requests: UsageStats for each completion, in order.
    """

    total_prompt_tokens: int = 0
    total_completion_tokens: int = 0
    total_tokens: int = 0
    total_cached_tokens: int = 0
    requests: List[UsageStats] = field(default_factory=list)

    def add_usage(self, stats: UsageStats) -> None:
        self.total_prompt_tokens += stats.prompt_tokens
        self.total_completion_tokens += stats.completion_tokens
        self.total_tokens += stats.total_tokens
        self.total_cached_tokens += stats.cached_tokens
        self.requests.append(stats)

    def add_chunk(self, chunk: "StreamChunk") -> bool:
        """
        Record a chunk if it is a usage chunk.

        Returns:
            True when the chunk carried usage and was recorded.
        """
        if not chunk.is_usage or chunk.usage is None:
            return False
        self.add_usage(chunk.usage)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_tokens": self.total_tokens,
            "total_prompt_tokens": self.total_prompt_tokens,
            "total_completion_tokens": self.total_completion_tokens,
            "total_cached_tokens": self.total_cached_tokens,
            "requests": len(self.requests),
        }

    def __str__(self) -> str:
        lines = [
            "\n" + "=" * 60,
            "📊 Usage Summary",
            "=" * 60,
            f"Total Tokens: {self.total_tokens:,}",
            f"  - Prompt: {self.total_prompt_tokens:,}",
            f"  - Completion: {self.total_completion_tokens:,}",
            f"  - Cached: {self.total_cached_tokens:,}",
            f"Requests: {len(self.requests)}",
            "=" * 60 + "\n",
        ]
        return "\n".join(lines)


__all__ = ["UsageStats", "SessionUsage"]
