"""
Provider abstraction shared by every backend adapter.

An adapter issues exactly one batched request per ``stream`` call and
re-exposes the response as a primary chunk plus, when the backend reported
token usage, a synthetic ``FinishReason.USAGE`` chunk.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Dict,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
    runtime_checkable,
)

from ..exceptions import ProviderCancelledError, ProviderConfigurationError, ProviderError
from ..types import CompletionOptions, Message, StreamChunk

T = TypeVar("T")


@dataclass
class ProviderConfig:
    """
    Construction settings for an adapter.

    Each backend honors the fields it supports; ``base_url`` is what turns the
    OpenAI adapter into a client for OpenAI-compatible local servers.

    Attributes:
        api_key: Backend credential. Falls back to the backend's env var when omitted.
        base_url: Alternate API endpoint.
        additional_headers: Extra headers sent with every request.
        http_client: Opaque transport override handed to the backend SDK
            (e.g. an ``httpx.AsyncClient`` configured with a proxy).
    """

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    additional_headers: Optional[Dict[str, str]] = None
    http_client: Optional[Any] = None


@runtime_checkable
class Provider(Protocol):
    """
    Interface every provider adapter must satisfy.

    ``name`` is a stable lowercase identifier. Callers must check
    ``is_ready()`` (or handle ``ProviderConfigurationError``) before streaming.
    """

    name: str

    def stream(
        self,
        messages: Sequence[Message],
        options: CompletionOptions,
    ) -> AsyncIterator[StreamChunk]:
        """
        Yield the normalized chunks for one completion.

        Raises:
            ValueError: If ``messages`` is empty.
            ProviderConfigurationError: If the adapter is not ready.
            ProviderCancelledError: If ``options.signal`` is set before completion.
            ProviderError: If the backend call fails.
        """
        ...

    def is_ready(self) -> bool:
        """Return True when a live client and API key are present."""
        ...

    def update_api_key(self, api_key: str, **kwargs: Any) -> None:
        """Rebuild the internal client in place with new credentials."""
        ...


def validate_messages(messages: Sequence[Message]) -> None:
    """Reject an empty conversation before any request is built."""
    if not messages:
        raise ValueError("At least one message is required")


def ensure_ready(provider: Provider, env_var: str = "") -> None:
    if not provider.is_ready():
        raise ProviderConfigurationError(provider.name, "API key or client", env_var)


def check_cancelled(signal: Optional[asyncio.Event], provider_name: str) -> None:
    if signal is not None and signal.is_set():
        raise ProviderCancelledError(provider_name)


async def await_cancellable(
    awaitable: Awaitable[T], signal: Optional[asyncio.Event], provider_name: str
) -> T:
    """
    Await a backend request, aborting it if ``signal`` is set first.

    The request task is always cancelled and drained before a
    ``ProviderCancelledError`` is raised, so no request outlives the call.
    """
    if signal is None:
        return await awaitable

    request = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        if not signal.is_set():
            await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not request.done():
            request.cancel()
        await asyncio.gather(request, waiter, return_exceptions=True)

    check_cancelled(signal, provider_name)
    return request.result()


async def request_with_signal(
    awaitable: Awaitable[T], signal: Optional[asyncio.Event], provider_name: str
) -> T:
    """Run a backend call, wrapping SDK failures in ``ProviderError``."""
    try:
        return await await_cancellable(awaitable, signal, provider_name)
    except ProviderError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise ProviderError(f"{provider_name} completion failed: {exc}") from exc


__all__ = [
    "Provider",
    "ProviderConfig",
    "ProviderError",
    "validate_messages",
    "ensure_ready",
    "check_cancelled",
    "await_cancellable",
    "request_with_signal",
]
