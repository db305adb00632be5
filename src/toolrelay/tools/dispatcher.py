"""
Dispatch of model-issued tool calls.

Every failure on the way (unknown tool, malformed arguments, handler error,
timeout) comes back as ``ToolResult(is_error=True)`` so the orchestration loop
can hand it to the model as ordinary tool output and keep going.
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
import inspect
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..exceptions import ToolNotFoundError
from ..types import Message, Role, ToolCall
from .base import HandlerResult, ToolHandler, ToolResult
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

HookCallable = Callable[..., None]


class _DispatchTimeout(Exception):
    """The dispatcher's own per-call limit expired."""


def parse_arguments(arguments: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Parse a tool call's JSON argument text.

    Returns:
        ``(args, None)`` on success, ``(None, reason)`` otherwise.
    """
    try:
        parsed = json.loads(arguments)
    except (TypeError, ValueError) as exc:
        return None, (
            f"arguments are not valid JSON ({exc}). "
            "If the content was long it may have been truncated; send smaller pieces."
        )
    if not isinstance(parsed, dict):
        return None, f"arguments must be a JSON object, got {type(parsed).__name__}"
    return parsed, None


def coerce_result(raw: HandlerResult) -> ToolResult:
    """Wrap whatever a handler returned as a successful ToolResult."""
    if isinstance(raw, ToolResult):
        return raw
    if raw is None:
        return ToolResult(content="")
    if isinstance(raw, str):
        return ToolResult(content=raw)
    if isinstance(raw, (dict, list)):
        return ToolResult(content=json.dumps(raw, default=str))
    return ToolResult(content=str(raw))


class ToolDispatcher:
    """
    Validates and executes tool calls against a ``ToolRegistry``.

    The dispatcher does not check permissions and does not validate arguments
    beyond JSON parsing; handlers validate their own parameters. Calls are not
    serialized, so concurrent calls to one handler must be safe in the handler.

    Args:
        registry: Registry to resolve tool names against.
        timeout: Optional per-call limit in seconds.
        hooks: Optional observers. ``on_tool_start(name, args)`` and
            ``on_tool_end(name, result, duration)``; exceptions raised by hooks
            are logged and ignored.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        timeout: Optional[float] = None,
        hooks: Optional[Dict[str, HookCallable]] = None,
    ) -> None:
        self.registry = registry
        self.timeout = timeout
        self.hooks = hooks or {}

    def _call_hook(self, hook_name: str, *args: Any) -> None:
        hook = self.hooks.get(hook_name)
        if hook is None:
            return
        try:
            hook(*args)
        except Exception:  # noqa: BLE001
            logger.exception("Hook %s failed", hook_name)

    async def _invoke(self, handler: ToolHandler, args: Dict[str, Any]) -> HandlerResult:
        if inspect.iscoroutinefunction(handler):
            result = handler(args)
        else:
            loop = asyncio.get_running_loop()
            context = contextvars.copy_context()
            result = await loop.run_in_executor(
                None, context.run, functools.partial(handler, args)
            )
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _run(self, handler: ToolHandler, args: Dict[str, Any]) -> HandlerResult:
        """Invoke the handler under ``self.timeout``; only this limit raises ``_DispatchTimeout``."""
        if not self.timeout:
            return await self._invoke(handler, args)

        task = asyncio.ensure_future(self._invoke(handler, args))
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout)
        finally:
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
        if not done:
            raise _DispatchTimeout
        return task.result()

    async def dispatch(self, tool_call: ToolCall) -> ToolResult:
        """Run one tool call. Never raises for lookup, parse, or handler failures."""
        name = self.registry.resolve_name(tool_call.name)

        try:
            registered = self.registry.get(name)
        except ToolNotFoundError as exc:
            logger.info("Model requested unknown tool %s", name)
            return ToolResult.error(str(exc))

        args, parse_error = parse_arguments(tool_call.arguments)
        if args is None:
            logger.info("Rejected arguments for tool %s: %s", name, parse_error)
            return ToolResult.error(f"Invalid arguments for tool '{name}': {parse_error}")

        self._call_hook("on_tool_start", name, args)
        start = time.time()
        try:
            raw = await self._run(registered.handler, args)
        except _DispatchTimeout:
            result = ToolResult.error(f"Tool '{name}' timed out after {self.timeout} seconds")
        except Exception as exc:  # noqa: BLE001
            logger.debug("Tool %s failed", name, exc_info=True)
            result = ToolResult.error(f"Error executing tool '{name}': {exc}")
        else:
            result = coerce_result(raw)

        duration = time.time() - start
        logger.debug("Tool %s finished in %.3fs (error=%s)", name, duration, result.is_error)
        self._call_hook("on_tool_end", name, result, duration)
        return result

    async def dispatch_all(self, tool_calls: Sequence[ToolCall]) -> List[ToolResult]:
        """Run calls concurrently; results come back in request order."""
        return list(await asyncio.gather(*[self.dispatch(call) for call in tool_calls]))

    @staticmethod
    def to_message(tool_call: ToolCall, result: ToolResult) -> Message:
        """Build the tool-role message that answers ``tool_call``."""
        return Message(role=Role.TOOL, content=result.content, tool_call_id=tool_call.id)


__all__ = ["ToolDispatcher", "parse_arguments", "coerce_result"]
