"""
CLI entrypoint for the toolrelay library.

Examples:
    python -m toolrelay.cli list-tools
    python -m toolrelay.cli call read_file --args '{"file_path": "README.md"}'
    python -m toolrelay.cli complete --provider groq --model openai/gpt-oss-20b --prompt "Hello"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .exceptions import ProviderError
from .providers import ProviderConfig, ProviderRegistry
from .toolbox import initialize_all_tools
from .tools import ToolDispatcher, ToolRegistry, ToolResult
from .types import CompletionOptions, Message, Role, ToolCall
from .usage import SessionUsage


def _default_tools() -> ToolRegistry:
    registry = ToolRegistry()
    initialize_all_tools(registry)
    return registry


def list_tools(registry: ToolRegistry) -> None:
    for registered in registry.list_tools():
        schema = registered.schema
        print(f"- {schema.name} [{schema.permission.value}]: {schema.description}")


def confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def call_tool(args: argparse.Namespace, registry: ToolRegistry) -> int:
    """Dispatch one tool call, asking for confirmation before unsafe tools."""
    if registry.has(args.name) and registry.requires_confirmation(args.name) and not args.yes:
        if not confirm(f"Tool '{args.name}' is unsafe. Run it?"):
            print("Tool execution canceled by user", file=sys.stderr)
            return 1

    dispatcher = ToolDispatcher(registry, timeout=args.timeout)
    result: ToolResult = asyncio.run(
        dispatcher.dispatch(ToolCall(id="cli", name=args.name, arguments=args.args))
    )
    print(result.content, file=sys.stderr if result.is_error else sys.stdout)
    return 1 if result.is_error else 0


async def _complete(args: argparse.Namespace, registry: ToolRegistry) -> int:
    providers = ProviderRegistry()
    try:
        provider = providers.configure(
            args.provider, ProviderConfig(api_key=args.api_key, base_url=args.base_url)
        )
    except ProviderError as exc:
        print(f"[{args.provider}] {exc}", file=sys.stderr)
        return 1
    if not provider.is_ready():
        print(f"[{provider.name}] provider is not configured (missing API key)", file=sys.stderr)
        return 1

    messages: List[Message] = []
    if args.system:
        messages.append(Message(role=Role.SYSTEM, content=args.system))
    messages.append(Message(role=Role.USER, content=args.prompt))
    options = CompletionOptions(
        model=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        tools=registry.enabled_schemas() if args.with_tools else None,
    )

    usage = SessionUsage()
    try:
        async for chunk in provider.stream(messages, options):
            if usage.add_chunk(chunk):
                continue
            if chunk.reasoning and args.show_reasoning:
                print(f"(reasoning) {chunk.reasoning}")
            if chunk.content:
                print(chunk.content)
            for call in chunk.tool_calls or []:
                print(f"→ tool call {call.name}({call.arguments})")
    except ProviderError as exc:
        print(f"[{provider.name}] {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        print(usage)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="toolrelay provider and tool CLI")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list-tools", help="List registered tools")
    list_parser.set_defaults(func="list")

    call_parser = subparsers.add_parser("call", help="Dispatch a single tool call")
    call_parser.add_argument("name", help="Tool name")
    call_parser.add_argument("--args", default="{}", help="JSON object of tool arguments")
    call_parser.add_argument("--yes", action="store_true", help="Skip confirmation for unsafe tools")
    call_parser.add_argument("--timeout", type=float, default=None, help="Tool timeout in seconds")
    call_parser.set_defaults(func="call")

    complete_parser = subparsers.add_parser("complete", help="Run one provider turn")
    complete_parser.add_argument(
        "--provider", default="groq", help="Provider type (groq|openai|anthropic|local|<compatible>)"
    )
    complete_parser.add_argument("--model", required=True, help="Model name for the provider")
    complete_parser.add_argument("--prompt", required=True, help="User prompt")
    complete_parser.add_argument("--system", help="Optional system prompt")
    complete_parser.add_argument("--api-key", help="API key (defaults to the provider's env var)")
    complete_parser.add_argument("--base-url", help="Base URL for OpenAI-compatible servers")
    complete_parser.add_argument("--temperature", type=float, default=0.0, help="Sampling temperature")
    complete_parser.add_argument("--max-tokens", type=int, default=8000, help="Max completion tokens")
    complete_parser.add_argument(
        "--with-tools", action="store_true", help="Offer the built-in tools to the model"
    )
    complete_parser.add_argument(
        "--show-reasoning", action="store_true", help="Print reasoning text when present"
    )
    complete_parser.set_defaults(func="complete")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    registry = _default_tools()

    if args.func == "list":
        list_tools(registry)
        return 0
    if args.func == "call":
        return call_tool(args, registry)
    if args.func == "complete":
        return asyncio.run(_complete(args, registry))
    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
