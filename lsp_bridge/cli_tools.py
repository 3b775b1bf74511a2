import argparse
import json
import sys
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from lsp_bridge.container import container
from lsp_bridge.entities.ToolResult import PromptResponse, ToolResult


def _parse_arguments(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SystemExit(f"--args is not valid JSON: {e}")
    if not isinstance(value, dict):
        raise SystemExit("--args must be a JSON object")
    return value


def _print_listing(console: Console | None, tools: list, prompts: list) -> None:
    if console is None:
        print(json.dumps({"tools": tools, "prompts": prompts}, ensure_ascii=False, indent=2))
        return
    table = Table(title="tools", box=box.ROUNDED)
    table.add_column("name", style="cyan")
    table.add_column("arguments")
    table.add_column("description")
    for t in tools:
        props = t["parameters"].get("properties", {})
        required = set(t["parameters"].get("required", []))
        args = ", ".join(f"{n}*" if n in required else n for n in props)
        table.add_row(t["name"], args, t["description"])
    console.print(table)
    table = Table(title="prompts", box=box.ROUNDED)
    table.add_column("name", style="cyan")
    table.add_column("arguments")
    table.add_column("description")
    for p in prompts:
        table.add_row(p["name"], ", ".join(a["name"] for a in p["arguments"]), p["description"])
    console.print(table)


def _print_tool_result(console: Console | None, result: ToolResult) -> None:
    if console is None:
        if result.error is not None:
            print(json.dumps(result.error.to_dict(), ensure_ascii=False, indent=2), file=sys.stderr)
        else:
            print(result.text)
        return
    if result.error is not None:
        console.print(
            Panel(
                Syntax(json.dumps(result.error.to_dict(), ensure_ascii=False, indent=2), "json"),
                title=f"{result.operation}: {result.error.kind}",
                box=box.ROUNDED,
                border_style="red",
                expand=True,
            )
        )
        return
    console.print(
        Panel(
            result.text or "",
            title=result.operation,
            box=box.ROUNDED,
            border_style="magenta",
            expand=True,
        )
    )


def _print_prompt(console: Console | None, response: PromptResponse) -> None:
    if console is None:
        print(response.text)
        return
    for message in response.messages:
        console.print(
            Panel(
                message.text,
                title=f"{message.role}: {response.description}",
                box=box.ROUNDED,
                border_style="magenta",
                expand=True,
            )
        )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lsp-bridge-tools",
        description="Call one code-intelligence tool or prompt and print its result.",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty print output with colors",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="List tools and prompts")
    call = sub.add_parser("call", help="Call a tool")
    call.add_argument("name", help="Tool name, e.g. read_definition")
    call.add_argument("--args", default=None, help='Arguments as JSON, e.g. \'{"symbolName": "F"}\'')
    prompt = sub.add_parser("prompt", help="Render a prompt")
    prompt.add_argument("name", help="Prompt name, e.g. read-definition")
    prompt.add_argument("--args", default=None, help="Arguments as JSON")

    args = parser.parse_args(argv)
    console = Console(soft_wrap=True) if args.pretty else None
    dispatcher = container.get_dispatcher()

    try:
        if args.command == "list":
            _print_listing(console, dispatcher.list_tools(), dispatcher.list_prompts())
            return 0
        if args.command == "call":
            result = dispatcher.call_tool(args.name, _parse_arguments(args.args))
            _print_tool_result(console, result)
            return 1 if result.is_error else 0
        response = dispatcher.get_prompt(args.name, _parse_arguments(args.args))
        _print_prompt(console, response)
        return 0
    finally:
        container.shutdown()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
