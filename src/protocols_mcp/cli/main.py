"""AI Protocols CLI entry point.

Runs the same tool dispatch the MCP server exposes, rendered for a terminal.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import typer

from .. import __version__
from ..config import LOG_FORMAT, ConfigurationError, load_config
from ..errors import ProtocolError
from ..server import build_tools, run_server
from ..tools import ProtocolTools, ToolResponse
from .console import (
    console,
    create_table,
    print_error,
    print_markdown,
    print_panel,
    print_warning,
    truncate,
)

app = typer.Typer(
    name="ai-protocols",
    help="AI Protocols - browse, search and route the BRAIN protocol library",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"ai-protocols version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    protocols_path: Path | None = typer.Option(
        None,
        "--protocols-path",
        "-p",
        help="Protocols root (directory containing BRAIN/)",
        envvar="PROTOCOLS_PATH",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a protocols-config.yaml file",
    ),
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """AI Protocols - browse, search and route the BRAIN protocol library."""
    ctx.obj = {"protocols_path": protocols_path, "config_path": config_path}


def _load_config(ctx: typer.Context) -> dict[str, Any]:
    options = ctx.obj or {}
    config_path = options.get("config_path")
    try:
        config = load_config(str(config_path) if config_path else None)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(1)

    protocols_path = options.get("protocols_path")
    if protocols_path:
        config["protocols"]["root"] = str(Path(protocols_path).resolve())
    return config


def _load_tools(ctx: typer.Context) -> ProtocolTools:
    """Build the catalog for a one-shot command."""
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    config = _load_config(ctx)
    try:
        return build_tools(config)
    except (ConfigurationError, ProtocolError) as e:
        print_error(str(e))
        raise typer.Exit(1)


def _call(tools: ProtocolTools, name: str, arguments: dict[str, Any]) -> ToolResponse:
    response = asyncio.run(tools.call_tool(name, arguments))
    if response.is_error:
        print_error(response.text)
        raise typer.Exit(1)
    return response


def _print_document(text: str, raw: bool) -> None:
    if raw:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
    else:
        print_markdown(text)


@app.command(name="list")
def list_command(
    ctx: typer.Context,
    category: str | None = typer.Option(
        None, "--category", "-C", help="Only list protocols in this category"
    ),
) -> None:
    """List all available protocols."""
    tools = _load_tools(ctx)
    response = _call(tools, "list_protocols", {"category": category})

    if not response.data:
        console.print("[dim]No protocols found.[/dim]")
        return

    table = create_table("Protocols")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Triggers", style="magenta")
    table.add_column("Category", style="blue")
    table.add_column("Purpose", style="dim")

    for summary in response.data:
        table.add_row(
            summary["name"],
            ", ".join(summary["triggers"]) or "-",
            summary["category"],
            truncate(summary["purpose"], 60),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(response.data)} protocol(s)[/dim]")


@app.command(name="show")
def show_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Protocol name or filename"),
    raw: bool = typer.Option(False, "--raw", help="Print markdown without rendering"),
) -> None:
    """Show a protocol by name."""
    tools = _load_tools(ctx)
    response = _call(tools, "get_protocol", {"name": name})
    _print_document(response.text, raw)


@app.command(name="trigger")
def trigger_command(
    ctx: typer.Context,
    trigger: str = typer.Argument(..., help="Trigger command, e.g. DEEPDIVE"),
    raw: bool = typer.Option(False, "--raw", help="Print markdown without rendering"),
) -> None:
    """Show the protocol a trigger command activates."""
    tools = _load_tools(ctx)
    response = _call(tools, "get_protocol_by_trigger", {"trigger": trigger})
    _print_document(response.text, raw)


@app.command(name="search")
def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search terms"),
    category: str | None = typer.Option(
        None, "--category", "-C", help="Only search this category"
    ),
    no_context: bool = typer.Option(
        False, "--no-context", help="Do not re-rank by project tech stack"
    ),
) -> None:
    """Search protocols by keyword relevance."""
    tools = _load_tools(ctx)
    response = _call(
        tools,
        "search_protocols",
        {"query": query, "category": category, "use_context": not no_context},
    )

    if not response.data:
        console.print(f"[dim]{response.text}[/dim]")
        return

    table = create_table(f'Results for "{query}"')
    table.add_column("#", style="dim", justify="right")
    table.add_column("Protocol", style="cyan", no_wrap=True)
    table.add_column("Score", style="green", justify="right")
    table.add_column("Relevance", style="magenta")
    table.add_column("Excerpt", style="dim")

    for rank, result in enumerate(response.data, start=1):
        table.add_row(
            str(rank),
            result.protocol,
            str(result.score),
            result.context_relevance or "-",
            truncate(" ".join(result.excerpt.split()), 70),
        )

    console.print(table)


@app.command(name="fuzzy")
def fuzzy_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Approximate protocol name"),
) -> None:
    """Find protocols by approximate name."""
    tools = _load_tools(ctx)
    response = _call(tools, "fuzzy_match_protocol", {"name": name})

    if not response.data:
        console.print(f"[dim]{response.text}[/dim]")
        return

    table = create_table(f'Similar to "{name}"')
    table.add_column("Protocol", style="cyan", no_wrap=True)
    table.add_column("Similarity", style="green", justify="right")
    for match in response.data:
        table.add_row(match.protocol, f"{match.similarity:.2f}")

    console.print(table)


@app.command(name="route")
def route_command(
    ctx: typer.Context,
    description: str = typer.Argument(..., help="What you are trying to do"),
    task_type: str | None = typer.Option(
        None, "--type", "-t", help="Override the inferred task type"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON payload"),
) -> None:
    """Recommend a protocol workflow for a task."""
    tools = _load_tools(ctx)
    response = _call(
        tools, "route_task", {"description": description, "task_type": task_type}
    )

    if as_json:
        console.print(response.text, markup=False, highlight=False, soft_wrap=True)
        return

    payload = json.loads(response.text)
    summary_lines = [
        f"Task type: {payload['task_type']} ({payload['task_type_source']})",
        f"Difficulty: {payload['difficulty']}",
        f"Estimated time: {payload['estimated_time']}",
    ]
    if payload.get("project_context"):
        summary_lines.append(f"Project: {payload['project_context']}")
    print_panel("Task Routing", "\n".join(summary_lines))

    for warning in payload.get("warnings", []):
        print_warning(warning)

    print_markdown(payload["formatted"])

    if payload["missing_protocols"]:
        print_warning(
            "Not in this library: " + ", ".join(payload["missing_protocols"])
        )


@app.command(name="serve")
def serve_command(ctx: typer.Context) -> None:
    """Run the MCP server over stdio."""
    config = _load_config(ctx)
    run_server(config)


if __name__ == "__main__":
    app()
