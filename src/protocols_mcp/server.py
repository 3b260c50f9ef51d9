#!/usr/bin/env python3
"""
AI Protocols MCP Server

FastMCP server exposing the protocol library (BRAIN/*.md) to AI assistants
via Model Context Protocol.

Features:
- Exact lookup by protocol name or trigger command
- Weighted keyword search, re-ranked by the detected project stack
- Typo-tolerant fuzzy name matching
- Task routing into ordered protocol workflows

The catalog is scanned and indexed once at startup and is read-only while
the server runs.
"""

import logging
import sys

from mcp.server.fastmcp import FastMCP

from protocols_mcp import __version__
from protocols_mcp.catalog import ProtocolCatalog
from protocols_mcp.config import (
    ConfigurationError,
    configure_logging,
    get_project_root,
    get_search_config,
    load_config,
    resolve_protocols_root,
)
from protocols_mcp.context_detector import describe_context, detect_project_context
from protocols_mcp.errors import ProtocolError
from protocols_mcp.scanner import ProtocolScanner
from protocols_mcp.tools import ProtocolTools

logger = logging.getLogger(__name__)


def create_server(tools: ProtocolTools, server_name: str = "ai-protocols") -> FastMCP:
    """
    Create a FastMCP server with all protocol tools registered.

    Args:
        tools: Dispatcher every tool forwards to
        server_name: MCP server name

    Returns:
        Configured FastMCP instance (not yet running)
    """
    mcp = FastMCP(server_name)

    @mcp.tool()
    async def get_protocol(name: str) -> dict:
        """
        Retrieve a specific protocol by name.

        Args:
            name: Protocol name or filename (e.g., "MASTER_PROTOCOL", "debug_protocol.md")

        Returns:
            Dictionary with success flag and the protocol text
            (title, triggers, category, full content)
        """
        response = await tools.call_tool("get_protocol", {"name": name})
        return response.to_dict()

    @mcp.tool()
    async def list_protocols(category: str | None = None) -> dict:
        """
        List all available protocols with metadata.

        Args:
            category: Only list protocols in this category (e.g., "Debugging")

        Returns:
            Dictionary with JSON list of {name, title, triggers, category, purpose}
        """
        response = await tools.call_tool("list_protocols", {"category": category})
        return response.to_dict()

    @mcp.tool()
    async def get_protocol_by_trigger(trigger: str) -> dict:
        """
        Find a protocol by its trigger command (case-insensitive).

        Args:
            trigger: Trigger command (e.g., "DEEPDIVE", "FULLINDEX")
        """
        response = await tools.call_tool("get_protocol_by_trigger", {"trigger": trigger})
        return response.to_dict()

    @mcp.tool()
    async def search_protocols(
        query: str, category: str | None = None, use_context: bool = True
    ) -> dict:
        """
        Search protocols by keywords with relevance scoring.

        Args:
            query: Search terms (e.g., "security audit")
            category: Only search protocols in this category
            use_context: Boost protocols matching the detected project stack

        Returns:
            Dictionary with JSON list of {protocol, score, excerpt, matches}
        """
        response = await tools.call_tool(
            "search_protocols",
            {"query": query, "category": category, "use_context": use_context},
        )
        return response.to_dict()

    @mcp.tool()
    async def fuzzy_match_protocol(name: str) -> dict:
        """
        Find a protocol by approximate name (handles typos).

        Args:
            name: Approximate protocol name (e.g., "debgu_protcol")
        """
        response = await tools.call_tool("fuzzy_match_protocol", {"name": name})
        return response.to_dict()

    @mcp.tool()
    async def route_task(description: str, task_type: str | None = None) -> dict:
        """
        Recommend an ordered protocol workflow for a task.

        Args:
            description: What you are trying to do (e.g., "fix this crash")
            task_type: Override the inferred type (debug, build, refactor, audit,
                optimize, test, setup, document, unknown)

        Returns:
            Dictionary with JSON task type, difficulty, time estimate,
            workflow steps and shortcuts
        """
        response = await tools.call_tool(
            "route_task", {"description": description, "task_type": task_type}
        )
        return response.to_dict()

    return mcp


def build_tools(config: dict) -> ProtocolTools:
    """
    Build the catalog and dispatcher from configuration.

    Raises:
        ConfigurationError: If the protocols root cannot be located
        ProtocolError: If the protocol directory is missing or unreadable
    """
    protocols_root = resolve_protocols_root(config)
    protocols_config = config.get("protocols", {})
    logger.info(f"Protocols root: {protocols_root}")

    scanner = ProtocolScanner(
        protocols_root,
        directory=protocols_config.get("directory", "BRAIN"),
        extension=protocols_config.get("extension", ".md"),
    )
    catalog = ProtocolCatalog(scanner)
    snapshot = catalog.build()

    if not snapshot.protocols:
        logger.warning(f"No protocol files found in {scanner.brain_path}")

    context = detect_project_context(get_project_root(config))
    logger.info(f"Project context: {describe_context(context)}")

    return ProtocolTools(
        catalog, context=context, search_config=get_search_config(config)
    )


def run_server(config: dict) -> None:
    """
    Configure logging, build the catalog and serve MCP over stdio.

    Exits with status 1 if the protocol directory cannot be used.
    """
    configure_logging(config)
    logger.info(f"=== Starting AI Protocols MCP Server v{__version__} ===")

    try:
        tools = build_tools(config)
    except (ConfigurationError, ProtocolError) as e:
        logger.critical(f"FATAL: {e}")
        sys.exit(1)

    mcp = create_server(tools, config.get("server", {}).get("name", "ai-protocols"))
    logger.info("MCP server ready - listening for tool calls on stdio")
    mcp.run()


def main():
    """Main entry point for ai-protocols-server."""
    try:
        config = load_config()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.critical(f"FATAL: {e}")
        sys.exit(1)

    run_server(config)


if __name__ == "__main__":
    main()
