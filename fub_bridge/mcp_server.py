"""Stdio MCP surface over the same tool catalog.

Each catalog entry is published as an MCP tool with its JSON input schema.
Calls go through :class:`ToolBridge` exactly like ``POST /messages`` and come
back as the JSON ``tool_response`` envelope in a single text block.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from fub_bridge.bridge import ToolBridge
from fub_bridge.catalog import get_catalog
from fub_bridge.clients.followupboss import FollowUpBossClient
from fub_bridge.compiler import dump_json
from fub_bridge.config import BridgeSettings, load_env_file

logger = logging.getLogger(__name__)

server: Server = Server("fub-bridge")

_bridge: ToolBridge | None = None


def set_bridge(bridge: ToolBridge | None) -> None:
    """Install the bridge used by tool calls (tests inject one directly)."""
    global _bridge  # noqa: PLW0603
    _bridge = bridge


def _get_bridge() -> ToolBridge:
    if _bridge is None:
        raise RuntimeError("Bridge is not initialised; call run_stdio() or set_bridge().")
    return _bridge


@server.list_tools()
async def list_tools() -> list[types.Tool]:
    return [
        types.Tool(name=d.name, description=d.description, inputSchema=d.input_schema)
        for d in _get_bridge().catalog
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    # Exceptions become MCP error results with the exception text.
    result = await _get_bridge().invoke(name, arguments or {})
    return [types.TextContent(type="text", text=dump_json(result.to_envelope()))]


async def run_stdio(settings: BridgeSettings) -> None:
    async with FollowUpBossClient() as client:
        set_bridge(ToolBridge(settings, get_catalog(), client))
        try:
            async with stdio_server() as (read_stream, write_stream):
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options(),
                )
        finally:
            set_bridge(None)


def main() -> None:
    load_env_file()
    settings = BridgeSettings.from_env()
    # stdout carries the protocol; basicConfig logs to stderr.
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting stdio MCP server with %d tools", len(get_catalog()))
    asyncio.run(run_stdio(settings))


if __name__ == "__main__":
    main()
