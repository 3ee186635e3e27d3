"""Tests for the stdio MCP surface."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from fub_bridge.bridge import ToolBridge
from fub_bridge.catalog import ToolCatalog, UnknownToolError
from fub_bridge.clients.followupboss import RawUpstreamResponse, UpstreamTransportError
from fub_bridge.config import BridgeSettings
from fub_bridge.mcp_server import call_tool, list_tools, set_bridge


@pytest.fixture()
def fake_client() -> AsyncMock:
    client = AsyncMock()
    client.send = AsyncMock(
        return_value=RawUpstreamResponse(status=200, status_text="OK", text='{"id": 42}')
    )
    return client


@pytest.fixture()
def mcp_bridge(catalog: ToolCatalog, fake_client: AsyncMock) -> ToolBridge:
    bridge = ToolBridge(BridgeSettings(api_key="test-key"), catalog, fake_client)
    set_bridge(bridge)
    return bridge


class TestListTools:
    async def test_publishes_catalog(self, mcp_bridge, catalog: ToolCatalog):
        tools = await list_tools()
        assert [t.name for t in tools] == catalog.names()
        person = next(t for t in tools if t.name == "get_person")
        assert person.inputSchema["required"] == ["id"]

    async def test_requires_bridge(self):
        with pytest.raises(RuntimeError, match="not initialised"):
            await list_tools()


class TestCallTool:
    async def test_returns_envelope_text(self, mcp_bridge, fake_client):
        content = await call_tool("get_person", {"id": 42})
        assert len(content) == 1
        assert content[0].type == "text"
        assert json.loads(content[0].text) == {
            "tool_response": {"status": 200, "statusText": "OK", "data": {"id": 42}}
        }
        request = fake_client.send.await_args.args[0]
        assert request.url == "https://api.followupboss.com/v1/people/42"

    async def test_none_arguments(self, mcp_bridge, fake_client):
        await call_tool("list_people", None)
        request = fake_client.send.await_args.args[0]
        assert request.url.endswith("/people")

    async def test_unknown_tool_raises(self, mcp_bridge, fake_client):
        with pytest.raises(UnknownToolError, match="frobnicate"):
            await call_tool("frobnicate", {})
        fake_client.send.assert_not_awaited()

    async def test_transport_error_propagates(self, mcp_bridge, fake_client):
        fake_client.send.side_effect = UpstreamTransportError(
            "Cannot connect to host", code="NETWORK_ERROR"
        )
        with pytest.raises(UpstreamTransportError, match="Cannot connect"):
            await call_tool("list_people", {})
