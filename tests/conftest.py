"""Shared test fixtures — fake upstream CRM, bridge app client, singleton resets."""

from __future__ import annotations

from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

import fub_bridge.server as server_mod
from fub_bridge.catalog import ToolCatalog, get_catalog
from fub_bridge.config import BridgeSettings
from fub_bridge.mcp_server import set_bridge
from fub_bridge.server import create_app


class FakeUpstream:
    """Records every request and answers with a configurable canned response."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.status = 200
        self.reason: str | None = None
        self.body = '{"ok": true}'
        self.content_type = "application/json"
        self.base_url = ""

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append(
            {
                "method": request.method,
                "raw_path": request.raw_path,
                "headers": dict(request.headers),
                "body": await request.text(),
            }
        )
        return web.Response(
            status=self.status,
            reason=self.reason,
            text=self.body,
            content_type=self.content_type,
        )

    @property
    def last(self) -> dict[str, Any]:
        return self.requests[-1]


@pytest.fixture()
def catalog() -> ToolCatalog:
    return get_catalog()


@pytest.fixture()
async def upstream():
    fake = FakeUpstream()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", fake.handle)
    async with TestServer(app) as srv:
        fake.base_url = str(srv.make_url("/v1"))
        yield fake


@pytest.fixture()
def settings(upstream: FakeUpstream) -> BridgeSettings:
    return BridgeSettings(api_key="test-key", base_url=upstream.base_url)


@pytest.fixture()
async def bridge_client(settings: BridgeSettings):
    async with TestClient(TestServer(create_app(settings))) as client:
        yield client


@pytest.fixture(autouse=True)
def _fast_disconnect_poll(monkeypatch):
    """Let idle discovery streams notice closed clients quickly."""
    monkeypatch.setattr(server_mod, "_DISCONNECT_POLL_SECONDS", 0.02)


@pytest.fixture(autouse=True)
def _reset_mcp_bridge():
    set_bridge(None)
    yield
    set_bridge(None)
