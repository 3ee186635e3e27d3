"""Follow Up Boss bridge — aiohttp entry point.

Routes:

* ``GET /sse`` — the tool catalog as one server-sent event; the connection
  then stays open with nothing further sent (optional keep-alive comments).
* ``POST /messages`` — ``list_tools`` or a ``tool_request`` invocation.
* anything else — a static hint pointing at the two routes above.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from aiohttp import web

from fub_bridge.bridge import MissingPathParamsError, ToolBridge
from fub_bridge.catalog import ToolCatalog, UnknownToolError, get_catalog
from fub_bridge.clients.followupboss import FollowUpBossClient
from fub_bridge.compiler import dump_json
from fub_bridge.config import BridgeSettings, load_env_file
from fub_bridge.constants import FALLBACK_MESSAGE, INVALID_PAYLOAD_MESSAGE, LIST_TOOLS_NAME

logger = logging.getLogger(__name__)

SETTINGS_KEY = web.AppKey("settings", BridgeSettings)
CATALOG_KEY = web.AppKey("catalog", ToolCatalog)
BRIDGE_KEY = web.AppKey("bridge", ToolBridge)
SHUTDOWN_KEY = web.AppKey("shutdown", asyncio.Event)

# How often an idle discovery stream checks whether its client went away.
_DISCONNECT_POLL_SECONDS = 5.0

_CORS_ALLOW_METHODS = "GET,HEAD,PUT,PATCH,POST,DELETE"
_CORS_MAX_AGE = "600"


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Allow any origin; answer preflight requests without reaching a handler."""
    if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
        response = web.Response(status=204)
        response.headers["Access-Control-Allow-Methods"] = _CORS_ALLOW_METHODS
        requested = request.headers.get("Access-Control-Request-Headers")
        if requested:
            response.headers["Access-Control-Allow-Headers"] = requested
        response.headers["Access-Control-Max-Age"] = _CORS_MAX_AGE
        response.headers["Vary"] = "Origin, Access-Control-Request-Headers"
    else:
        response = await handler(request)
    if not response.prepared:
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
    return response


def _text_error(status: int, message: str) -> web.Response:
    return web.Response(status=status, text=message)


async def handle_sse(request: web.Request) -> web.StreamResponse:
    catalog = request.app[CATALOG_KEY]
    keepalive = request.app[SETTINGS_KEY].sse_keepalive_seconds

    response = web.StreamResponse(
        status=200,
        headers={
            "Content-Type": "text/event-stream",
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "Access-Control-Allow-Origin": "*",
        },
    )
    await response.prepare(request)
    await response.write(f"data: {dump_json(catalog.public_tools())}\n\n".encode())
    logger.debug("Discovery stream opened for %s", request.remote)

    shutdown = request.app[SHUTDOWN_KEY]
    interval = keepalive if keepalive > 0 else _DISCONNECT_POLL_SECONDS
    try:
        while (
            not shutdown.is_set()
            and request.transport is not None
            and not request.transport.is_closing()
        ):
            try:
                await asyncio.wait_for(shutdown.wait(), interval)
            except TimeoutError:
                if keepalive > 0:
                    await response.write(b": keep-alive\n\n")
    except ConnectionResetError:
        pass
    logger.debug("Discovery stream closed for %s", request.remote)
    return response


async def handle_messages(request: web.Request) -> web.StreamResponse:
    bridge = request.app[BRIDGE_KEY]
    try:
        body = await request.json()
    except ValueError:
        return _text_error(400, INVALID_PAYLOAD_MESSAGE)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        return _text_error(400, INVALID_PAYLOAD_MESSAGE)

    try:
        tool_request = body.get("tool_request")
        if body.get("list_tools") or (
            isinstance(tool_request, dict) and tool_request.get("name") == LIST_TOOLS_NAME
        ):
            return web.json_response({"tools": bridge.catalog.public_tools()}, dumps=dump_json)

        if not isinstance(tool_request, dict):
            return _text_error(400, INVALID_PAYLOAD_MESSAGE)

        params = tool_request.get("parameters")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return _text_error(400, INVALID_PAYLOAD_MESSAGE)

        try:
            result = await bridge.invoke(tool_request.get("name"), params)
        except (UnknownToolError, MissingPathParamsError) as exc:
            return _text_error(400, str(exc))
        return web.json_response(result.to_envelope(), dumps=dump_json)
    except Exception as exc:
        logger.exception("Error processing message")
        return _text_error(500, f"Server error: {exc}")


async def handle_fallback(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "message": FALLBACK_MESSAGE})


def create_app(
    settings: BridgeSettings | None = None,
    *,
    catalog: ToolCatalog | None = None,
    client: FollowUpBossClient | None = None,
) -> web.Application:
    """Build the bridge application.

    When ``client`` is given its lifecycle belongs to the caller; otherwise the
    app opens a client on startup and closes it on cleanup.
    """
    settings = settings or BridgeSettings.from_env()
    catalog = catalog or get_catalog()

    app = web.Application(middlewares=[cors_middleware])
    app[SETTINGS_KEY] = settings
    app[CATALOG_KEY] = catalog
    app[SHUTDOWN_KEY] = asyncio.Event()

    async def _release_streams(app: web.Application) -> None:
        # Wakes idle discovery streams so they return before handlers are awaited.
        app[SHUTDOWN_KEY].set()

    async def _bridge_ctx(app: web.Application) -> AsyncIterator[None]:
        if client is not None:
            app[BRIDGE_KEY] = ToolBridge(settings, catalog, client)
            yield
            return
        async with FollowUpBossClient() as owned:
            app[BRIDGE_KEY] = ToolBridge(settings, catalog, owned)
            yield

    app.on_shutdown.append(_release_streams)
    app.cleanup_ctx.append(_bridge_ctx)
    app.router.add_get("/sse", handle_sse)
    app.router.add_post("/messages", handle_messages)
    app.router.add_route("*", "/{tail:.*}", handle_fallback)
    return app


def main() -> None:
    load_env_file()
    settings = BridgeSettings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "Bridge listening on %s:%s with %d tools (upstream %s)",
        settings.host,
        settings.port,
        len(get_catalog()),
        settings.base_url,
    )
    web.run_app(create_app(settings), host=settings.host, port=settings.port, print=None)


if __name__ == "__main__":
    main()
