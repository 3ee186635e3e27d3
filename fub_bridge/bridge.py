"""Tool invocation shared by the HTTP and MCP surfaces: lookup, compile, send, normalize."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fub_bridge.catalog import ToolCatalog
from fub_bridge.clients.followupboss import FollowUpBossClient
from fub_bridge.compiler import RequestCompiler, missing_path_params
from fub_bridge.config import BridgeSettings
from fub_bridge.normalization import UpstreamResult, build_result

logger = logging.getLogger(__name__)


class MissingPathParamsError(ValueError):
    """Raised in strict mode when a path placeholder has no matching parameter."""

    def __init__(self, tool_name: str, missing: list[str]) -> None:
        super().__init__(
            f"Missing path parameter(s) for {tool_name}: {', '.join(missing)}"
        )
        self.tool_name = tool_name
        self.missing = missing


class ToolBridge:
    """Stateless per call; holds only the read-only catalog, compiler and client."""

    def __init__(
        self,
        settings: BridgeSettings,
        catalog: ToolCatalog,
        client: FollowUpBossClient,
    ) -> None:
        self.settings = settings
        self.catalog = catalog
        self.compiler = RequestCompiler(settings)
        self.client = client

    async def invoke(self, name: Any, params: Mapping[str, Any]) -> UpstreamResult:
        """Run one tool.

        Raises ``UnknownToolError`` for unregistered names and
        ``UpstreamTransportError`` when the upstream cannot be reached.  Upstream
        HTTP errors are returned as results, not raised.
        """
        descriptor = self.catalog.require(name)
        if self.settings.strict_path_params:
            missing = missing_path_params(descriptor, params)
            if missing:
                raise MissingPathParamsError(descriptor.name, missing)

        request = self.compiler.compile(descriptor, params)
        logger.debug("Executing tool %s with URL %s", descriptor.name, request.url)
        raw = await self.client.send(request)
        result = build_result(raw)
        logger.debug("Tool %s returned HTTP %s", descriptor.name, result.status)
        return result
