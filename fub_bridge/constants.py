"""Shared constants used across the compiler, client and server modules."""

from __future__ import annotations

DEFAULT_BASE_URL = "https://api.followupboss.com/v1"
DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"

# Methods whose parameters travel in the query string vs. a JSON body.
QUERY_METHODS: frozenset[str] = frozenset({"GET", "DELETE"})
BODY_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH"})
TOOL_METHODS: frozenset[str] = QUERY_METHODS | BODY_METHODS

LIST_TOOLS_NAME = "list_tools"

INVALID_PAYLOAD_MESSAGE = "Invalid request payload."
FALLBACK_MESSAGE = "Use /sse for SSE tool list or POST to /messages for tool execution."
