"""Compile ``(tool, parameters)`` into a concrete outbound HTTP request.

Compilation never raises for well-typed input.  A path placeholder with no
matching parameter stays in the URL as ``:name``; callers that want to reject
such requests up front use :func:`missing_path_params`.
"""

from __future__ import annotations

import base64
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from fub_bridge.catalog import ToolDescriptor
from fub_bridge.config import BridgeSettings
from fub_bridge.constants import BODY_METHODS, QUERY_METHODS

_PLACEHOLDER_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")

# Same unreserved set as JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "!~*'()"


@dataclass(frozen=True)
class CompiledRequest:
    """A fully-formed outbound request; lives for one invocation."""
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict, hash=False)
    body: str | None = None


def path_placeholders(template: str) -> list[str]:
    """Placeholder names in a path template, in order of appearance."""
    return _PLACEHOLDER_RE.findall(template)


def missing_path_params(descriptor: ToolDescriptor, params: Mapping[str, Any]) -> list[str]:
    return [key for key in path_placeholders(descriptor.path) if key not in params]


def stringify(value: Any) -> str:
    """Render a parameter value the way a JavaScript client would (``String(value)``)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return _array_string(value)
    if isinstance(value, dict):
        return dump_json(value)
    return str(value)


def _array_string(items: list | tuple) -> str:
    # Array.prototype.toString: comma-joined, null items render empty.
    return ",".join("" if item is None else stringify(item) for item in items)


def _is_falsy(value: Any) -> bool:
    """JavaScript falsiness for decoded JSON values; empty objects and arrays are truthy."""
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    return False


def encode_component(value: Any) -> str:
    return quote(stringify(value), safe=_URI_COMPONENT_SAFE)


def dump_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class RequestCompiler:
    """Turns a descriptor and a parameter bag into a :class:`CompiledRequest`.

    Credentials are fixed at construction, so the same compiler can be shared
    by every concurrent invocation.
    """

    def __init__(self, settings: BridgeSettings) -> None:
        self.base_url = settings.base_url.rstrip("/")
        self._headers = self._build_headers(settings)

    @staticmethod
    def _build_headers(settings: BridgeSettings) -> dict[str, str]:
        token = base64.b64encode(f"{settings.api_key}:".encode()).decode("ascii")
        headers = {
            "Authorization": f"Basic {token}",
            "Content-Type": "application/json",
        }
        if settings.has_system_credentials:
            headers["X-System"] = settings.system_name
            headers["X-System-Key"] = settings.system_key
        return headers

    def build_url(self, descriptor: ToolDescriptor, params: Mapping[str, Any]) -> str:
        placeholders = set(path_placeholders(descriptor.path))

        def _substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in params:
                return match.group(0)
            return encode_component(params[key])

        url = self.base_url + _PLACEHOLDER_RE.sub(_substitute, descriptor.path)

        if descriptor.method in QUERY_METHODS:
            pairs = [
                f"{quote(str(key), safe=_URI_COMPONENT_SAFE)}={encode_component(value)}"
                for key, value in params.items()
                if key not in placeholders and value is not None
            ]
            if pairs:
                url += ("&" if "?" in url else "?") + "&".join(pairs)
        return url

    def build_body(self, descriptor: ToolDescriptor, params: Mapping[str, Any]) -> str | None:
        if descriptor.method not in BODY_METHODS:
            return None
        data = params.get("data")
        return dump_json(dict(params) if _is_falsy(data) else data)

    def compile(self, descriptor: ToolDescriptor, params: Mapping[str, Any]) -> CompiledRequest:
        return CompiledRequest(
            method=descriptor.method,
            url=self.build_url(descriptor, params),
            headers=dict(self._headers),
            body=self.build_body(descriptor, params),
        )
