"""Static tool catalog — one descriptor per Follow Up Boss REST endpoint.

The descriptors are data, not code: they live in ``data/tools.json`` and are
loaded once per process.  Lookup by name is a dict access; iteration keeps the
file's order, which is also the order published to callers.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from fub_bridge.constants import TOOL_METHODS

logger = logging.getLogger(__name__)

_CATALOG_FILE = Path(__file__).parent / "data" / "tools.json"


class CatalogError(ValueError):
    """Raised when catalog data is malformed (duplicate names, unknown methods)."""


class UnknownToolError(LookupError):
    """Raised when a caller names a tool that is not registered."""

    def __init__(self, name: Any) -> None:
        super().__init__(f"Unknown tool: {'<missing>' if name is None else name}")
        self.name = name


@dataclass(frozen=True)
class ToolDescriptor:
    """One tool: an HTTP method plus a ``:placeholder`` path template."""
    name: str
    method: str
    path: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def to_public(self) -> dict[str, Any]:
        """The shape published on discovery and ``list_tools``."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolCatalog:
    """Immutable, ordered collection of tool descriptors keyed by name."""

    def __init__(self, descriptors: list[ToolDescriptor] | tuple[ToolDescriptor, ...]) -> None:
        by_name: dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.method not in TOOL_METHODS:
                raise CatalogError(
                    f"Tool '{descriptor.name}' has unsupported method '{descriptor.method}'."
                )
            if descriptor.name in by_name:
                raise CatalogError(f"Duplicate tool name '{descriptor.name}'.")
            by_name[descriptor.name] = descriptor
        self._ordered = tuple(by_name.values())
        self._by_name = MappingProxyType(by_name)
        self._public: list[dict[str, Any]] | None = None

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._ordered)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._by_name

    def get(self, name: Any) -> ToolDescriptor | None:
        if not isinstance(name, str):
            return None
        return self._by_name.get(name)

    def require(self, name: Any) -> ToolDescriptor:
        descriptor = self.get(name)
        if descriptor is None:
            raise UnknownToolError(name)
        return descriptor

    def names(self) -> list[str]:
        return [d.name for d in self._ordered]

    def public_tools(self) -> list[dict[str, Any]]:
        """Public descriptors, built once and shared by every listing route."""
        if self._public is None:
            self._public = [d.to_public() for d in self._ordered]
        return self._public

    @classmethod
    def from_records(cls, records: list[dict[str, Any]]) -> ToolCatalog:
        descriptors = []
        for i, record in enumerate(records):
            try:
                descriptors.append(
                    ToolDescriptor(
                        name=record["name"],
                        method=str(record["method"]).upper(),
                        path=record["path"],
                        description=record.get("description", ""),
                        input_schema=record.get("inputSchema") or {"type": "object"},
                    )
                )
            except (KeyError, TypeError) as exc:
                raise CatalogError(f"Catalog record #{i} is missing field {exc}.") from exc
        return cls(descriptors)

    @classmethod
    def from_file(cls, path: str | Path) -> ToolCatalog:
        with open(path, encoding="utf-8") as fh:
            records = json.load(fh)
        if not isinstance(records, list):
            raise CatalogError(f"Catalog file {path} must contain a JSON array.")
        catalog = cls.from_records(records)
        logger.debug("Loaded %d tools from %s", len(catalog), path)
        return catalog


_catalog: ToolCatalog | None = None


def get_catalog() -> ToolCatalog:
    """Return the process-wide catalog, loading the bundled data on first call."""
    global _catalog  # noqa: PLW0603
    if _catalog is None:
        _catalog = ToolCatalog.from_file(_CATALOG_FILE)
    return _catalog
