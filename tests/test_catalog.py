"""Tests for the static tool catalog."""

from __future__ import annotations

import json

import pytest

from fub_bridge.catalog import (
    CatalogError,
    ToolCatalog,
    ToolDescriptor,
    UnknownToolError,
    get_catalog,
)
from fub_bridge.compiler import path_placeholders
from fub_bridge.constants import TOOL_METHODS


class TestBundledCatalog:
    def test_loads_all_tools(self, catalog: ToolCatalog):
        assert len(catalog) == 134

    def test_is_cached(self):
        assert get_catalog() is get_catalog()

    def test_names_unique(self, catalog: ToolCatalog):
        names = catalog.names()
        assert len(names) == len(set(names))

    def test_order_follows_data_file(self, catalog: ToolCatalog):
        names = catalog.names()
        assert names[:3] == ["list_people", "create_person", "get_person"]
        assert names[-1] == "list_timeframes"

    def test_methods_supported(self, catalog: ToolCatalog):
        assert {d.method for d in catalog} <= TOOL_METHODS

    def test_path_placeholders_declared_in_schema(self, catalog: ToolCatalog):
        for descriptor in catalog:
            properties = descriptor.input_schema.get("properties", {})
            for key in path_placeholders(descriptor.path):
                assert key in properties, f"{descriptor.name} does not declare '{key}'"

    def test_known_descriptor(self, catalog: ToolCatalog):
        descriptor = catalog.require("add_reaction")
        assert descriptor.method == "POST"
        assert descriptor.path == "/reactions/:refType/:refId"

    def test_public_shape(self, catalog: ToolCatalog):
        public = catalog.public_tools()
        assert len(public) == len(catalog)
        assert set(public[0]) == {"name", "description", "inputSchema"}
        assert public[0]["name"] == "list_people"

    def test_public_tools_json_serializable(self, catalog: ToolCatalog):
        assert json.loads(json.dumps(catalog.public_tools())) == catalog.public_tools()


class TestLookup:
    def test_get_unknown_returns_none(self, catalog: ToolCatalog):
        assert catalog.get("frobnicate") is None

    def test_get_non_string_returns_none(self, catalog: ToolCatalog):
        assert catalog.get(None) is None
        assert catalog.get(["list_people"]) is None

    def test_require_unknown_raises(self, catalog: ToolCatalog):
        with pytest.raises(UnknownToolError, match="frobnicate"):
            catalog.require("frobnicate")

    def test_require_missing_name_message(self, catalog: ToolCatalog):
        with pytest.raises(UnknownToolError, match="Unknown tool: <missing>"):
            catalog.require(None)

    def test_contains(self, catalog: ToolCatalog):
        assert "get_person" in catalog
        assert "frobnicate" not in catalog


class TestConstruction:
    def test_duplicate_names_rejected(self):
        d = ToolDescriptor(name="x", method="GET", path="/x", description="")
        with pytest.raises(CatalogError, match="Duplicate"):
            ToolCatalog([d, d])

    def test_unknown_method_rejected(self):
        with pytest.raises(CatalogError, match="unsupported method"):
            ToolCatalog([ToolDescriptor(name="x", method="TRACE", path="/x", description="")])

    def test_from_records_normalizes_method(self):
        catalog = ToolCatalog.from_records([{"name": "x", "method": "get", "path": "/x"}])
        descriptor = catalog.require("x")
        assert descriptor.method == "GET"
        assert descriptor.input_schema == {"type": "object"}

    def test_from_records_missing_field(self):
        with pytest.raises(CatalogError, match="#0"):
            ToolCatalog.from_records([{"name": "x", "method": "GET"}])

    def test_from_file_requires_array(self, tmp_path):
        path = tmp_path / "tools.json"
        path.write_text('{"name": "x"}')
        with pytest.raises(CatalogError, match="JSON array"):
            ToolCatalog.from_file(path)
