#!/usr/bin/env python3
"""CI enforcement: lint the bundled tool catalog.

Fails when a tool name repeats, a method is unsupported, or a ``:placeholder``
in a path template is not declared in the tool's inputSchema properties.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from fub_bridge.compiler import path_placeholders
from fub_bridge.constants import TOOL_METHODS

TARGET_FILE = Path(__file__).resolve().parent.parent / "fub_bridge" / "data" / "tools.json"


def check(path: Path = TARGET_FILE) -> list[str]:
    violations: list[str] = []
    try:
        records = json.loads(path.read_text())
    except (ValueError, FileNotFoundError) as exc:
        print(f"ERROR: cannot parse {path}: {exc}", file=sys.stderr)
        return [f"{path.name}: unreadable"]

    seen: set[str] = set()
    for i, record in enumerate(records):
        name = record.get("name", f"#{i}")
        if name in seen:
            violations.append(f"{name}: duplicate tool name")
        seen.add(name)

        if record.get("method") not in TOOL_METHODS:
            violations.append(f"{name}: unsupported method {record.get('method')!r}")

        properties = (record.get("inputSchema") or {}).get("properties") or {}
        for key in path_placeholders(record.get("path", "")):
            if key not in properties:
                violations.append(f"{name}: path placeholder ':{key}' not in inputSchema")
    return violations


def main() -> None:
    violations = check()
    if violations:
        print("ERROR: tool catalog problems found:")
        for v in violations:
            print(f"  {v}")
        sys.exit(1)
    else:
        print("OK: tool catalog is consistent")


if __name__ == "__main__":
    main()
