"""Normalization of raw upstream responses into the ``tool_response`` envelope.

Nothing in this module raises: every raw response yields a body value.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from fub_bridge.clients.followupboss import RawUpstreamResponse


def _reject_constant(name: str) -> Any:
    # NaN / Infinity are not JSON.
    raise ValueError(f"Invalid JSON constant {name}")


def parse_json_strict(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def normalize_body(text: str, status: int, status_text: str) -> Any:
    """Parsed JSON if the text is JSON, else the raw text, else ``"<status> <reason>"``."""
    try:
        return parse_json_strict(text)
    except ValueError:
        return text or f"{status} {status_text}"


@dataclass(frozen=True)
class UpstreamResult:
    status: int
    status_text: str
    body: Any

    def to_envelope(self) -> dict[str, Any]:
        return {
            "tool_response": {
                "status": self.status,
                "statusText": self.status_text,
                "data": self.body,
            }
        }


def build_result(raw: RawUpstreamResponse) -> UpstreamResult:
    return UpstreamResult(
        status=raw.status,
        status_text=raw.status_text,
        body=normalize_body(raw.text, raw.status, raw.status_text),
    )
