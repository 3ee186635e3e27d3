"""Process configuration for the bridge, read once at startup."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from fub_bridge.constants import DEFAULT_BASE_URL, DEFAULT_HOST, DEFAULT_PORT

_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_TRUTHY = {"1", "true", "yes", "on"}


def load_env_file(path: Path = _ENV_FILE) -> None:
    """Apply ``KEY=VALUE`` lines from a .env file without overriding the real environment."""
    if not path.is_file():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            k, _, v = line.partition("=")
            os.environ.setdefault(k.strip(), v.strip())


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class BridgeSettings:
    """Immutable bridge configuration.

    ``system_name`` and ``system_key`` only take effect as a pair; with either
    one missing the ``X-System`` headers are omitted.
    """

    api_key: str = ""
    system_name: str = ""
    system_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    strict_path_params: bool = False
    sse_keepalive_seconds: float = 0.0

    @property
    def has_system_credentials(self) -> bool:
        return bool(self.system_name and self.system_key)

    @classmethod
    def from_env(cls) -> BridgeSettings:
        return cls(
            api_key=os.environ.get("FUB_API_KEY", ""),
            system_name=os.environ.get("FUB_SYSTEM_NAME", ""),
            system_key=os.environ.get("FUB_SYSTEM_KEY", ""),
            base_url=os.environ.get("FUB_BASE_URL", "").strip().rstrip("/") or DEFAULT_BASE_URL,
            host=os.environ.get("HOST", "").strip() or DEFAULT_HOST,
            port=_env_int("PORT", DEFAULT_PORT),
            log_level=os.environ.get("FUB_LOG_LEVEL", "").strip().upper() or "INFO",
            strict_path_params=(
                os.environ.get("FUB_STRICT_PATH_PARAMS", "").strip().lower() in _TRUTHY
            ),
            sse_keepalive_seconds=_env_float("FUB_SSE_KEEPALIVE_SECONDS", 0.0),
        )
