"""Async Follow Up Boss API client.

Sends one compiled request and hands back the status line and body text
untouched.  Only transport failures are errors here; any HTTP status the
upstream returns, including 4xx/5xx, is a normal response.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import aiohttp
from yarl import URL

from fub_bridge.compiler import CompiledRequest

logger = logging.getLogger(__name__)


class UpstreamTransportError(RuntimeError):
    """Raised when the upstream call could not complete (DNS, connect, TLS, timeout)."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


@dataclass(frozen=True)
class RawUpstreamResponse:
    status: int
    status_text: str
    text: str


class FollowUpBossClient:
    """Async client executing :class:`CompiledRequest` values against the upstream.

    Use as an async context manager; the session is shared by all requests
    made while the client is entered.
    """

    def __init__(self, *, timeout: aiohttp.ClientTimeout | None = None) -> None:
        self.session: aiohttp.ClientSession | None = None
        self._timeout = timeout

    async def __aenter__(self) -> FollowUpBossClient:
        if self._timeout is not None:
            self.session = aiohttp.ClientSession(timeout=self._timeout)
        else:
            self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self.session:
            await self.session.close()
            self.session = None

    async def send(self, request: CompiledRequest) -> RawUpstreamResponse:
        if not self.session:
            raise RuntimeError("Client not entered as context manager")

        data = request.body.encode("utf-8") if request.body is not None else None
        try:
            async with self.session.request(
                request.method,
                URL(request.url, encoded=True),
                headers=request.headers,
                data=data,
            ) as resp:
                text = await resp.text(errors="replace")
                return RawUpstreamResponse(
                    status=resp.status,
                    status_text=resp.reason or "",
                    text=text,
                )
        except TimeoutError as exc:
            logger.error("Follow Up Boss request timed out (%s %s)", request.method, request.url)
            raise UpstreamTransportError(
                "Follow Up Boss request timed out.",
                code="TIMEOUT",
                details={"method": request.method, "url": request.url},
            ) from exc
        except (aiohttp.ClientError, ValueError) as exc:
            logger.error(
                "Follow Up Boss client error (%s %s): %s", request.method, request.url, exc
            )
            raise UpstreamTransportError(
                str(exc) or exc.__class__.__name__,
                code="NETWORK_ERROR",
                details={"method": request.method, "url": request.url, "error": str(exc)},
            ) from exc
