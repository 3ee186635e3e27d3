"""Upstream API clients."""

from fub_bridge.clients.followupboss import (
    FollowUpBossClient,
    RawUpstreamResponse,
    UpstreamTransportError,
)

__all__ = [
    "FollowUpBossClient",
    "RawUpstreamResponse",
    "UpstreamTransportError",
]
