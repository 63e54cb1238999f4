"""Bluesky infrastructure providers."""

from dishka import Scope, provide

from atpark.adapter.bluesky.client import HttpxAtProtoClient
from atpark.adapter.bluesky.session import InMemorySessionStore
from atpark.config import Settings
from atpark.domain.service import AtProtoClient, SessionStore
from atpark.util.di.base import ProviderBase


class BlueskyProvider(ProviderBase):
    """Bluesky component base."""

    __mock_component__ = "bluesky"


class ProdBlueskyProvider(BlueskyProvider):
    """Production Bluesky provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_atproto_client(self, settings: Settings) -> AtProtoClient:
        """Provide XRPC client for the configured entryway."""
        return HttpxAtProtoClient(
            service_url=settings.bluesky.service_url,
            timeout=settings.bluesky.timeout,
        )

    @provide(scope=Scope.APP)
    def get_session_store(self) -> SessionStore:
        """Provide the process-wide session store."""
        return InMemorySessionStore()
