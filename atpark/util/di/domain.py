"""Domain layer DI providers."""

from dishka import Scope, provide

from atpark.config import FeedSettings
from atpark.domain.service import (
    AtProtoClient,
    FeedService,
    ImageService,
    ObjectStorage,
    SessionService,
    SessionStore,
    UploadBroker,
)
from atpark.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are APP-scoped: the session service owns the one live
    session for the whole process.
    """

    scope = Scope.APP

    @provide
    def get_session_service(
        self, client: AtProtoClient, session_store: SessionStore
    ) -> SessionService:
        """Provide session/repository domain service."""
        return SessionService(client=client, session_store=session_store)

    @provide
    def get_image_service(
        self, broker: UploadBroker, storage: ObjectStorage
    ) -> ImageService:
        """Provide image publishing domain service."""
        return ImageService(broker=broker, storage=storage)

    @provide
    def get_feed_service(self, feed: FeedSettings) -> FeedService:
        """Provide feed reducer."""
        return FeedService(placeholder_batch_size=feed.placeholder_batch_size)
