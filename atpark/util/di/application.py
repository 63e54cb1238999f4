"""Application layer DI providers."""

from dishka import Scope, provide

from atpark.application.controller.auth import AuthSessionController
from atpark.application.controller.feed import PhotoFeedController
from atpark.application.usecase.photo import PublishPhotoUseCase, RetagPhotoUseCase
from atpark.config import FeedSettings
from atpark.domain.service import FeedService, ImageService, SessionService
from atpark.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production controllers and use cases provider - concrete, no mocks needed."""

    scope = Scope.APP

    @provide
    def get_feed_controller(
        self,
        session_service: SessionService,
        feed_service: FeedService,
        feed: FeedSettings,
    ) -> PhotoFeedController:
        """Provide photo feed controller."""
        return PhotoFeedController(
            session_service=session_service,
            feed_service=feed_service,
            page_size=feed.page_size,
        )

    @provide
    def get_auth_controller(self, session_service: SessionService) -> AuthSessionController:
        """Provide auth session controller."""
        return AuthSessionController(session_service=session_service)

    @provide
    def get_publish_photo_use_case(
        self,
        image_service: ImageService,
        feed_controller: PhotoFeedController,
    ) -> PublishPhotoUseCase:
        """Provide publish photo use case."""
        return PublishPhotoUseCase(
            image_service=image_service,
            feed_controller=feed_controller,
        )

    @provide
    def get_retag_photo_use_case(
        self,
        session_service: SessionService,
        feed_controller: PhotoFeedController,
    ) -> RetagPhotoUseCase:
        """Provide retag photo use case."""
        return RetagPhotoUseCase(
            session_service=session_service,
            feed_controller=feed_controller,
        )
