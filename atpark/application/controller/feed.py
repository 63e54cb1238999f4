"""Photo feed controller."""

import logfire

from atpark.domain.model.feed import (
    CreateFailed,
    FeedEvent,
    FeedState,
    FetchStarted,
    PageFailed,
    PageLoaded,
    PhotoCreated,
)
from atpark.domain.model.photo import PhotoDraft, PhotoRecord
from atpark.domain.service import FeedService, SessionService
from atpark.domain.value import Result, Success


class PhotoFeedController:
    """Owns the feed snapshot and drives it with session service calls.

    All mutations go through ``FeedService.reduce``. Concurrency rules:

    - at most one page fetch is in flight (``load_more`` is a no-op while loading)
    - the latest ``refresh`` wins: pages from older generations are discarded
    - records confirmed by ``create_photo`` are never dropped by a later page
    """

    def __init__(
        self,
        session_service: SessionService,
        feed_service: FeedService,
        page_size: int = 50,
    ) -> None:
        """Initialize feed controller.

        Args:
            session_service: Repository access for the current account
            feed_service: Feed state reducer
            page_size: Records requested per page
        """
        self.session_service = session_service
        self.feed_service = feed_service
        self.page_size = page_size
        self._state = FeedState()
        self._generation = 0

    @property
    def state(self) -> FeedState:
        """Current feed snapshot."""
        return self._state

    async def refresh(self) -> bool:
        """Reset the feed and fetch the first page.

        Returns:
            True if this call's page was applied, False if a newer refresh superseded it
        """
        self._generation += 1
        generation = self._generation
        self._apply(FetchStarted(reset=True))
        return await self._fetch(generation, cursor=None)

    async def load_more(self) -> bool:
        """Fetch the next page.

        Returns:
            True if a page was fetched and applied
        """
        state = self._state
        if state.is_loading or not state.has_more or state.degraded:
            return False

        self._apply(FetchStarted(reset=False))
        return await self._fetch(self._generation, cursor=state.cursor)

    async def create_photo(self, draft: PhotoDraft) -> Result[PhotoRecord]:
        """Publish a photo and prepend it to the feed on success."""
        result = await self.session_service.create_photo(draft)

        if isinstance(result, Success):
            self._apply(PhotoCreated(record=result.data))
        else:
            self._apply(CreateFailed(failure=result))
        return result

    async def _fetch(self, generation: int, cursor: str | None) -> bool:
        with logfire.span(
            "feed_controller.fetch",
            generation=generation,
            cursor=cursor,
            page_size=self.page_size,
        ):
            result = await self.session_service.list_photos(self.page_size, cursor)

            if generation != self._generation:
                logfire.info(
                    "Discarding stale feed page",
                    generation=generation,
                    current=self._generation,
                )
                return False

            if isinstance(result, Success):
                self._apply(PageLoaded(records=tuple(result.data), limit=self.page_size))
                logfire.info(
                    "Feed page loaded",
                    count=len(result.data),
                    has_more=self._state.has_more,
                )
            else:
                logfire.warn(
                    "Feed fetch failed, showing degraded feed",
                    kind=result.kind.value,
                    error=result.error,
                )
                self._apply(
                    PageFailed(failure=result, placeholders=self.feed_service.placeholders())
                )
            return True

    def _apply(self, event: FeedEvent) -> None:
        self._state = self.feed_service.reduce(self._state, event)
