"""Photo feed domain service.

A pure reducer: given a feed snapshot and an event it returns the next
snapshot. Concurrency (stale responses, at-most-one fetch) is handled by the
controller that feeds events in.
"""

from datetime import datetime, timedelta, timezone

from atpark.domain.model.feed import (
    CreateFailed,
    FeedEvent,
    FeedState,
    FeedStatus,
    FetchStarted,
    PageFailed,
    PageLoaded,
    PhotoCreated,
)
from atpark.domain.model.photo import PhotoRecord
from atpark.domain.value import PHOTO_COLLECTION, Visibility

from .base import Service

PLACEHOLDER_DID = "did:plc:placeholder"


class FeedService(Service):
    """Domain service computing feed state transitions."""

    def __init__(self, placeholder_batch_size: int = 12) -> None:
        self.placeholder_batch_size = placeholder_batch_size

    def placeholders(self) -> tuple[PhotoRecord, ...]:
        """Synthetic photos shown when the repository cannot be reached."""
        now = datetime.now(timezone.utc)
        photos = []
        for i in range(1, self.placeholder_batch_size + 1):
            photos.append(
                PhotoRecord(
                    uri=f"at://{PLACEHOLDER_DID}/{PHOTO_COLLECTION}/photo-{i}",
                    author_did=PLACEHOLDER_DID,
                    image=f"https://picsum.photos/seed/photo-{i}/800/600",
                    tags=["dog", "park", f"tag{i}"],
                    location="Central Park",
                    visibility=Visibility.PUBLIC,
                    description=f"Placeholder photo #{i}",
                    created_at=(now - timedelta(days=i - 1))
                    .isoformat()
                    .replace("+00:00", "Z"),
                )
            )
        return tuple(photos)

    def reduce(self, state: FeedState, event: FeedEvent) -> FeedState:
        """Apply an event to a feed snapshot.

        Args:
            state: Current snapshot
            event: What happened

        Returns:
            The next snapshot

        Raises:
            TypeError: If the event type is unknown
        """
        if isinstance(event, FetchStarted):
            if event.reset:
                return FeedState(status=FeedStatus.LOADING)
            return state.model_copy(update={"status": FeedStatus.LOADING, "error": None})

        if isinstance(event, PageLoaded):
            held = set(state.uris)
            fresh = tuple(r for r in event.records if r.uri not in held)
            return state.model_copy(
                update={
                    "records": state.records + fresh,
                    "status": FeedStatus.LOADED,
                    "cursor": event.records[-1].rkey if event.records else state.cursor,
                    # A short page means the repository is exhausted
                    "has_more": len(event.records) > 0
                    and len(event.records) >= event.limit,
                }
            )

        if isinstance(event, PageFailed):
            records = state.records if state.records else event.placeholders
            return state.model_copy(
                update={
                    "records": records,
                    "status": FeedStatus.LOADED,
                    "has_more": False,
                    "degraded": True,
                    "degraded_reason": event.failure,
                }
            )

        if isinstance(event, PhotoCreated):
            rest = tuple(
                r
                for r in state.records
                if r.uri != event.record.uri and r.author_did != PLACEHOLDER_DID
            )
            return state.model_copy(
                update={
                    "records": (event.record,) + rest,
                    "status": state.status
                    if state.is_loading
                    else FeedStatus.LOADED,
                    "degraded": False,
                    "degraded_reason": None,
                    "error": None,
                }
            )

        if isinstance(event, CreateFailed):
            return state.model_copy(
                update={
                    "status": state.status if state.is_loading else FeedStatus.ERROR,
                    "error": event.failure.error,
                }
            )

        raise TypeError(f"Unknown feed event: {type(event).__name__}")
