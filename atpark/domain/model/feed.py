"""Photo feed state and the events that move it.

The feed is an ordered, cursor-paginated view over one author's photos,
newest first in repository insertion order. Every change is expressed as an
event applied to an immutable ``FeedState`` snapshot.
"""

from enum import Enum

from atpark.domain.model.common import DomainModel
from atpark.domain.model.photo import PhotoRecord
from atpark.domain.value import Failure


class FeedStatus(str, Enum):
    """Lifecycle of the feed."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class FeedState(DomainModel):
    """Snapshot of the feed.

    Attributes:
        records: Photos in display order
        status: Current lifecycle state
        cursor: Continuation token for the next page (rkey of the last record)
        has_more: Whether another page may exist
        degraded: Showing a local synthetic feed because a fetch failed
        degraded_reason: The failure that triggered degraded mode
        error: Last create failure message, surfaced inline by forms
    """

    records: tuple[PhotoRecord, ...] = ()
    status: FeedStatus = FeedStatus.IDLE
    cursor: str | None = None
    has_more: bool = True
    degraded: bool = False
    degraded_reason: Failure | None = None
    error: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.status == FeedStatus.LOADING

    @property
    def uris(self) -> list[str]:
        return [record.uri for record in self.records]

    def find(self, uri: str) -> PhotoRecord | None:
        """Find a held record by URI."""
        return next((record for record in self.records if record.uri == uri), None)


class FeedEvent(DomainModel):
    """Base class for feed events."""

    pass


class FetchStarted(FeedEvent):
    """A page fetch was issued; ``reset`` clears the feed first."""

    reset: bool


class PageLoaded(FeedEvent):
    """A page of records arrived for a request of ``limit`` records."""

    records: tuple[PhotoRecord, ...]
    limit: int


class PageFailed(FeedEvent):
    """A page fetch failed; ``placeholders`` is the synthetic fallback batch."""

    failure: Failure
    placeholders: tuple[PhotoRecord, ...]


class PhotoCreated(FeedEvent):
    """The repository confirmed a new record."""

    record: PhotoRecord


class CreateFailed(FeedEvent):
    """Publishing a record failed."""

    failure: Failure
