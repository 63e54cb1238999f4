"""Domain services."""

from .base import Service
from .feed_service import FeedService
from .image_service import ImageService, ObjectStorage, ProgressCallback, UploadBroker
from .session_service import (
    AtProtoClient,
    RecordPage,
    RepoRecord,
    SessionService,
    SessionStore,
)

__all__ = [
    "AtProtoClient",
    "FeedService",
    "ImageService",
    "ObjectStorage",
    "ProgressCallback",
    "RecordPage",
    "RepoRecord",
    "Service",
    "SessionService",
    "SessionStore",
    "UploadBroker",
]
