"""Domain model entities for AT Park."""

from atpark.domain.model.auth import AuthState, AuthStatus
from atpark.domain.model.feed import FeedState, FeedStatus
from atpark.domain.model.photo import PhotoDraft, PhotoRecord, normalize_tags
from atpark.domain.model.session import Session
from atpark.domain.model.share import Share
from atpark.domain.model.upload import ImageFile, UploadedImage, UploadGrant
from atpark.domain.model.user import User

__all__ = [
    "AuthState",
    "AuthStatus",
    "FeedState",
    "FeedStatus",
    "ImageFile",
    "PhotoDraft",
    "PhotoRecord",
    "Session",
    "Share",
    "UploadGrant",
    "UploadedImage",
    "User",
    "normalize_tags",
]
