"""Photo use cases."""

from .publish_photo import PublishPhotoRequest, PublishPhotoUseCase
from .retag_photo import RetagPhotoRequest, RetagPhotoUseCase

__all__ = [
    "PublishPhotoRequest",
    "PublishPhotoUseCase",
    "RetagPhotoRequest",
    "RetagPhotoUseCase",
]
