"""Publish photo use case."""

import logfire
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from atpark.application.controller.feed import PhotoFeedController
from atpark.domain.model.photo import PhotoDraft, PhotoRecord, normalize_tags
from atpark.domain.model.upload import ImageFile
from atpark.domain.service import ImageService, ProgressCallback
from atpark.domain.value import Result, Success, Visibility


class PublishPhotoRequest(BaseModel):
    """Publish photo request."""

    image: ImageFile
    tags: list[str] = Field(default_factory=list)
    description: str | None = None
    location: str | None = None
    visibility: Visibility = Visibility.PUBLIC


class PublishPhotoUseCase:
    """Use case for uploading an image and publishing its photo record."""

    def __init__(
        self,
        image_service: ImageService,
        feed_controller: PhotoFeedController,
    ) -> None:
        """Initialize publish photo use case.

        Args:
            image_service: Image publisher
            feed_controller: Feed the new record is prepended to
        """
        self.image_service = image_service
        self.feed_controller = feed_controller

    async def execute(
        self,
        request: PublishPhotoRequest,
        on_progress: ProgressCallback | None = None,
    ) -> Result[PhotoRecord]:
        """Execute publish flow.

        Steps:
        1. Upload the image (broker grant, then PUT to storage)
        2. Upload the thumbnail; on failure the image URL stands in for it
        3. Create the record through the feed controller

        Args:
            request: Image and photo metadata
            on_progress: Progress of the main image upload

        Returns:
            The published record, or the first failure
        """
        with logfire.span(
            "publish_photo.execute",
            filename=request.image.filename,
            size=request.image.size,
        ):
            uploaded = await self.image_service.upload_image(request.image, on_progress)
            if not isinstance(uploaded, Success):
                return uploaded

            thumbnail = await self.image_service.generate_thumbnail(request.image)
            if isinstance(thumbnail, Success):
                thumbnail_url = thumbnail.data.url
            else:
                logfire.warn(
                    "Thumbnail upload failed, using image as thumbnail",
                    error=thumbnail.error,
                )
                thumbnail_url = uploaded.data.url

            draft = PhotoDraft(
                image=uploaded.data.url,
                thumbnail=thumbnail_url,
                tags=normalize_tags(request.tags),
                description=request.description or None,
                location=request.location or None,
                visibility=request.visibility,
                created_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            )

            result = await self.feed_controller.create_photo(draft)
            if isinstance(result, Success):
                logfire.info("Photo published", uri=result.data.uri)
            return result
