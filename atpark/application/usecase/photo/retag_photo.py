"""Retag photo use case."""

import logfire

from pydantic import BaseModel

from atpark.application.controller.feed import PhotoFeedController
from atpark.domain.model.photo import PhotoRecord, normalize_tags
from atpark.domain.service import SessionService
from atpark.domain.value import Result, Success


class RetagPhotoRequest(BaseModel):
    """Retag photo request."""

    photo: PhotoRecord
    tags: list[str]


class RetagPhotoUseCase:
    """Use case for changing a photo's tags.

    Records are append-only, so the new tags are published as a brand-new
    record copying every other field. The original record stays in the
    repository and the feed is refreshed to show both.
    """

    def __init__(
        self,
        session_service: SessionService,
        feed_controller: PhotoFeedController,
    ) -> None:
        self.session_service = session_service
        self.feed_controller = feed_controller

    async def execute(self, request: RetagPhotoRequest) -> Result[PhotoRecord]:
        with logfire.span("retag_photo.execute", uri=request.photo.uri, tags=request.tags):
            draft = request.photo.to_draft(tags=normalize_tags(request.tags))

            result = await self.session_service.create_photo(draft)
            if isinstance(result, Success):
                logfire.info(
                    "Photo retagged as new record",
                    original=request.photo.uri,
                    uri=result.data.uri,
                )
                await self.feed_controller.refresh()
            return result
