"""Image publishing domain service.

Uploads go through two hops: the broker issues a single-use write URL, then
the bytes are PUT straight to object storage. The result is a public HTTPS
URL that photo records can reference.
"""

from collections.abc import Callable

import logfire

from atpark.domain.error import DomainError, NetworkHop, ProtocolError, ValidationError
from atpark.domain.model.upload import ImageFile, UploadedImage, UploadGrant
from atpark.domain.value import Failure, Result, Success

from .base import Service

ProgressCallback = Callable[[int], None]


class UploadBroker:
    """Interface for the service that issues presigned upload URLs."""

    async def get_upload_url(self, filename: str, content_type: str) -> UploadGrant:
        """Request a write grant for one object.

        Args:
            filename: Client filename, used as the object key suffix
            content_type: MIME type the grant is signed for

        Returns:
            Grant with the write URL, public URL and object key
        """
        raise NotImplementedError


class ObjectStorage:
    """Interface for the binary upload to object storage."""

    async def put(
        self,
        grant: UploadGrant,
        image: ImageFile,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Upload ``image`` to the grant's write URL.

        The upload must send ``grant.content_type`` exactly.
        """
        raise NotImplementedError


class ProgressReporter:
    """Forward upload progress as non-decreasing percentages in [0, 100]."""

    def __init__(self, callback: ProgressCallback | None) -> None:
        self.callback = callback
        self.last = -1

    def __call__(self, percent: int) -> None:
        percent = max(0, min(100, int(percent)))
        if percent <= self.last:
            return
        self.last = percent
        if self.callback is not None:
            self.callback(percent)

    def complete(self) -> None:
        self(100)


class ImageService(Service):
    """Domain service for publishing images to object storage."""

    def __init__(self, broker: UploadBroker, storage: ObjectStorage) -> None:
        """Initialize image service.

        Args:
            broker: Client for the upload broker
            storage: Binary uploader for presigned URLs
        """
        self.broker = broker
        self.storage = storage

    async def get_upload_url(self, filename: str, content_type: str) -> Result[UploadGrant]:
        """Request a presigned upload URL from the broker.

        Args:
            filename: Client filename
            content_type: MIME type of the file

        Returns:
            The upload grant
        """
        with logfire.span(
            "image_service.get_upload_url",
            filename=filename,
            content_type=content_type,
        ):
            try:
                grant = await self._request_grant(filename, content_type)
            except DomainError as e:
                logfire.warn("Upload grant failed", filename=filename, error=str(e))
                return Failure.from_error(e)

            return Success(data=grant)

    async def upload_image(
        self, image: ImageFile, on_progress: ProgressCallback | None = None
    ) -> Result[UploadedImage]:
        """Upload an image and return its public URL.

        Args:
            image: File to upload
            on_progress: Receives non-decreasing percentages, ending at 100

        Returns:
            Public URL and object key of the stored image
        """
        with logfire.span(
            "image_service.upload_image",
            filename=image.filename,
            content_type=image.content_type,
            size=image.size,
        ):
            progress = ProgressReporter(on_progress)
            try:
                grant = await self._request_grant(image.filename, image.content_type)
                await self.storage.put(grant, image, on_progress=progress)
            except DomainError as e:
                logfire.error(
                    "Image upload failed",
                    filename=image.filename,
                    hop=e.hop.value if e.hop else None,
                    error=str(e),
                )
                return Failure.from_error(e)

            progress.complete()
            logfire.info("Image uploaded", key=grant.key, url=grant.public_url)
            return Success(data=UploadedImage(url=grant.public_url, key=grant.key))

    async def generate_thumbnail(
        self, image: ImageFile, on_progress: ProgressCallback | None = None
    ) -> Result[UploadedImage]:
        """Upload a thumbnail for ``image``.

        No resizing happens: the original bytes are uploaded under a
        ``thumb_`` prefixed name.
        """
        thumbnail = image.model_copy(update={"filename": f"thumb_{image.filename}"})
        return await self.upload_image(thumbnail, on_progress)

    async def _request_grant(self, filename: str, content_type: str) -> UploadGrant:
        """Ask the broker for a grant and check what came back.

        Raises:
            ValidationError: If filename or content type is empty
            ProtocolError: If the grant is unusable
            DomainError: Whatever the broker client raises
        """
        if not filename or not content_type:
            raise ValidationError("Missing required fields: filename and contentType")

        grant = await self.broker.get_upload_url(filename, content_type)

        if grant.content_type != content_type:
            raise ProtocolError(
                f"Upload grant is for {grant.content_type}, expected {content_type}",
                hop=NetworkHop.BROKER_GRANT,
            )
        if not grant.public_url.startswith("https://"):
            raise ProtocolError(
                "Upload broker returned a non-HTTPS public URL",
                hop=NetworkHop.BROKER_GRANT,
            )
        return grant
