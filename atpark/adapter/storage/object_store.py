"""Binary upload to presigned object storage URLs."""

import logging
from collections.abc import AsyncIterator

import httpx

from atpark.domain.error import NetworkError, NetworkHop
from atpark.domain.model.upload import ImageFile, UploadGrant
from atpark.domain.service.image_service import ObjectStorage, ProgressCallback

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class HttpxObjectStorage(ObjectStorage):
    """PUT image bytes to a presigned URL with httpx."""

    def __init__(
        self,
        timeout_floor: float = 30.0,
        min_throughput: int = 256 * 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize uploader.

        Args:
            timeout_floor: Minimum upload deadline, in seconds
            min_throughput: Slowest acceptable rate in bytes per second;
                larger files get proportionally longer deadlines
            transport: Optional httpx transport (used by tests)
        """
        self._timeout_floor = timeout_floor
        self._min_throughput = min_throughput
        self._transport = transport

    def timeout_for(self, size: int) -> float:
        """Upload deadline for a body of ``size`` bytes."""
        return max(self._timeout_floor, size / self._min_throughput)

    async def put(
        self,
        grant: UploadGrant,
        image: ImageFile,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Upload the image bytes.

        Raises:
            NetworkError: If storage is unreachable, times out or answers non-2xx
        """
        timeout = self.timeout_for(image.size)
        logger.debug(f"Uploading {image.size} bytes to storage for {grant.key} (timeout {timeout}s)")

        headers = {
            "Content-Type": grant.content_type,
            "Content-Length": str(image.size),
        }

        try:
            async with httpx.AsyncClient(
                timeout=timeout, transport=self._transport
            ) as client:
                response = await client.put(
                    grant.upload_url,
                    content=self._stream(image.data, on_progress),
                    headers=headers,
                )
        except httpx.TimeoutException as e:
            logger.error(f"Storage upload timed out after {timeout}s for {grant.key}")
            raise NetworkError(
                "Image upload timed out. Try a smaller file or a faster connection.",
                hop=NetworkHop.BINARY_UPLOAD,
            ) from e
        except httpx.TransportError as e:
            logger.error(f"Network error during storage upload: {e}")
            raise NetworkError(
                "Network error: Failed to connect to image storage.",
                hop=NetworkHop.BINARY_UPLOAD,
            ) from e

        if not response.is_success:
            logger.error(
                f"Storage upload failed (status {response.status_code}): {response.text}"
            )
            raise NetworkError(
                f"Failed to upload image to storage: {response.status_code} {response.reason_phrase}",
                hop=NetworkHop.BINARY_UPLOAD,
            )

        logger.info(f"Uploaded {grant.key} ({image.size} bytes)")

    @staticmethod
    async def _stream(
        data: bytes, on_progress: ProgressCallback | None
    ) -> AsyncIterator[bytes]:
        """Yield the body in chunks, reporting percent sent after each."""
        total = len(data)
        for offset in range(0, total, CHUNK_SIZE):
            chunk = data[offset : offset + CHUNK_SIZE]
            yield chunk
            if on_progress is not None:
                on_progress((offset + len(chunk)) * 100 // total)


# Mock implementation for testing
class InMemoryObjectStorage(ObjectStorage):
    """Object storage keeping uploaded bytes in a dict keyed by object key."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[str, bytes]] = {}
        self._failures: list[Exception] = []

    def fail_next(self, error: Exception) -> None:
        """Make the next upload raise ``error``."""
        self._failures.append(error)

    async def put(
        self,
        grant: UploadGrant,
        image: ImageFile,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        if self._failures:
            raise self._failures.pop(0)

        if on_progress is not None:
            on_progress(50)
        self.objects[grant.key] = (grant.content_type, image.data)
        if on_progress is not None:
            on_progress(100)
