"""Unit tests for the object storage uploader."""

import httpx
import pytest

from atpark.adapter.storage.object_store import CHUNK_SIZE, HttpxObjectStorage
from atpark.domain.error import NetworkError, NetworkHop
from atpark.domain.model.upload import ImageFile, UploadGrant

UPLOAD_URL = "https://acct.r2.cloudflarestorage.com/photos/1-abc-dog.jpg?X-Amz-Signature=x"


def make_grant(content_type: str = "image/jpeg") -> UploadGrant:
    return UploadGrant(
        upload_url=UPLOAD_URL,
        public_url="https://images.example.com/1-abc-dog.jpg",
        key="1-abc-dog.jpg",
        content_type=content_type,
    )


def make_image(size: int = 1000) -> ImageFile:
    return ImageFile(filename="dog.jpg", content_type="image/jpeg", data=b"\xff" * size)


def storage_for(handler, **kwargs) -> HttpxObjectStorage:
    return HttpxObjectStorage(transport=httpx.MockTransport(handler), **kwargs)


class TestHttpxObjectStorage:
    """Tests for HttpxObjectStorage."""

    @pytest.mark.asyncio
    async def test_puts_bytes_with_granted_content_type(self):
        """The PUT should carry the raw bytes and the granted content type."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        image = make_image(3 * CHUNK_SIZE + 10)
        await storage_for(handler).put(make_grant(), image)

        request = seen[0]
        assert request.method == "PUT"
        assert str(request.url) == UPLOAD_URL
        assert request.headers["content-type"] == "image/jpeg"
        assert request.headers["content-length"] == str(image.size)
        assert request.content == image.data

    @pytest.mark.asyncio
    async def test_reports_monotonic_progress(self):
        """Progress should rise to 100 without going backwards."""
        progress: list[int] = []

        await storage_for(lambda request: httpx.Response(200)).put(
            make_grant(), make_image(3 * CHUNK_SIZE + 10), on_progress=progress.append
        )

        assert progress == sorted(progress)
        assert progress[-1] == 100
        assert all(0 <= p <= 100 for p in progress)

    @pytest.mark.asyncio
    async def test_any_2xx_is_success(self):
        """A 204 from storage is a successful upload."""
        await storage_for(lambda request: httpx.Response(204)).put(make_grant(), make_image())

    @pytest.mark.asyncio
    async def test_rejected_upload(self):
        """A non-2xx answer should be a network error on the upload hop."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, text="SignatureDoesNotMatch")

        with pytest.raises(NetworkError, match="403") as exc_info:
            await storage_for(handler).put(make_grant(), make_image())

        assert exc_info.value.hop == NetworkHop.BINARY_UPLOAD

    @pytest.mark.asyncio
    async def test_timeout(self):
        """A timeout should be reported distinctly."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.WriteTimeout("timed out", request=request)

        with pytest.raises(NetworkError, match="timed out"):
            await storage_for(handler).put(make_grant(), make_image())

    @pytest.mark.asyncio
    async def test_unreachable(self):
        """A connection failure should be reported distinctly."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(NetworkError, match="Failed to connect to image storage"):
            await storage_for(handler).put(make_grant(), make_image())


class TestUploadTimeout:
    """Tests for the size-scaled upload deadline."""

    def test_small_files_get_the_floor(self):
        """Files that upload quickly still get the full floor."""
        storage = HttpxObjectStorage(timeout_floor=30.0, min_throughput=1000)

        assert storage.timeout_for(1000) == 30.0

    def test_large_files_scale_with_size(self):
        """Large files get size / throughput seconds."""
        storage = HttpxObjectStorage(timeout_floor=30.0, min_throughput=1000)

        assert storage.timeout_for(120_000) == 120.0
