"""Unit tests for ImageService."""

import re

import pytest

from atpark.adapter.storage.broker import InMemoryUploadBroker
from atpark.adapter.storage.object_store import InMemoryObjectStorage
from atpark.domain.error import NetworkError, NetworkHop
from atpark.domain.model.upload import ImageFile, UploadGrant
from atpark.domain.service import ImageService, ObjectStorage, UploadBroker
from atpark.domain.service.image_service import ProgressReporter
from atpark.domain.value import ErrorKind, Failure, Success
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked, no network needed
unit_env = create_env_fixture()


def make_image(filename: str = "dog.jpg", size: int = 2 * 1024 * 1024) -> ImageFile:
    return ImageFile(filename=filename, content_type="image/jpeg", data=b"\xff" * size)


class TestUploadImage:
    """Tests for upload_image method."""

    @pytest.mark.asyncio
    async def test_upload_returns_public_url(self, unit_env):
        """A 2MB JPEG ends up at the broker's public URL."""
        # Arrange
        service = await unit_env.get(ImageService)
        broker: InMemoryUploadBroker = await unit_env.get(UploadBroker)
        storage: InMemoryObjectStorage = await unit_env.get(ObjectStorage)

        # Act
        result = await service.upload_image(make_image())

        # Assert
        assert isinstance(result, Success)
        grant = broker.grants[0]
        assert re.fullmatch(r"\d+-[a-z0-9]+-dog\.jpg", grant.key)
        assert result.data.url == grant.public_url
        assert result.data.key == grant.key
        assert storage.objects[grant.key] == ("image/jpeg", b"\xff" * 2 * 1024 * 1024)

    @pytest.mark.asyncio
    async def test_progress_ends_at_100(self, unit_env):
        """Progress is non-decreasing and finishes at 100."""
        service = await unit_env.get(ImageService)
        progress: list[int] = []

        result = await service.upload_image(make_image(), on_progress=progress.append)

        assert isinstance(result, Success)
        assert progress == sorted(progress)
        assert progress[-1] == 100

    @pytest.mark.asyncio
    async def test_grant_failure_skips_upload(self, unit_env):
        """A failed grant is reported with its hop and nothing is uploaded."""
        service = await unit_env.get(ImageService)
        broker: InMemoryUploadBroker = await unit_env.get(UploadBroker)
        storage: InMemoryObjectStorage = await unit_env.get(ObjectStorage)
        broker.fail_next(
            NetworkError(
                "Request timed out. The upload broker may be unavailable.",
                hop=NetworkHop.BROKER_GRANT,
            )
        )

        result = await service.upload_image(make_image())

        assert isinstance(result, Failure)
        assert result.kind == ErrorKind.NETWORK
        assert result.hop == NetworkHop.BROKER_GRANT
        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_upload_failure_is_tagged_with_upload_hop(self, unit_env):
        """A failed PUT names the binary upload hop."""
        service = await unit_env.get(ImageService)
        storage: InMemoryObjectStorage = await unit_env.get(ObjectStorage)
        storage.fail_next(
            NetworkError("Failed to upload image to storage", hop=NetworkHop.BINARY_UPLOAD)
        )

        result = await service.upload_image(make_image())

        assert isinstance(result, Failure)
        assert result.hop == NetworkHop.BINARY_UPLOAD

    @pytest.mark.asyncio
    async def test_rejects_non_https_public_url(self, unit_env):
        """A grant whose public URL is not HTTPS cannot back a record."""
        service = await unit_env.get(ImageService)
        broker: InMemoryUploadBroker = await unit_env.get(UploadBroker)
        broker.public_bucket_url = "http://images.example.com"

        result = await service.upload_image(make_image())

        assert isinstance(result, Failure)
        assert result.kind == ErrorKind.PROTOCOL
        assert result.hop == NetworkHop.BROKER_GRANT

    @pytest.mark.asyncio
    async def test_rejects_content_type_mismatch(self, unit_env):
        """The upload must use the type the grant was issued for."""
        service = await unit_env.get(ImageService)
        broker = await unit_env.get(UploadBroker)

        async def wrong_type(filename: str, content_type: str) -> UploadGrant:
            return UploadGrant(
                upload_url="https://upload.mock.test/k",
                public_url="https://images.example.com/k",
                key="k",
                content_type="image/png",
            )

        broker.get_upload_url = wrong_type

        result = await service.upload_image(make_image())

        assert isinstance(result, Failure)
        assert result.kind == ErrorKind.PROTOCOL


class TestGetUploadUrl:
    """Tests for get_upload_url method."""

    @pytest.mark.asyncio
    async def test_missing_fields_fail_without_network(self, unit_env):
        """Empty filename or content type is rejected locally."""
        service = await unit_env.get(ImageService)
        broker: InMemoryUploadBroker = await unit_env.get(UploadBroker)

        result = await service.get_upload_url("", "image/jpeg")

        assert isinstance(result, Failure)
        assert result.kind == ErrorKind.VALIDATION
        assert broker.grants == []

    @pytest.mark.asyncio
    async def test_returns_grant(self, unit_env):
        """A grant is returned for valid input."""
        service = await unit_env.get(ImageService)

        result = await service.get_upload_url("dog.jpg", "image/jpeg")

        assert isinstance(result, Success)
        assert result.data.content_type == "image/jpeg"


class TestGenerateThumbnail:
    """Tests for generate_thumbnail method."""

    @pytest.mark.asyncio
    async def test_uploads_separate_object(self, unit_env):
        """The thumbnail is stored under its own key."""
        service = await unit_env.get(ImageService)

        image = await service.upload_image(make_image(size=10))
        thumbnail = await service.generate_thumbnail(make_image(size=10))

        assert isinstance(thumbnail, Success)
        assert thumbnail.data.key != image.data.key
        assert thumbnail.data.key.endswith("-thumb_dog.jpg")


class TestProgressReporter:
    """Tests for ProgressReporter."""

    def test_clamps_and_drops_regressions(self):
        """Values are clamped to [0, 100] and never go backwards."""
        seen: list[int] = []
        reporter = ProgressReporter(seen.append)

        for value in (-5, 10, 5, 40, 40, 250):
            reporter(value)
        reporter.complete()

        assert seen == [0, 10, 40, 100]

    def test_without_callback(self):
        """A reporter without a callback is silent."""
        reporter = ProgressReporter(None)

        reporter(50)
        reporter.complete()

        assert reporter.last == 100
