"""Unit tests for RetagPhotoUseCase."""

import pytest

from atpark.application.controller.feed import PhotoFeedController
from atpark.application.usecase.photo import RetagPhotoRequest, RetagPhotoUseCase
from atpark.domain.service import SessionService
from atpark.domain.value import Failure, Success
from tests.conftest import make_draft
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked, no network needed
unit_env = create_env_fixture()


class TestRetagPhotoUseCase:
    """Tests for RetagPhotoUseCase."""

    @pytest.mark.asyncio
    async def test_retag_publishes_new_record(self, unit_env):
        """Retagging appends a new record and keeps the original."""
        # Arrange
        session_service = await unit_env.get(SessionService)
        await session_service.login("alice.test", "hunter2")
        original = (
            await session_service.create_photo(
                make_draft(tags=["dog"], location="Central Park")
            )
        ).data
        use_case = await unit_env.get(RetagPhotoUseCase)
        feed = await unit_env.get(PhotoFeedController)

        # Act
        result = await use_case.execute(
            RetagPhotoRequest(photo=original, tags=["dog", " park ", ""])
        )

        # Assert
        assert isinstance(result, Success)
        retagged = result.data
        assert retagged.uri != original.uri
        assert retagged.tags == ["dog", "park"]
        assert retagged.image == original.image
        assert retagged.location == "Central Park"
        assert feed.state.uris == [retagged.uri, original.uri]

    @pytest.mark.asyncio
    async def test_failure_leaves_feed_untouched(self, unit_env):
        """A failed retag does not refresh the feed."""
        session_service = await unit_env.get(SessionService)
        await session_service.login("alice.test", "hunter2")
        original = (await session_service.create_photo(make_draft())).data
        await session_service.logout()
        use_case = await unit_env.get(RetagPhotoUseCase)
        feed = await unit_env.get(PhotoFeedController)

        result = await use_case.execute(RetagPhotoRequest(photo=original, tags=["cat"]))

        assert isinstance(result, Failure)
        assert feed.state.records == ()
