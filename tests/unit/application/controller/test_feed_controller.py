"""Unit tests for PhotoFeedController."""

import asyncio

import pytest

from atpark.adapter.bluesky.client import MockAtProtoClient
from atpark.application.controller.feed import PhotoFeedController
from atpark.domain.error import NetworkError, NetworkHop
from atpark.domain.model.feed import FeedStatus
from atpark.domain.service import AtProtoClient, FeedService, SessionService
from atpark.domain.value import ErrorKind, Failure, Success
from tests.conftest import make_draft
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked, no network needed
unit_env = create_env_fixture()


async def setup_feed(
    unit_env, photos: int = 0, page_size: int = 3
) -> tuple[PhotoFeedController, SessionService, MockAtProtoClient]:
    """Log in, seed the repository and build a controller with a small page."""
    session_service = await unit_env.get(SessionService)
    client = await unit_env.get(AtProtoClient)
    await session_service.login("alice.test", "hunter2")
    for i in range(photos):
        await session_service.create_photo(make_draft(image=f"https://cdn.example/{i}.jpg"))

    controller = PhotoFeedController(
        session_service=session_service,
        feed_service=await unit_env.get(FeedService),
        page_size=page_size,
    )
    return controller, session_service, client


def network_error() -> NetworkError:
    return NetworkError("Request timed out", hop=NetworkHop.REPOSITORY)


class TestRefresh:
    """Tests for refresh method."""

    @pytest.mark.asyncio
    async def test_loads_first_page(self, unit_env):
        """Refresh shows the newest page."""
        # Arrange
        controller, _, _ = await setup_feed(unit_env, photos=5)

        # Act
        applied = await controller.refresh()

        # Assert
        state = controller.state
        assert applied is True
        assert state.status == FeedStatus.LOADED
        assert [r.image for r in state.records] == [
            "https://cdn.example/4.jpg",
            "https://cdn.example/3.jpg",
            "https://cdn.example/2.jpg",
        ]
        assert state.has_more is True
        assert state.cursor == state.records[-1].rkey

    @pytest.mark.asyncio
    async def test_default_page_size_comes_from_settings(self, unit_env):
        """The container-built controller asks for 50 records per page."""
        controller = await unit_env.get(PhotoFeedController)

        assert controller.page_size == 50

    @pytest.mark.asyncio
    async def test_latest_refresh_wins(self, unit_env):
        """A slow earlier refresh cannot overwrite a later one."""
        controller, session_service, client = await setup_feed(unit_env, photos=2)
        gate = client.hold_next_listing()

        slow = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        await session_service.create_photo(make_draft(image="https://cdn.example/new.jpg"))
        fast = await controller.refresh()
        gate.set()
        stale = await slow

        assert fast is True
        assert stale is False
        assert controller.state.records[0].image == "https://cdn.example/new.jpg"
        assert len(controller.state.records) == 3


class TestLoadMore:
    """Tests for load_more method."""

    @pytest.mark.asyncio
    async def test_appends_next_page(self, unit_env):
        """Later pages extend the feed without reordering it."""
        controller, _, _ = await setup_feed(unit_env, photos=7)
        await controller.refresh()
        before = controller.state.uris

        assert await controller.load_more() is True
        after_second = controller.state.uris
        assert await controller.load_more() is True
        after_third = controller.state.uris

        assert after_second[: len(before)] == before
        assert after_third[: len(after_second)] == after_second
        assert len(after_third) == 7
        assert len(set(after_third)) == 7
        assert controller.state.has_more is False

    @pytest.mark.asyncio
    async def test_stops_when_exhausted(self, unit_env):
        """No fetch is issued once the last page was seen."""
        controller, _, client = await setup_feed(unit_env, photos=2)
        await controller.refresh()
        calls = client.count("list_records")

        assert await controller.load_more() is False
        assert client.count("list_records") == calls

    @pytest.mark.asyncio
    async def test_at_most_one_fetch_in_flight(self, unit_env):
        """Two load_more calls before the first resolves make one request."""
        controller, _, client = await setup_feed(unit_env, photos=6)
        await controller.refresh()
        calls = client.count("list_records")
        gate = client.hold_next_listing()

        first = asyncio.create_task(controller.load_more())
        await asyncio.sleep(0)
        second = await controller.load_more()
        gate.set()
        await first

        assert second is False
        assert client.count("list_records") == calls + 1

    @pytest.mark.asyncio
    async def test_no_retry_while_degraded(self, unit_env):
        """A degraded feed does not keep hitting the repository."""
        controller, _, client = await setup_feed(unit_env, photos=6)
        client.fail_next("list_records", network_error())
        await controller.refresh()
        calls = client.count("list_records")

        assert await controller.load_more() is False
        assert client.count("list_records") == calls


class TestDegradedMode:
    """Tests for degrade-and-recover."""

    @pytest.mark.asyncio
    async def test_failure_shows_placeholders_then_recovers(self, unit_env):
        """A failed fetch degrades, a good refresh brings back only real data."""
        controller, _, client = await setup_feed(unit_env, photos=2)
        client.fail_next("list_records", network_error())

        await controller.refresh()
        degraded = controller.state

        assert degraded.degraded is True
        assert len(degraded.records) == 12
        assert degraded.status == FeedStatus.LOADED
        assert degraded.degraded_reason.kind == ErrorKind.NETWORK
        assert degraded.error is None

        await controller.refresh()
        recovered = controller.state

        assert recovered.degraded is False
        assert [r.image for r in recovered.records] == [
            "https://cdn.example/1.jpg",
            "https://cdn.example/0.jpg",
        ]

    @pytest.mark.asyncio
    async def test_failure_after_data_keeps_data(self, unit_env):
        """Once real data is shown, a failing page keeps it."""
        controller, _, client = await setup_feed(unit_env, photos=6)
        await controller.refresh()
        shown = controller.state.uris
        client.fail_next("list_records", network_error())

        await controller.load_more()

        assert controller.state.uris == shown
        assert controller.state.degraded is True
        assert controller.state.has_more is False


class TestCreatePhoto:
    """Tests for create_photo method."""

    @pytest.mark.asyncio
    async def test_prepends_created_photo(self, unit_env):
        """A created photo is shown first."""
        controller, _, _ = await setup_feed(unit_env, photos=2)
        await controller.refresh()

        result = await controller.create_photo(make_draft(image="https://cdn.example/new.jpg"))

        assert isinstance(result, Success)
        assert controller.state.records[0].uri == result.data.uri
        assert len(controller.state.records) == 3

    @pytest.mark.asyncio
    async def test_created_photo_survives_in_flight_refresh(self, unit_env):
        """A refresh that started before the create does not drop it."""
        controller, _, client = await setup_feed(unit_env, photos=1)
        gate = client.hold_next_listing()

        refresh = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        created = await controller.create_photo(make_draft(image="https://cdn.example/new.jpg"))
        gate.set()
        await refresh

        uris = controller.state.uris
        assert created.data.uri in uris
        assert len(uris) == len(set(uris))

    @pytest.mark.asyncio
    async def test_failure_sets_error_and_keeps_records(self, unit_env):
        """A rejected create surfaces the error inline."""
        controller, _, _ = await setup_feed(unit_env, photos=2)
        await controller.refresh()
        shown = controller.state.uris

        result = await controller.create_photo(
            make_draft(image="data:image/png;base64,AAAA")
        )

        assert isinstance(result, Failure)
        assert controller.state.status == FeedStatus.ERROR
        assert controller.state.error == result.error
        assert controller.state.uris == shown

    @pytest.mark.asyncio
    async def test_next_fetch_clears_error(self, unit_env):
        """Loading again clears the inline error."""
        controller, _, _ = await setup_feed(unit_env, photos=5)
        await controller.refresh()
        await controller.create_photo(make_draft(image=""))

        await controller.load_more()

        assert controller.state.error is None
        assert controller.state.status == FeedStatus.LOADED
