# Tests for DirectoryBrowserController.
# Created: 2026-10-07

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from ezshare.controllers.browser import DirectoryBrowserController
from ezshare.errors import NetworkFailure, ServerFailure, ValidationFailure
from ezshare.models import LoadState, NotificationLevel, Operation
from ezshare.schemas import DirectoryListing, FileEntry


def listing(path: str, *entries: tuple[str, bool]) -> DirectoryListing:
    base = "" if path == "/" else path
    return DirectoryListing(
        requested_or_current_path=path,
        shared_root_label="/srv/share",
        entries=tuple(
            FileEntry(file_name=name, path=f"{base}/{name}", is_dir=is_dir)
            for name, is_dir in entries
        ),
    )


class ScriptedLister:
    """Lister whose responses are released by the test, in any order."""

    def __init__(self):
        self.calls: list[str] = []
        self._pending: dict[str, list[asyncio.Future]] = {}

    async def browse(self, path: str) -> DirectoryListing:
        self.calls.append(path)
        future = asyncio.get_running_loop().create_future()
        self._pending.setdefault(path, []).append(future)
        return await future

    def respond(self, path: str, result: DirectoryListing) -> None:
        self._pending[path].pop(0).set_result(result)

    def fail(self, path: str, error: Exception) -> None:
        self._pending[path].pop(0).set_exception(error)


async def _settle():
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(3):
        await asyncio.sleep(0)


def start(controller: DirectoryBrowserController, path: str) -> asyncio.Task:
    controller.set_requested_path(path)
    return asyncio.create_task(controller.refresh(path))


class TestInitialState:
    def test_empty_listing_without_echoed_path(self):
        controller = DirectoryBrowserController(AsyncMock())
        assert controller.last_listing.requested_or_current_path is None
        assert controller.last_listing.entries == ()
        assert controller.state is LoadState.IDLE
        assert controller.is_loading is False
        assert controller.directories == ()
        assert controller.files == ()


class TestRefresh:
    async def test_scenario_a_root_with_one_directory(self):
        client = AsyncMock()
        client.browse.return_value = listing("/", ("docs", True))
        controller = DirectoryBrowserController(client)

        controller.set_requested_path("/")
        result = await controller.refresh()

        client.browse.assert_awaited_once_with("/")
        assert result.ok
        assert [e.file_name for e in controller.directories] == ["docs"]
        assert controller.directories[0].path == "/docs"
        assert controller.files == ()
        assert controller.state is LoadState.LOADED

    async def test_views_keep_server_order(self):
        client = AsyncMock()
        client.browse.return_value = listing(
            "/", ("z.txt", False), ("b", True), ("a.txt", False), ("a", True)
        )
        controller = DirectoryBrowserController(client)

        await controller.refresh("/")

        assert [e.file_name for e in controller.directories] == ["b", "a"]
        assert [e.file_name for e in controller.files] == ["z.txt", "a.txt"]

    @pytest.mark.parametrize("fence_stale", [True, False])
    async def test_echoed_path_is_authoritative(self, fence_stale):
        client = AsyncMock()
        client.browse.return_value = listing("/somewhere/else")
        controller = DirectoryBrowserController(client, fence_stale=fence_stale)

        await controller.refresh("/docs")

        assert controller.last_listing.requested_or_current_path == "/somewhere/else"

    async def test_empty_path_rejected(self):
        client = AsyncMock()
        controller = DirectoryBrowserController(client)

        with pytest.raises(ValidationFailure):
            await controller.refresh("")
        with pytest.raises(ValidationFailure):
            await controller.refresh()

        client.browse.assert_not_awaited()

    async def test_success_emits_one_info_notification(self):
        client = AsyncMock()
        client.browse.return_value = listing("/docs")
        controller = DirectoryBrowserController(client)
        notifications = []
        controller.on_notification(notifications.append)

        await controller.refresh("/docs")

        assert len(notifications) == 1
        assert notifications[0].level is NotificationLevel.INFO
        assert notifications[0].operation is Operation.BROWSE

    async def test_refresh_without_path_uses_requested_path(self):
        client = AsyncMock()
        client.browse.return_value = listing("/music")
        controller = DirectoryBrowserController(client)
        controller.set_requested_path("/music")

        await controller.refresh()

        client.browse.assert_awaited_once_with("/music")


class TestFailures:
    @pytest.mark.parametrize("fence_stale", [True, False])
    async def test_failure_keeps_previous_listing(self, fence_stale):
        client = AsyncMock()
        client.browse.return_value = listing("/", ("docs", True))
        controller = DirectoryBrowserController(client, fence_stale=fence_stale)
        controller.set_requested_path("/")
        await controller.refresh()
        before = controller.last_listing

        notifications = []
        controller.on_notification(notifications.append)
        client.browse.side_effect = ServerFailure("HTTP 500", status_code=500)
        controller.set_requested_path("/docs")
        result = await controller.refresh()

        assert controller.last_listing is before
        assert not result.ok
        assert isinstance(result.error, ServerFailure)
        assert len(notifications) == 1
        assert notifications[0].level is NotificationLevel.ERROR
        assert "/docs" in notifications[0].message

    async def test_compatible_mode_stays_loading_after_failure(self):
        client = AsyncMock()
        client.browse.side_effect = NetworkFailure("refused")
        controller = DirectoryBrowserController(client, fence_stale=False)
        controller.set_requested_path("/")

        await controller.refresh()

        # The structural proxy cannot tell a failed fetch from a pending one
        assert controller.is_loading is True

    async def test_fenced_mode_reports_failed_state(self):
        client = AsyncMock()
        client.browse.side_effect = NetworkFailure("refused")
        controller = DirectoryBrowserController(client)
        controller.set_requested_path("/")

        await controller.refresh()

        assert controller.state is LoadState.FAILED
        assert controller.is_loading is False

    async def test_usable_after_failure(self):
        client = AsyncMock()
        client.browse.side_effect = [NetworkFailure("refused"), listing("/")]
        controller = DirectoryBrowserController(client)
        controller.set_requested_path("/")

        assert not (await controller.refresh()).ok
        assert (await controller.refresh()).ok
        assert controller.last_listing.requested_or_current_path == "/"

    async def test_failing_listener_does_not_break_state(self):
        client = AsyncMock()
        client.browse.return_value = listing("/")
        controller = DirectoryBrowserController(client)
        controller.on_change(MagicMock(side_effect=RuntimeError("listener bug")))
        controller.on_notification(MagicMock(side_effect=RuntimeError("listener bug")))

        result = await controller.refresh("/")

        assert result.ok
        assert controller.last_listing.requested_or_current_path == "/"


class TestLoadingIndicator:
    @pytest.mark.parametrize("fence_stale", [True, False])
    async def test_in_order_responses(self, fence_stale):
        lister = ScriptedLister()
        controller = DirectoryBrowserController(lister, fence_stale=fence_stale)

        for path in ["/", "/docs", "/docs/2024"]:
            task = start(controller, path)
            assert controller.is_loading is True
            await _settle()
            lister.respond(path, listing(path))
            await task
            assert controller.is_loading is False

    def test_unchanged_path_is_not_a_change(self):
        controller = DirectoryBrowserController(AsyncMock())
        assert controller.set_requested_path("/") is True
        assert controller.set_requested_path("/") is False


class TestStaleResponses:
    async def test_scenario_b_compatible_mode_last_response_wins(self):
        lister = ScriptedLister()
        controller = DirectoryBrowserController(lister, fence_stale=False)

        root_task = start(controller, "/")
        await _settle()
        docs_task = start(controller, "/docs")
        await _settle()

        lister.respond("/docs", listing("/docs"))
        await docs_task
        assert controller.last_listing.requested_or_current_path == "/docs"

        lister.respond("/", listing("/"))
        await root_task

        # The stale root listing overwrites the one the user is looking at
        assert controller.requested_path == "/docs"
        assert controller.last_listing.requested_or_current_path == "/"
        assert controller.is_loading is True

    async def test_scenario_b_fenced_mode_last_request_wins(self):
        lister = ScriptedLister()
        controller = DirectoryBrowserController(lister)
        notifications = []
        controller.on_notification(notifications.append)

        root_task = start(controller, "/")
        await _settle()
        docs_task = start(controller, "/docs")
        await _settle()

        lister.respond("/docs", listing("/docs"))
        docs_result = await docs_task
        lister.respond("/", listing("/"))
        root_result = await root_task

        assert docs_result.ok and not docs_result.discarded
        assert root_result.discarded
        assert controller.last_listing.requested_or_current_path == "/docs"
        assert controller.state is LoadState.LOADED
        assert controller.is_loading is False
        assert len(notifications) == 1

    async def test_fenced_mode_drops_stale_failure(self):
        lister = ScriptedLister()
        controller = DirectoryBrowserController(lister)
        notifications = []
        controller.on_notification(notifications.append)

        root_task = start(controller, "/")
        await _settle()
        docs_task = start(controller, "/docs")
        await _settle()

        lister.fail("/", NetworkFailure("reset"))
        assert (await root_task).discarded
        assert controller.state is LoadState.LOADING

        lister.respond("/docs", listing("/docs"))
        await docs_task
        assert controller.state is LoadState.LOADED
        assert [n.level for n in notifications] == [NotificationLevel.INFO]

    async def test_fenced_mode_stale_success_before_newer_lands(self):
        lister = ScriptedLister()
        controller = DirectoryBrowserController(lister)

        root_task = start(controller, "/")
        await _settle()
        docs_task = start(controller, "/docs")
        await _settle()

        lister.respond("/", listing("/"))
        await root_task
        # Still waiting for /docs, the root listing never shows up
        assert controller.last_listing.requested_or_current_path is None
        assert controller.is_loading is True

        lister.respond("/docs", listing("/docs"))
        await docs_task
        assert controller.last_listing.requested_or_current_path == "/docs"

    async def test_generation_counts_requests(self):
        client = AsyncMock()
        client.browse.return_value = listing("/")
        controller = DirectoryBrowserController(client)

        await controller.refresh("/")
        await controller.refresh("/")

        assert controller.generation == 2
