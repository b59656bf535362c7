"""EzShare session — the controllers wired around one current location.

Created: 2026-10-05

The session owns the HTTP client and the three controllers, and adds the
application-level rules that tie them together:
- every change of requested path triggers exactly one listing refresh
- a successful upload refreshes the listing when the share root is in view
- all controller notifications fan out through one listener list
- renderers only ever see a frozen SessionSnapshot
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from ezshare.client import EzShareClient
from ezshare.config import Settings, get_settings
from ezshare.controllers import (
    ClipboardRelayController,
    DirectoryBrowserController,
    UploadController,
)
from ezshare.controllers.clipboard import ClipboardWriter
from ezshare.errors import EzShareError
from ezshare.events import StatePublisher
from ezshare.location import ROOT_PATH, resolve_path
from ezshare.models import LocalFile, Operation, OperationResult, SessionSnapshot
from ezshare.multipart import ProgressCallback

logger = logging.getLogger(__name__)

# Uploads always land in the share root
UPLOAD_TARGET_PATH = ROOT_PATH


class EzShareSession(StatePublisher):
    """One user's session against an EzShare server.

    Usage:
        async with EzShareSession() as session:
            await session.navigate("/?p=%2Fdocs")
            await session.wait_idle()
            print(session.snapshot().directories)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: EzShareClient | None = None,
        *,
        fence_stale: bool | None = None,
    ):
        super().__init__()
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self.client = client or EzShareClient.from_settings(self.settings)

        if fence_stale is None:
            fence_stale = self.settings.fence_stale_listings
        self.browser = DirectoryBrowserController(self.client, fence_stale=fence_stale)
        self.uploader = UploadController(self.client)
        self.clipboard = ClipboardRelayController(self.client)

        for controller in (self.browser, self.uploader, self.clipboard):
            controller.on_change(self._on_controller_change)
            controller.on_notification(self._emit)

        self._tasks: set[asyncio.Task] = set()

    async def __aenter__(self) -> EzShareSession:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _on_controller_change(self, _controller: Any) -> None:
        self._publish()

    # =========================================================================
    # Navigation
    # =========================================================================

    def navigate(self, location: str | Mapping[str, Any] | None) -> asyncio.Task | None:
        """Move to the directory requested by ``location``.

        Schedules exactly one refresh when the requested path changed and
        returns its task; returns None when the path is unchanged.
        """
        path = resolve_path(location)
        if not self.browser.set_requested_path(path):
            return None

        logger.debug("Navigating to %s", path)
        task = asyncio.create_task(self.browser.refresh(path))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def refresh(self) -> OperationResult:
        """Re-fetch the directory currently requested."""
        return await self.browser.refresh()

    async def wait_idle(self) -> None:
        """Wait for every listing refresh scheduled by ``navigate``."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # =========================================================================
    # Upload / download
    # =========================================================================

    async def _after_upload(self) -> None:
        if self.browser.requested_path == UPLOAD_TARGET_PATH:
            await self.browser.refresh()

    async def upload(self, files: Iterable[LocalFile | str | Path]) -> OperationResult:
        """Upload ``files`` into the share root."""
        return await self.uploader.upload(files, on_success=self._after_upload)

    async def download(
        self,
        path: str,
        dest_dir: str | Path | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> OperationResult:
        """Save a file, or a directory as a zip archive, to ``dest_dir``."""
        dest = dest_dir if dest_dir is not None else self.settings.download_dir
        try:
            target = await self.client.download(path, dest, on_progress=on_progress)
        except EzShareError as e:
            logger.warning("Download of %s failed: %s", path, e)
            return self._report(OperationResult.failure(Operation.DOWNLOAD, "Download failed", e))

        return self._report(OperationResult.success(Operation.DOWNLOAD, f"Saved {target}"))

    def download_url(self, path: str) -> str:
        return self.client.download_url(path)

    # =========================================================================
    # Clipboard
    # =========================================================================

    async def push_clipboard(self, text: str, save_as_file: bool = False) -> OperationResult:
        return await self.clipboard.push(text, save_as_file=save_as_file)

    async def pull_clipboard(self) -> OperationResult:
        return await self.clipboard.pull()

    def dismiss_clipboard(self) -> None:
        self.clipboard.dismiss()

    async def copy_clipboard(self, writer: ClipboardWriter | None = None) -> OperationResult:
        return await self.clipboard.copy_out(writer)

    # =========================================================================
    # Snapshot / teardown
    # =========================================================================

    def snapshot(self) -> SessionSnapshot:
        browser = self.browser
        return SessionSnapshot(
            requested_path=browser.requested_path,
            listing=browser.last_listing,
            load_state=browser.state,
            is_loading=browser.is_loading,
            upload_progress=self.uploader.progress,
            clipboard_text=self.clipboard.text,
            directories=browser.directories,
            files=browser.files,
        )

    async def aclose(self) -> None:
        """Let pending refreshes finish, then close the HTTP client if we own it."""
        await self.wait_idle()
        if self._owns_client:
            await self.client.aclose()
