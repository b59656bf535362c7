# Clipboard relay controller — send text to the other side, fetch theirs.
# Created: 2026-10-04

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

import pyperclip

from ezshare.errors import EzShareError, LocalClipboardFailure, ValidationFailure
from ezshare.events import StatePublisher
from ezshare.models import NotificationLevel, Operation, OperationResult

logger = logging.getLogger(__name__)

ClipboardWriter = Callable[[str], Any]

SAVED_AS_FILE_MESSAGE = "Pasted text has been saved to a file on other side"
SENT_TO_CLIPBOARD_MESSAGE = "Pasted text has been sent to the clipboard on other side"
COPIED_OUT_MESSAGE = "Text has been copied from the other side's clipboard"


class ClipboardRemote(Protocol):
    async def paste(self, text: str, save_as_file: bool = False) -> None: ...

    async def copy(self) -> str: ...


class ClipboardRelayController(StatePublisher):
    """Push and pull clipboard text between this machine and the server.

    ``push`` and ``pull`` are independent one-shot operations. Only ``pull``
    holds state: ``text`` is the fetched remote text until it is copied out
    or dismissed.
    """

    def __init__(self, client: ClipboardRemote):
        super().__init__()
        self._client = client
        self.text: str | None = None

    async def push(self, text: str, save_as_file: bool = False) -> OperationResult:
        """Send ``text`` to the other side.

        With ``save_as_file`` the other side stores it as a new file instead of
        placing it on its clipboard.
        """
        if not text:
            raise ValidationFailure("Nothing to paste")

        try:
            await self._client.paste(text, save_as_file=save_as_file)
        except EzShareError as e:
            logger.warning("Paste to other side failed: %s", e)
            return self._report(
                OperationResult.failure(Operation.PASTE, "Paste clipboard failed", e)
            )

        logger.info("Pasted %d chars (save_as_file=%s)", len(text), save_as_file)
        message = SAVED_AS_FILE_MESSAGE if save_as_file else SENT_TO_CLIPBOARD_MESSAGE
        return self._report(OperationResult.success(Operation.PASTE, message))

    async def pull(self) -> OperationResult:
        """Fetch the other side's clipboard into ``text``."""
        try:
            text = await self._client.copy()
        except EzShareError as e:
            logger.warning("Copy from other side failed: %s", e)
            return self._report(OperationResult.failure(Operation.COPY, "Copy clipboard failed", e))

        # An empty remote clipboard leaves nothing to copy out
        self.text = text or None
        self._publish()

        if self.text is None:
            return self._report(
                OperationResult.success(
                    Operation.COPY, "Clipboard on other side is empty", NotificationLevel.INFO
                )
            )
        return self._report(
            OperationResult.success(
                Operation.COPY, "Fetched clipboard from other side", NotificationLevel.INFO
            )
        )

    def dismiss(self) -> None:
        """Forget the fetched text."""
        if self.text is None:
            return
        self.text = None
        self._publish()

    async def copy_out(self, writer: ClipboardWriter | None = None) -> OperationResult:
        """Write the fetched text to the local clipboard, then dismiss it.

        If the local clipboard cannot be written, the text is kept so the
        user can retry.
        """
        if self.text is None:
            raise ValidationFailure("No clipboard text to copy")
        if writer is None:
            writer = pyperclip.copy

        try:
            outcome = writer(self.text)
            if asyncio.iscoroutine(outcome):
                await outcome
        except Exception as e:
            logger.warning("Writing local clipboard failed: %s", e)
            error = LocalClipboardFailure(str(e))
            return self._report(
                OperationResult.failure(Operation.COPY_OUT, "Copy to local clipboard failed", error)
            )

        self.dismiss()
        return self._report(OperationResult.success(Operation.COPY_OUT, COPIED_OUT_MESSAGE))
