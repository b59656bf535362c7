# Upload controller — one multipart upload at a time, with progress.
# Created: 2026-10-04

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol

from ezshare.errors import EzShareError, ValidationFailure
from ezshare.events import StatePublisher
from ezshare.models import LocalFile, Operation, OperationResult, as_local_files
from ezshare.multipart import ProgressCallback

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[], Any]


class FileUploader(Protocol):
    async def upload(
        self, files: Sequence[LocalFile], on_progress: ProgressCallback | None = None
    ) -> None: ...


class UploadController(StatePublisher):
    """Streams a batch of local files to the server and tracks progress.

    ``progress`` is None while nothing is uploading, otherwise the fraction of
    the request body sent so far. It never decreases within one upload and is
    always reset to None once the call settles.

    Callers must not start a second upload while one is in flight; doing so
    is logged, not prevented.
    """

    def __init__(self, client: FileUploader):
        super().__init__()
        self._client = client
        self.progress: float | None = None
        self._in_flight = False

    @property
    def is_uploading(self) -> bool:
        return self._in_flight

    def _on_progress(self, sent: int, total: int) -> None:
        fraction = min(max(sent / total, 0.0), 1.0) if total > 0 else 1.0
        if self.progress is not None:
            fraction = max(fraction, self.progress)
        self.progress = fraction
        self._publish()

    async def upload(
        self,
        files: Iterable[LocalFile | str | Path],
        on_success: SuccessCallback | None = None,
    ) -> OperationResult:
        """Upload ``files`` in one request.

        Args:
            files: Local files (paths or LocalFile). Must not be empty.
            on_success: Sync or async callable, invoked once after a
                successful upload.
        """
        batch = as_local_files(files)
        if not batch:
            raise ValidationFailure("No files selected for upload")
        if self._in_flight:
            logger.warning("Upload started while another upload is still in flight")

        self._in_flight = True
        logger.info("Uploading %d file(s)", len(batch))
        try:
            await self._client.upload(batch, on_progress=self._on_progress)
        except EzShareError as e:
            logger.warning("Upload of %d file(s) failed: %s", len(batch), e)
            result = OperationResult.failure(Operation.UPLOAD, "Upload failed, please try again", e)
        else:
            result = OperationResult.success(Operation.UPLOAD, "File(s) uploaded successfully")
        finally:
            self._in_flight = False
            self.progress = None
            self._publish()

        self._report(result)

        if result.ok and on_success is not None:
            try:
                outcome = on_success()
                if asyncio.iscoroutine(outcome):
                    await outcome
            except Exception:
                logger.warning("Upload success callback failed", exc_info=True)

        return result
