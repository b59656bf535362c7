"""EzShare client data models.

Created: 2026-10-02

Internal state and result types shared by the controllers and the session:
- LocalFile: one file selected for upload (on disk or in memory)
- LoadState: tri-state of the latest listing request
- Notification / OperationResult: the outcome of every controller operation
- SessionSnapshot: read-only view handed to renderers

Wire shapes live in ``ezshare.schemas``.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from ezshare.errors import EzShareError, ValidationFailure
from ezshare.location import ROOT_PATH
from ezshare.schemas import DirectoryListing, FileEntry

# ============================================================================
# Enums
# ============================================================================


class LoadState(str, Enum):
    """Fate of the most recently issued listing request."""

    IDLE = "idle"  # Nothing requested yet
    LOADING = "loading"  # Latest request still in flight
    LOADED = "loaded"  # Latest request landed
    FAILED = "failed"  # Latest request failed


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


class Operation(str, Enum):
    """Names of the operations that report an outcome."""

    BROWSE = "browse"
    UPLOAD = "upload"
    PASTE = "paste"
    COPY = "copy"
    COPY_OUT = "copy_out"
    DOWNLOAD = "download"


# ============================================================================
# Upload input
# ============================================================================


@dataclass(frozen=True)
class LocalFile:
    """A local file to upload, backed by a filesystem path or by bytes."""

    name: str
    path: Path | None = None
    data: bytes | None = None
    content_type: str | None = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.data is None):
            raise ValidationFailure("LocalFile needs exactly one of path or data")
        if not self.name:
            raise ValidationFailure("LocalFile needs a name")

    @classmethod
    def from_path(cls, path: str | Path) -> LocalFile:
        local = Path(path).expanduser()
        return cls(name=local.name, path=local)

    @property
    def size(self) -> int:
        if self.data is not None:
            return len(self.data)
        try:
            return self.path.stat().st_size
        except OSError as e:
            raise ValidationFailure(f"Cannot read {self.path}: {e.strerror or e}") from e

    @property
    def mime_type(self) -> str:
        return (
            self.content_type
            or mimetypes.guess_type(self.name)[0]
            or "application/octet-stream"
        )

    def iter_chunks(self, chunk_size: int) -> Iterator[bytes]:
        """Yield the file content in chunks of at most ``chunk_size`` bytes."""
        if self.data is not None:
            for start in range(0, len(self.data), chunk_size):
                yield self.data[start : start + chunk_size]
            return

        try:
            with self.path.open("rb") as f:
                while chunk := f.read(chunk_size):
                    yield chunk
        except OSError as e:
            raise ValidationFailure(f"Cannot read {self.path}: {e.strerror or e}") from e


def as_local_files(items: Iterable[LocalFile | str | Path]) -> list[LocalFile]:
    """Coerce paths and LocalFile instances into a list of LocalFile."""
    return [item if isinstance(item, LocalFile) else LocalFile.from_path(item) for item in items]


# ============================================================================
# Outcomes
# ============================================================================


@dataclass(frozen=True)
class Notification:
    """A transient, user-facing message about one settled operation."""

    level: NotificationLevel
    message: str
    operation: Operation
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one controller operation.

    ``discarded`` marks a listing response that was fenced out because a newer
    request had been issued; such results carry no notification.
    """

    operation: Operation
    ok: bool
    message: str = ""
    level: NotificationLevel = NotificationLevel.SUCCESS
    error: EzShareError | None = None
    discarded: bool = False

    @classmethod
    def success(
        cls,
        operation: Operation,
        message: str,
        level: NotificationLevel = NotificationLevel.SUCCESS,
    ) -> OperationResult:
        return cls(operation=operation, ok=True, message=message, level=level)

    @classmethod
    def failure(cls, operation: Operation, message: str, error: EzShareError) -> OperationResult:
        return cls(
            operation=operation,
            ok=False,
            message=message,
            level=NotificationLevel.ERROR,
            error=error,
        )

    @classmethod
    def stale(cls, operation: Operation) -> OperationResult:
        return cls(
            operation=operation, ok=True, level=NotificationLevel.INFO, discarded=True
        )

    def to_notification(self) -> Notification:
        return Notification(level=self.level, message=self.message, operation=self.operation)


# ============================================================================
# Snapshot
# ============================================================================


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the whole session, for renderers."""

    requested_path: str | None
    listing: DirectoryListing
    load_state: LoadState
    is_loading: bool
    upload_progress: float | None
    clipboard_text: str | None
    directories: tuple[FileEntry, ...] = ()
    files: tuple[FileEntry, ...] = ()

    @property
    def is_in_root(self) -> bool:
        return self.requested_path == ROOT_PATH
