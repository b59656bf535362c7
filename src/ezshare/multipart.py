# Streaming multipart/form-data encoder with byte-level progress.
# Created: 2026-10-03
#
# The body is produced lazily so large files are never held in memory, and
# its exact length is known up front so the request carries a Content-Length
# and progress can be reported as a fraction of the whole.

from __future__ import annotations

import logging
import secrets
from collections.abc import AsyncIterator, Callable, Iterator, Sequence

from ezshare.errors import ValidationFailure
from ezshare.models import LocalFile

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

DEFAULT_CHUNK_SIZE = 64 * 1024


def _quote(value: str) -> str:
    """Escape a header parameter value the way browsers do for form-data."""
    return value.replace("\r", "%0D").replace("\n", "%0A").replace('"', "%22")


class MultipartUpload:
    """A multipart/form-data body carrying every file under one field name.

    Usage:
        body = MultipartUpload(files, field_name="files")
        await client.post(url, content=body.stream(on_progress),
                          headers=body.headers)
    """

    def __init__(
        self,
        files: Sequence[LocalFile],
        field_name: str = "files",
        boundary: str | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if not files:
            raise ValidationFailure("No files selected for upload")
        if chunk_size <= 0:
            raise ValidationFailure("chunk_size must be positive")

        self.files = list(files)
        self.field_name = field_name
        self.boundary = boundary or f"ezshare-{secrets.token_hex(12)}"
        self.chunk_size = chunk_size

        self._sizes = [f.size for f in self.files]
        self._part_headers = [self._part_header(f) for f in self.files]
        self._trailer = f"--{self.boundary}--\r\n".encode()

    def _part_header(self, local: LocalFile) -> bytes:
        return (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{_quote(self.field_name)}"; '
            f'filename="{_quote(local.name)}"\r\n'
            f"Content-Type: {local.mime_type}\r\n\r\n"
        ).encode()

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    @property
    def content_length(self) -> int:
        parts = sum(len(h) + size + 2 for h, size in zip(self._part_headers, self._sizes))
        return parts + len(self._trailer)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": self.content_type,
            "Content-Length": str(self.content_length),
        }

    def iter_chunks(self) -> Iterator[bytes]:
        """Yield the encoded body synchronously."""
        for header, local, size in zip(self._part_headers, self.files, self._sizes):
            yield header
            read = 0
            for chunk in local.iter_chunks(self.chunk_size):
                read += len(chunk)
                yield chunk
            # The Content-Length was announced from the sizes seen at
            # construction time; a file that changed since would corrupt it.
            if read != size:
                raise ValidationFailure(f"{local.name} changed size during upload")
            yield b"\r\n"
        yield self._trailer

    async def stream(self, on_progress: ProgressCallback | None = None) -> AsyncIterator[bytes]:
        """Yield the encoded body, reporting ``(sent, total)`` after each chunk."""
        total = self.content_length
        sent = 0
        for chunk in self.iter_chunks():
            yield chunk
            sent += len(chunk)
            if on_progress is not None:
                on_progress(sent, total)
        logger.debug("Streamed %d bytes for %d file(s)", sent, len(self.files))
