# EzShare Client — async HTTP client for the EzShare server API.
# Created: 2026-10-03
#
# Every failure leaves this module as an ezshare.errors type: transport
# problems become NetworkFailure, non-2xx statuses ServerFailure, and bodies
# that do not parse MalformedResponse.

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator, Sequence
from email.message import Message
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from ezshare.errors import MalformedResponse, NetworkFailure, ServerFailure, ValidationFailure
from ezshare.location import download_url
from ezshare.models import LocalFile
from ezshare.multipart import DEFAULT_CHUNK_SIZE, MultipartUpload, ProgressCallback
from ezshare.schemas import DirectoryListing

if TYPE_CHECKING:
    from ezshare.config import Settings

logger = logging.getLogger(__name__)

_BROWSE = "/api/browse"
_UPLOAD = "/api/upload"
_PASTE = "/api/paste"
_COPY = "/api/copy"


@contextlib.contextmanager
def _map_errors(method: str, url: str) -> Iterator[None]:
    """Translate httpx exceptions raised inside the block into our taxonomy."""
    try:
        yield
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        raise ServerFailure(f"{method} {url} returned HTTP {status}", status_code=status) from e
    except httpx.RequestError as e:
        raise NetworkFailure(f"{method} {url} failed: {e}") from e


def _download_name(resp: httpx.Response, path: str) -> str:
    """Pick a local file name for a download response."""
    name = None
    disposition = resp.headers.get("Content-Disposition")
    if disposition:
        msg = Message()
        msg["Content-Disposition"] = disposition
        name = msg.get_filename()

    if not name:
        name = PurePosixPath(path).name or "download"
        content_type = resp.headers.get("Content-Type", "")
        if content_type.startswith("application/zip") and not name.endswith(".zip"):
            name = f"{name}.zip"

    # Never let the server pick a directory for us
    return PurePosixPath(name.replace("\\", "/")).name or "download"


class EzShareClient:
    """HTTP client for the EzShare server API.

    Holds one ``httpx.AsyncClient`` for its whole lifetime; close it with
    ``aclose()`` or use the client as an async context manager.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        timeout: float | None = None,
        verify: bool = True,
        upload_field_name: str = "files",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verify = verify
        self.upload_field_name = upload_field_name
        self.chunk_size = chunk_size
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> EzShareClient:
        return cls(
            settings.server_url,
            timeout=settings.request_timeout,
            verify=settings.verify_tls,
            upload_field_name=settings.upload_field_name,
            chunk_size=settings.upload_chunk_size,
            **kwargs,
        )

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> EzShareClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        with _map_errors(method, url):
            resp = await self.http.request(method, url, **kwargs)
            resp.raise_for_status()
        return resp

    # -- API operations --

    async def browse(self, path: str) -> DirectoryListing:
        """List the directory at ``path``.

        The returned listing describes whatever path the server echoed, which
        is not necessarily ``path``.
        """
        resp = await self._send("GET", _BROWSE, params={"p": path})
        try:
            return DirectoryListing.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise MalformedResponse(f"Unexpected listing for {path!r}: {e}") from e

    async def upload(
        self,
        files: Sequence[LocalFile],
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Upload ``files`` as one multipart request.

        Args:
            files: Files to send, all under the configured field name.
            on_progress: Called with ``(bytes_sent, total_bytes)`` as the body
                is streamed.
        """
        body = MultipartUpload(files, field_name=self.upload_field_name, chunk_size=self.chunk_size)
        logger.debug("Uploading %d file(s), %d bytes", len(body.files), body.content_length)
        await self._send("POST", _UPLOAD, content=body.stream(on_progress), headers=body.headers)

    async def paste(self, text: str, save_as_file: bool = False) -> None:
        """Send ``text`` to the other side's clipboard, or save it as a file there."""
        await self._send(
            "POST",
            _PASTE,
            data={"clipboard": text, "saveAsFile": "true" if save_as_file else "false"},
        )

    async def copy(self) -> str:
        """Fetch the text currently on the other side's clipboard."""
        resp = await self._send("POST", _COPY)
        return resp.text

    def download_url(self, path: str, now_ms: int | None = None) -> str:
        """Absolute download link for ``path``."""
        return f"{self.base_url}{download_url(path, now_ms)}"

    async def download(
        self,
        path: str,
        dest_dir: str | Path = ".",
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        """Stream a file, or a directory as a zip archive, into ``dest_dir``.

        Returns the path of the written file. Nothing is left behind on failure.
        """
        dest = Path(dest_dir).expanduser()
        url = download_url(path)
        part: Path | None = None

        try:
            dest.mkdir(parents=True, exist_ok=True)
            with _map_errors("GET", url):
                async with self.http.stream("GET", url) as resp:
                    resp.raise_for_status()
                    target = dest / _download_name(resp, path)
                    part = target.with_name(f"{target.name}.part")
                    total = int(resp.headers.get("Content-Length") or 0)
                    received = 0

                    with part.open("wb") as f:
                        async for chunk in resp.aiter_bytes(self.chunk_size):
                            f.write(chunk)
                            received += len(chunk)
                            if on_progress is not None:
                                on_progress(received, total or received)

            part.replace(target)
        except OSError as e:
            raise ValidationFailure(f"Cannot write into {dest}: {e.strerror or e}") from e
        finally:
            if part is not None and part.exists():
                part.unlink()

        logger.info("Downloaded %s to %s (%d bytes)", path, target, received)
        return target
