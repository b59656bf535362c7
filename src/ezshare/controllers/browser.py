"""Directory browser controller.

Created: 2026-10-04

Owns the listing state for the directory the user wants to see. Listing
requests are never cancelled, so responses may land out of order. Two
policies are supported:

- fenced (default): every request carries a generation number and only the
  latest one may touch state. Superseded responses and failures are dropped
  silently (last request wins).
- compatible: every response overwrites the listing, whichever lands last
  (last response wins). ``is_loading`` is then the structural proxy
  "requested path differs from the path the listing echoes".
"""

from __future__ import annotations

import logging
from typing import Protocol

from ezshare.errors import EzShareError, ValidationFailure
from ezshare.events import StatePublisher
from ezshare.models import LoadState, NotificationLevel, Operation, OperationResult
from ezshare.schemas import DirectoryListing, FileEntry

logger = logging.getLogger(__name__)


class DirectoryLister(Protocol):
    async def browse(self, path: str) -> DirectoryListing: ...


class DirectoryBrowserController(StatePublisher):
    """Fetches and republishes directory listings."""

    def __init__(self, client: DirectoryLister, *, fence_stale: bool = True):
        super().__init__()
        self._client = client
        self.fence_stale = fence_stale

        self.last_listing = DirectoryListing()
        self.requested_path: str | None = None
        self.state = LoadState.IDLE
        self._generation = 0

    # -- derived state --

    @property
    def is_loading(self) -> bool:
        if self.fence_stale:
            return self.state is LoadState.LOADING
        if self.requested_path is None:
            return False
        return self.requested_path != self.last_listing.requested_or_current_path

    @property
    def directories(self) -> tuple[FileEntry, ...]:
        return tuple(e for e in self.last_listing.entries if e.is_dir)

    @property
    def files(self) -> tuple[FileEntry, ...]:
        return tuple(e for e in self.last_listing.entries if not e.is_dir)

    @property
    def generation(self) -> int:
        """Number of listing requests issued so far."""
        return self._generation

    # -- operations --

    def set_requested_path(self, path: str) -> bool:
        """Record the path the user wants to see. Returns True if it changed."""
        if path == self.requested_path:
            return False

        self.requested_path = path
        self.state = LoadState.LOADING
        self._publish()
        return True

    def _superseded(self, generation: int) -> bool:
        return self.fence_stale and generation != self._generation

    async def refresh(self, path: str | None = None) -> OperationResult:
        """Fetch the listing for ``path`` (default: the requested path).

        The server response replaces the current listing verbatim, including
        the path it echoes. On failure the previous listing stays in place.
        """
        path = path if path is not None else self.requested_path
        if not path:
            raise ValidationFailure("Cannot list an empty path")

        self._generation += 1
        generation = self._generation
        self.state = LoadState.LOADING
        self._publish()

        try:
            listing = await self._client.browse(path)
        except EzShareError as e:
            if self._superseded(generation):
                logger.debug("Dropping failed listing #%d for %s (superseded)", generation, path)
                return OperationResult.stale(Operation.BROWSE)

            logger.warning("Listing %s failed: %s", path, e)
            if generation == self._generation:
                self.state = LoadState.FAILED
                self._publish()
            return self._report(
                OperationResult.failure(Operation.BROWSE, f"Failed to load {path}", e)
            )

        if self._superseded(generation):
            logger.debug(
                "Dropping listing #%d for %s, request #%d is newer",
                generation,
                path,
                self._generation,
            )
            return OperationResult.stale(Operation.BROWSE)

        self.last_listing = listing
        if generation == self._generation:
            self.state = LoadState.LOADED
        self._publish()

        echoed = listing.requested_or_current_path
        logger.info("Loaded %s (%d entries)", echoed, len(listing.entries))
        return self._report(
            OperationResult.success(Operation.BROWSE, f"Loaded {echoed}", NotificationLevel.INFO)
        )
