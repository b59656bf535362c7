"""EzShare client: browse, upload, download and relay clipboard text with an EzShare server."""

from ezshare.client import EzShareClient
from ezshare.config import Settings, get_settings
from ezshare.errors import (
    EzShareError,
    MalformedResponse,
    NetworkFailure,
    ServerFailure,
    ValidationFailure,
)
from ezshare.models import LoadState, LocalFile, Notification, OperationResult, SessionSnapshot
from ezshare.schemas import DirectoryListing, FileEntry
from ezshare.session import EzShareSession

__all__ = [
    "DirectoryListing",
    "EzShareClient",
    "EzShareError",
    "EzShareSession",
    "FileEntry",
    "LoadState",
    "LocalFile",
    "MalformedResponse",
    "NetworkFailure",
    "Notification",
    "OperationResult",
    "ServerFailure",
    "SessionSnapshot",
    "Settings",
    "ValidationFailure",
    "get_settings",
]
