# Error taxonomy for the EzShare client.
# Created: 2026-10-02
#
# Every failure the HTTP client surfaces is one of these. Controllers catch
# EzShareError and fold it into a single OperationResult.

from __future__ import annotations


class EzShareError(Exception):
    """Base class for all EzShare client failures."""

    #: Short human-readable reason, used in notifications and logs.
    reason: str = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.reason)
        self.message = message or self.reason


class NetworkFailure(EzShareError):
    """Transport-level failure: connection refused, reset, timed out."""

    reason = "Could not reach the server"


class ServerFailure(EzShareError):
    """The server answered with a non-success status."""

    reason = "Server returned an error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(ServerFailure):
    """The server answered 2xx but the body was not what we expected."""

    reason = "Server response could not be parsed"


class LocalClipboardFailure(EzShareError):
    """The local system clipboard could not be written."""

    reason = "Local clipboard is not available"


class ValidationFailure(EzShareError, ValueError):
    """Caller-side error, raised before any network round trip."""

    reason = "Invalid input"


__all__ = [
    "EzShareError",
    "LocalClipboardFailure",
    "MalformedResponse",
    "NetworkFailure",
    "ServerFailure",
    "ValidationFailure",
]
