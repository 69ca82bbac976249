"""Exception hierarchy for imergfetch."""

from __future__ import annotations

from pathlib import Path


class ImergFetchError(Exception):
    """Base class for all imergfetch failures."""


class InvalidDate(ImergFetchError, ValueError):
    """Raised when a value cannot be interpreted as a calendar date."""


class InvalidRange(ImergFetchError, ValueError):
    """Raised when a date range ends before it starts."""


class TransferError(ImergFetchError):
    """Raised when a remote file cannot be retrieved."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class RemoteFileMissing(TransferError):
    """The archive answered, but the requested file does not exist."""


class WriteError(ImergFetchError):
    """Raised when a downloaded payload cannot be committed to disk."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


__all__ = [
    "ImergFetchError",
    "InvalidDate",
    "InvalidRange",
    "RemoteFileMissing",
    "TransferError",
    "WriteError",
]
