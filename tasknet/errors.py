"""Exceptions raised by task-net.

Every pipeline step wraps the library error that stopped it in one of these
classes, chaining the original exception, and lets it propagate to the CLI.
"""

from __future__ import annotations


class TaskNetError(Exception):
    """Base class for all task-net errors."""

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize the error with a message and optional details."""
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigurationError(TaskNetError):
    """Configuration file is unreadable or holds unknown settings."""


class FetchError(TaskNetError):
    """A remote endpoint was unreachable, timed out or returned an error status."""


class DecodeError(TaskNetError):
    """A response body did not have the expected shape."""


class ResourceNotFoundError(TaskNetError):
    """The registry service index lacks the expected resource."""


class DownloadError(TaskNetError):
    """A release archive could not be downloaded."""


class ExtractionError(TaskNetError):
    """An archive is corrupt, unsafe or could not be written out."""


class RelocationError(TaskNetError):
    """The extracted binary is missing or could not be moved into place."""


class PermissionChangeError(TaskNetError):
    """The final binary could not be marked executable."""


class StructureError(TaskNetError):
    """A manifest has no usable version field or insertion point."""


class ManifestIOError(TaskNetError):
    """A manifest could not be read or written."""
