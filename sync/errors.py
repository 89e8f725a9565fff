"""Faults raised by the synchronization engine and its collaborators."""

from typing import Optional


class SyncError(Exception):
    """Base class for all synchronization faults."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationFault(SyncError):
    """A local validation rule rejected a field write."""

    def __init__(self, code: str, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.field = field

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message} ({self.code})"
        return f"{self.message} ({self.code})"


class NotFoundFault(SyncError):
    """The remote entity does not exist."""


class ConflictFault(SyncError):
    """The server rejected a request."""


class TransportFault(SyncError):
    """The request failed in transit or the server failed to answer it."""
