"""Error kinds raised by the file services.

Every failure crossing the service boundary is one of these. The HTTP layer
maps ``ErrorKind`` to a status code; callers never need to inspect messages.
"""
from enum import Enum


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    CONFLICT = "conflict"


class FileServiceError(Exception):
    """Base class for all file service errors."""

    kind: ErrorKind
    default_message = "File service error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(FileServiceError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Authentication required"


class PermissionDenied(FileServiceError):
    kind = ErrorKind.PERMISSION_DENIED
    default_message = "You do not have permission to modify this file"


class NotFound(FileServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "File not found"


class InvalidInput(FileServiceError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "Invalid input"


class StorageUnavailable(FileServiceError):
    kind = ErrorKind.STORAGE_UNAVAILABLE
    default_message = "Storage is temporarily unavailable"


class ShareTokenConflict(FileServiceError):
    """A freshly minted share token collided with an existing one."""
    kind = ErrorKind.CONFLICT
    default_message = "Share token already in use"
