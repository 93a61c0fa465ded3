"""Exception hierarchy and HTTP error mapping for gdrivefs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class GDriveFsError(Exception):
    """
    Base exception for gdrivefs.

    Attributes:
        details: Optional structured information (e.g., HTTP status, reason).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidStateError(GDriveFsError):
    """Raised when an object is used in an invalid state (e.g., batch run twice)."""


# ----------------------------
# Drive collaborator errors
# ----------------------------
class AuthError(GDriveFsError):
    """Raised when OAuth authentication/refresh fails."""


class PermissionError(GDriveFsError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class InvalidArgumentError(GDriveFsError):
    """Raised when request arguments are invalid (HTTP 400, etc.)."""


class NotFoundError(GDriveFsError):
    """Raised when a Drive resource is not found (HTTP 404)."""


class ConflictError(GDriveFsError):
    """Raised when a conflict occurs (HTTP 409/412)."""


class RateLimitError(GDriveFsError):
    """Raised when rate-limited (HTTP 429)."""


class QuotaExceededError(GDriveFsError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason)."""


class NetworkError(GDriveFsError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(GDriveFsError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


# ----------------------------
# Filesystem operation errors
# ----------------------------
class FilesystemOperationError(GDriveFsError):
    """
    Raised by the adapter when a filesystem operation cannot be completed.

    Attributes:
        path: The path the operation was attempted on.
        operation: Operation name (e.g., "write", "delete").
    """

    operation: str = "operation"

    def __init__(
        self,
        path: str,
        message: str = "",
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        text = f"Unable to {self.operation.replace('_', ' ')} at {path!r}"
        if message:
            text = f"{text}: {message}"
        merged: dict[str, Any] = {"path": path, "operation": self.operation}
        if details:
            merged.update(details)
        super().__init__(text, details=merged, cause=cause)
        self.path = path


class ReadError(FilesystemOperationError):
    operation = "read"


class WriteError(FilesystemOperationError):
    operation = "write"


class UploadCancelledError(WriteError):
    """Raised when a caller cancels a chunked upload between chunk pushes."""

    operation = "upload"


class DeleteError(FilesystemOperationError):
    operation = "delete"


class CreateDirectoryError(FilesystemOperationError):
    operation = "create_directory"


class CopyError(FilesystemOperationError):
    operation = "copy"


class MoveError(FilesystemOperationError):
    operation = "move"


class MoveIncompleteError(MoveError):
    """
    Raised when a move copied the source but could not delete it.

    The destination exists as a duplicate; `copied` holds its metadata so the
    caller can reconcile.
    """

    def __init__(
        self,
        path: str,
        message: str = "",
        *,
        copied: Any = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(path, message, details=details, cause=cause)
        self.copied = copied


class ExistenceCheckError(FilesystemOperationError):
    operation = "check_existence"


class MetadataError(FilesystemOperationError):
    operation = "retrieve_metadata"


class ListError(FilesystemOperationError):
    operation = "list_contents"


class VisibilityError(FilesystemOperationError):
    operation = "set_visibility"


class InvalidVisibilityError(GDriveFsError):
    """Raised when a visibility value is neither public nor private."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gdrivefs exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> GDriveFsError:
    """
    Map an HTTP error to a gdrivefs exception.

    Policy:
        - 401 -> AuthError
        - 403 -> PermissionError (default), but QuotaExceededError if quota-related
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - 400 -> InvalidArgumentError
        - 5xx -> ApiError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
