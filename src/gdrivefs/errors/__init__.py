"""Public error exports for gdrivefs."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    CopyError,
    CreateDirectoryError,
    DeleteError,
    ExistenceCheckError,
    FilesystemOperationError,
    GDriveFsError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidStateError,
    InvalidVisibilityError,
    ListError,
    MetadataError,
    MoveError,
    MoveIncompleteError,
    NetworkError,
    NotFoundError,
    PermissionError,
    QuotaExceededError,
    RateLimitError,
    ReadError,
    UploadCancelledError,
    VisibilityError,
    WriteError,
    map_http_error,
)

__all__ = [
    "GDriveFsError",
    "InvalidStateError",
    "AuthError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "FilesystemOperationError",
    "ReadError",
    "WriteError",
    "UploadCancelledError",
    "DeleteError",
    "CreateDirectoryError",
    "CopyError",
    "MoveError",
    "MoveIncompleteError",
    "ExistenceCheckError",
    "MetadataError",
    "ListError",
    "VisibilityError",
    "InvalidVisibilityError",
    "HttpErrorInfo",
    "map_http_error",
]
