"""gdrivefs public API."""

from __future__ import annotations

import logging

from gdrivefs.adapter import GoogleDriveAdapter
from gdrivefs.auth import AuthInfo, OAuthClient
from gdrivefs.config import AdapterOptions, DeleteAction, PathMode
from gdrivefs.controller import DriveBatch, DriveController
from gdrivefs.errors import (
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
from gdrivefs.models import (
    BatchResult,
    DriveObject,
    DrivePermission,
    Metadata,
    Page,
    UploadSession,
    Visibility,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # High-level
    "GoogleDriveAdapter",
    "AdapterOptions",
    "DeleteAction",
    "PathMode",
    # Auth / collaborator
    "AuthInfo",
    "OAuthClient",
    "DriveController",
    "DriveBatch",
    # Models
    "BatchResult",
    "DriveObject",
    "DrivePermission",
    "Metadata",
    "Page",
    "UploadSession",
    "Visibility",
    # Errors
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
    "ExistenceCheckError",
    "ReadError",
    "WriteError",
    "UploadCancelledError",
    "DeleteError",
    "CreateDirectoryError",
    "CopyError",
    "MoveError",
    "MoveIncompleteError",
    "MetadataError",
    "ListError",
    "VisibilityError",
    "InvalidVisibilityError",
    "HttpErrorInfo",
    "map_http_error",
]
