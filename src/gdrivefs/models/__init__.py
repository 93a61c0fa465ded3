"""Public model exports for gdrivefs."""

from __future__ import annotations

from .drive_object import DriveObject, DrivePermission
from .results import BatchResult, Metadata, ObjectType, Page, UploadSession, Visibility

__all__ = [
    "DriveObject",
    "DrivePermission",
    "BatchResult",
    "Metadata",
    "ObjectType",
    "Page",
    "UploadSession",
    "Visibility",
]
