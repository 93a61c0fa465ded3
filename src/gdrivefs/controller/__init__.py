"""Drive API collaborator."""

from __future__ import annotations

from .batch import DriveBatch
from .drive_controller import DriveController, quote
from .fields import FILE_FIELDS, file_fields, list_fields

__all__ = [
    "DriveBatch",
    "DriveController",
    "FILE_FIELDS",
    "file_fields",
    "list_fields",
    "quote",
]
