"""Field masks for Google Drive API responses."""

from __future__ import annotations

from typing import Sequence

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "modifiedTime,"
    "parents,"
    "permissions,"
    "size,"
    "trashed,"
    "webContentLink,"
    "webViewLink"
)


def file_fields(additional: Sequence[str] = ()) -> str:
    """Fields for files.get/create/update/copy, plus any additional fields."""
    extra = [f for f in additional if f and f not in FILE_FIELDS.split(",")]
    return ",".join([FILE_FIELDS, *extra]) if extra else FILE_FIELDS


def list_fields(additional: Sequence[str] = ()) -> str:
    return f"nextPageToken,files({file_fields(additional)})"
