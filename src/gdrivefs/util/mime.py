from __future__ import annotations

import mimetypes
from typing import Mapping, Optional

import filetype

FOLDER_MIME: str = "application/vnd.google-apps.folder"
GOOGLE_APPS_PREFIX: str = "application/vnd.google-apps."

DEFAULT_MIME: str = "text/plain"

# Sniffed types that say nothing about the content; fall back to the extension.
_UNINFORMATIVE_MIMES: frozenset[str] = frozenset(
    {"application/x-empty", "text/plain", "text/x-asm"}
)

DEFAULT_EXPORT_MAP: dict[str, str] = {
    "application/vnd.google-apps.document": (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    ),
    "application/vnd.google-apps.spreadsheet": (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    ),
    "application/vnd.google-apps.drawing": "application/pdf",
    "application/vnd.google-apps.presentation": (
        "application/vnd.openxmlformats-officedocument.presentationml.presentation"
    ),
    "application/vnd.google-apps.script": "application/vnd.google-apps.script+json",
    "default": "application/pdf",
}


def is_folder(mime_type: Optional[str]) -> bool:
    return mime_type == FOLDER_MIME


def is_google_app(mime_type: Optional[str]) -> bool:
    """Returns True for Google Docs/Sheets/Slides and other 'apps' types (not folders)."""
    if not mime_type or is_folder(mime_type):
        return False
    return mime_type.startswith(GOOGLE_APPS_PREFIX)


def export_mime_for(mime_type: str, export_map: Mapping[str, str]) -> str:
    """Pick the export format for a Google apps document."""
    if mime_type in export_map:
        return export_map[mime_type]
    return export_map.get("default", DEFAULT_EXPORT_MAP["default"])


def guess_mime_type(name: str, content: Optional[bytes] = None) -> str:
    """
    Guess the MIME type from the content first, then from the file name.

    Content sniffing wins unless it yields nothing or a generic text type.
    Defaults to text/plain.
    """
    if content:
        sniffed = filetype.guess_mime(content)
        if sniffed and sniffed not in _UNINFORMATIVE_MIMES:
            return sniffed

    by_name, _ = mimetypes.guess_type(name, strict=False)
    return by_name or DEFAULT_MIME
