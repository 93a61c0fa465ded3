from .mime import (
    DEFAULT_EXPORT_MAP,
    FOLDER_MIME,
    export_mime_for,
    guess_mime_type,
    is_folder,
    is_google_app,
)
from .time import parse_rfc3339, parse_rfc3339_or_none, to_timestamp

__all__ = [
    "DEFAULT_EXPORT_MAP",
    "FOLDER_MIME",
    "export_mime_for",
    "guess_mime_type",
    "is_folder",
    "is_google_app",
    "parse_rfc3339",
    "parse_rfc3339_or_none",
    "to_timestamp",
]
