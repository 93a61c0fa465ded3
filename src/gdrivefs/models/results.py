"""Result models returned by the Drive collaborator and the adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional

from .drive_object import DriveObject

ObjectType = Literal["file", "dir"]


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


@dataclass(slots=True)
class Page:
    """One page of a `files.list` call."""

    objects: list[DriveObject]
    next_page_token: Optional[str] = None


@dataclass(slots=True)
class BatchResult:
    """Outcome of one request inside a batch: a response or an error, never both."""

    request_id: str
    response: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class Metadata:
    """Normalized file/directory record handed back to callers."""

    path: str
    type: ObjectType
    name: str
    filename: str
    extension: str
    size: int = 0
    mime_type: Optional[str] = None
    last_modified: Optional[int] = None
    visibility: Visibility = Visibility.PRIVATE
    has_dir: Optional[bool] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


@dataclass(slots=True)
class UploadSession:
    """Progress of one chunked resumable upload."""

    path: str
    chunk_size: int
    total_size: Optional[int] = None
    position: int = 0
    bytes_sent: int = 0
    chunks_sent: int = 0
    resumable_uri: Optional[str] = None
