"""Adapter options."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Mapping, Optional

from gdrivefs.util.mime import DEFAULT_EXPORT_MAP


class PathMode(str, Enum):
    """How path segments are interpreted."""

    ID = "id"
    NAME = "name"


class DeleteAction(str, Enum):
    """What deleting the last parent reference of an object does."""

    TRASH = "trash"
    DELETE = "delete"


def _default_publish_permission() -> dict[str, Any]:
    return {"type": "anyone", "role": "reader"}


def _default_export_map() -> dict[str, str]:
    return dict(DEFAULT_EXPORT_MAP)


@dataclass(frozen=True)
class AdapterOptions:
    """
    Options for GoogleDriveAdapter.

    Notes:
        - root_id is the folder (or "root") every path is relative to.
        - When team_drive_id is set and root_id is "root", the Shared Drive
          itself becomes the root.
        - default_params maps a command name ("files.list", "files.get", ...)
          to extra request parameters merged into every such call.
        - memory_limit (bytes) bounds the upload chunk size; None means the
          process address-space limit is used.
    """

    root_id: str = "root"
    path_mode: PathMode = PathMode.ID
    spaces: str = "drive"
    use_has_dir: bool = False
    additional_fetch_fields: tuple[str, ...] = ()
    publish_permission: dict[str, Any] = field(default_factory=_default_publish_permission)
    apps_export_map: dict[str, str] = field(default_factory=_default_export_map)
    default_params: dict[str, dict[str, Any]] = field(default_factory=dict)
    team_drive_id: Optional[str] = None
    corpora: str = "drive"
    delete_action: DeleteAction = DeleteAction.TRASH
    page_size: int = 1000
    max_pages: Optional[int] = None
    memory_limit: Optional[int] = None
    chunk_retries: int = 0
    request_retries: int = 3
    thread_safe: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.root_id, str) or not self.root_id.strip("/"):
            raise ValueError("root_id must be a non-empty string")

        # Accept plain strings for the enum-valued options.
        object.__setattr__(self, "path_mode", PathMode(self.path_mode))
        object.__setattr__(self, "delete_action", DeleteAction(self.delete_action))
        object.__setattr__(
            self, "additional_fetch_fields", tuple(self.additional_fetch_fields)
        )

        for key in ("type", "role"):
            value = self.publish_permission.get(key)
            if not isinstance(value, str) or not value:
                raise ValueError(f"publish_permission['{key}'] must be a non-empty string")

        if not 1 <= self.page_size <= 1000:
            raise ValueError("page_size must be between 1 and 1000")
        if self.max_pages is not None and self.max_pages < 1:
            raise ValueError("max_pages must be positive")
        if self.memory_limit is not None and self.memory_limit < 0:
            raise ValueError("memory_limit must not be negative")
        if self.chunk_retries < 0 or self.request_retries < 0:
            raise ValueError("retry counts must not be negative")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AdapterOptions":
        """Build options from a plain mapping; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown adapter options: {', '.join(unknown)}")
        return cls(**dict(data))

    @property
    def effective_root_id(self) -> str:
        if self.team_drive_id and self.root_id == "root":
            return self.team_drive_id
        return self.root_id.strip("/")
