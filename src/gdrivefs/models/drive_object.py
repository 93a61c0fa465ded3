"""Data model for Drive objects as returned by the Drive v3 API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from gdrivefs.util.mime import is_folder
from gdrivefs.util.time import parse_rfc3339_or_none


@dataclass(slots=True)
class DrivePermission:
    """A single sharing permission on a Drive object."""

    type: str
    role: str
    id: Optional[str] = None
    email_address: Optional[str] = None
    domain: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DrivePermission":
        return cls(
            type=str(data.get("type", "")),
            role=str(data.get("role", "")),
            id=data.get("id") if isinstance(data.get("id"), str) else None,
            email_address=data.get("emailAddress"),
            domain=data.get("domain"),
        )

    def matches(self, template: dict[str, Any]) -> bool:
        """True when type and role equal the template's."""
        return self.type == template.get("type") and self.role == template.get("role")


@dataclass(slots=True)
class DriveObject:
    """
    A Drive file or folder.

    Notes:
        - `parents` is usually a single id, but Drive allows several.
        - `size` is None for folders and Google apps documents.
        - `extra` holds additional fetch fields requested through the options.
    """

    id: str
    name: str
    mime_type: str
    parents: list[str] = field(default_factory=list)

    size: Optional[int] = None
    modified_time: Optional[datetime] = None
    permissions: list[DrivePermission] = field(default_factory=list)
    trashed: bool = False
    web_content_link: Optional[str] = None
    web_view_link: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_folder(self) -> bool:
        return is_folder(self.mime_type)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        extra_fields: Sequence[str] = (),
    ) -> "DriveObject":
        """Build from a Drive `files` resource dict, tolerating missing fields."""
        file_id = data.get("id")
        name = data.get("name", "")
        mime_type = data.get("mimeType", "")
        parents = data.get("parents", []) or []

        size = None
        if isinstance(data.get("size"), str) and data["size"].isdigit():
            size = int(data["size"])
        elif isinstance(data.get("size"), int):
            size = data["size"]

        permissions = [
            DrivePermission.from_dict(p)
            for p in data.get("permissions", []) or []
            if isinstance(p, dict)
        ]

        return cls(
            id=file_id if isinstance(file_id, str) else "",
            name=name if isinstance(name, str) else "",
            mime_type=mime_type if isinstance(mime_type, str) else "",
            parents=list(parents) if isinstance(parents, list) else [],
            size=size,
            modified_time=parse_rfc3339_or_none(data.get("modifiedTime")),
            permissions=permissions,
            trashed=bool(data.get("trashed", False)),
            web_content_link=data.get("webContentLink"),
            web_view_link=data.get("webViewLink"),
            extra={f: data[f] for f in extra_fields if f in data},
        )
