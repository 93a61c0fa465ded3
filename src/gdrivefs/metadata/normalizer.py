"""Drive object -> framework metadata record."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from gdrivefs.config import PathMode
from gdrivefs.models import DriveObject, Metadata, Visibility
from gdrivefs.paths import join_path, split_file_extension
from gdrivefs.util.time import to_timestamp
from gdrivefs.visibility import is_public


def normalize_object(
    obj: DriveObject,
    dirname: str,
    *,
    path_mode: PathMode = PathMode.ID,
    publish_permission: Optional[Mapping[str, Any]] = None,
    additional_fields: Sequence[str] = (),
    has_dir: Optional[bool] = None,
) -> Metadata:
    """
    Build the Metadata of obj listed under dirname.

    Directories report size 0 and no MIME type; has_dir is only meaningful
    for directories and is dropped for files.
    """
    filename, extension = split_file_extension(obj.name)
    segment = obj.id if path_mode is PathMode.ID else obj.name

    visibility = Visibility.PRIVATE
    if publish_permission is not None and is_public(obj.permissions, publish_permission):
        visibility = Visibility.PUBLIC

    if obj.is_folder:
        return Metadata(
            path=join_path(dirname, segment),
            type="dir",
            name=obj.name,
            filename=filename,
            extension=extension,
            size=0,
            last_modified=to_timestamp(obj.modified_time),
            visibility=visibility,
            has_dir=has_dir,
            extra={f: obj.extra[f] for f in additional_fields if f in obj.extra},
        )

    return Metadata(
        path=join_path(dirname, segment),
        type="file",
        name=obj.name,
        filename=filename,
        extension=extension,
        size=obj.size or 0,
        mime_type=obj.mime_type or None,
        last_modified=to_timestamp(obj.modified_time),
        visibility=visibility,
        extra={f: obj.extra[f] for f in additional_fields if f in obj.extra},
    )
