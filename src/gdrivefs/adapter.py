"""GoogleDriveAdapter: filesystem operations on top of Google Drive."""

from __future__ import annotations

import io
import logging
import tempfile
import threading
from contextlib import contextmanager
from typing import IO, Callable, Iterator, Optional, Sequence, Type, Union

from gdrivefs.auth import AuthInfo
from gdrivefs.cache import ObjectCache
from gdrivefs.config import AdapterOptions, DeleteAction, PathMode
from gdrivefs.controller import DriveController, quote
from gdrivefs.errors import (
    CopyError,
    CreateDirectoryError,
    DeleteError,
    ExistenceCheckError,
    FilesystemOperationError,
    GDriveFsError,
    InvalidVisibilityError,
    ListError,
    MetadataError,
    MoveError,
    MoveIncompleteError,
    ReadError,
    VisibilityError,
)
from gdrivefs.metadata import normalize_object
from gdrivefs.models import DriveObject, Metadata, UploadSession, Visibility
from gdrivefs.paths import PathSplitter, dirname, normalize_path
from gdrivefs.resolver import ObjectResolver
from gdrivefs.upload import UploadEngine
from gdrivefs.util.mime import export_mime_for, is_google_app
from gdrivefs.visibility import VisibilityManager

logger = logging.getLogger(__name__)

# read_stream() keeps downloads up to this size in memory.
SPOOL_MAX_SIZE = 16 * 1024 * 1024


class GoogleDriveAdapter:
    """
    Filesystem adapter for Google Drive.

    Paths are slash-separated and relative to options.root_id. With the
    default PathMode.ID every segment is a Drive object id (a new file or
    folder is addressed by its name until it exists); PathMode.NAME uses
    display names throughout.

    One adapter owns one object cache. The cache is invalidated by the
    adapter's own mutations only; changes made elsewhere are not seen until
    clear_cache().
    """

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        options: Optional[AdapterOptions] = None,
        scopes: Optional[Sequence[str]] = None,
    ) -> None:
        options = options or AdapterOptions()
        self._setup(DriveController(auth_info, options=options, scopes=scopes), options)

    @classmethod
    def from_controller(
        cls,
        controller: DriveController,
        *,
        options: Optional[AdapterOptions] = None,
    ) -> "GoogleDriveAdapter":
        """Create adapter with an injected controller (useful for tests)."""
        obj = cls.__new__(cls)
        obj._setup(controller, options or controller.options)
        return obj

    def _setup(self, controller: DriveController, options: AdapterOptions) -> None:
        self._controller = controller
        self._options = options
        self._cache = ObjectCache(thread_safe=options.thread_safe)
        self._resolver = ObjectResolver(
            controller,
            self._cache,
            PathSplitter(options.effective_root_id, options.path_mode),
            use_has_dir=options.use_has_dir,
        )
        self._visibility = VisibilityManager(controller, self._cache, options.publish_permission)
        self._uploads = UploadEngine(controller, self._resolver, options)

    @property
    def options(self) -> AdapterOptions:
        return self._options

    @property
    def cache(self) -> ObjectCache:
        return self._cache

    # ----------------------------
    # Existence
    # ----------------------------
    def exists(self, path: str) -> bool:
        with self._translate(ExistenceCheckError, path):
            return self._resolver.resolve(path) is not None

    def file_exists(self, path: str) -> bool:
        with self._translate(ExistenceCheckError, path):
            obj = self._resolver.resolve(path)
        return obj is not None and not obj.is_folder

    def directory_exists(self, path: str) -> bool:
        with self._translate(ExistenceCheckError, path):
            obj = self._resolver.resolve(path)
        return obj is not None and obj.is_folder

    def has_dir(self, path: str) -> bool:
        """True when the folder at path contains at least one sub-folder."""
        with self._translate(ExistenceCheckError, path):
            obj = self._resolver.resolve(path)
            if obj is None or not obj.is_folder:
                return False
            return self._resolver.has_child_folders(obj)

    # ----------------------------
    # Read
    # ----------------------------
    def read(self, path: str) -> bytes:
        buf = io.BytesIO()
        self._download(path, buf)
        return buf.getvalue()

    def read_stream(self, path: str) -> IO[bytes]:
        """Download into a spooled temporary file, rewound for reading."""
        fd = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)
        try:
            self._download(path, fd)
        except BaseException:
            fd.close()
            raise
        fd.seek(0)
        return fd

    # ----------------------------
    # Write
    # ----------------------------
    def write(
        self,
        path: str,
        contents: Union[bytes, str],
        *,
        visibility: Optional[Union[Visibility, str]] = None,
        mime_type: Optional[str] = None,
    ) -> Metadata:
        metadata = self._uploads.upload(path, contents, mime_type=mime_type)
        return self._apply_visibility_hint(path, metadata, visibility)

    def write_stream(
        self,
        path: str,
        stream: IO[bytes],
        *,
        visibility: Optional[Union[Visibility, str]] = None,
        mime_type: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
        progress: Optional[Callable[[UploadSession], None]] = None,
    ) -> Metadata:
        metadata = self._uploads.upload(
            path,
            stream,
            mime_type=mime_type,
            cancel=cancel,
            progress=progress,
        )
        return self._apply_visibility_hint(path, metadata, visibility)

    # ----------------------------
    # Delete
    # ----------------------------
    def delete(self, path: str) -> None:
        """
        Delete the file or folder at path.

        An object with several parents only loses the parent of this path;
        otherwise it is trashed or deleted according to options.delete_action.
        """
        path = normalize_path(path)
        if self._resolver.is_root(path):
            raise DeleteError(path, "refusing to delete the root")

        with self._translate(DeleteError, path):
            obj = self._resolver.resolve(path)
            if obj is None:
                raise DeleteError(path, "not found")
            self._delete_object(path, obj)

    def delete_directory(self, path: str) -> None:
        path = normalize_path(path)
        if self._resolver.is_root(path):
            raise DeleteError(path, "refusing to delete the root")

        with self._translate(DeleteError, path):
            obj = self._resolver.resolve(path)
            if obj is None:
                raise DeleteError(path, "not found")
            if not obj.is_folder:
                raise DeleteError(path, "not a directory")
            self._delete_object(path, obj)

    # ----------------------------
    # Directories, copy and move
    # ----------------------------
    def create_directory(self, path: str) -> Metadata:
        """Return the folder at path, creating it and missing ancestors."""
        path = normalize_path(path)
        with self._translate(CreateDirectoryError, path):
            self._resolver.ensure_directory(path)
            obj = self._resolver.resolve(path, check_has_children=True)
            if obj is None:
                raise CreateDirectoryError(path, "folder vanished after creation")
        return self._normalize(obj, path)

    def copy(self, source: str, destination: str) -> Metadata:
        """
        Copy the file at source to destination, replacing a file already there.

        A public source is published on the copy too. Publishing failures are
        logged by the visibility manager and leave the copy private; check
        the returned metadata's visibility when it matters. Copying a file
        onto itself returns its metadata unchanged.
        """
        source = normalize_path(source)
        destination = normalize_path(destination)
        with self._translate(CopyError, source):
            obj = self._resolver.resolve(source)
            if obj is None or obj.is_folder:
                raise CopyError(source, "source file not found")

            parent_id = self._resolver.ensure_directory(dirname(destination))
            existing = self._resolver.resolve(destination)
            if existing is not None and existing.is_folder:
                raise CopyError(source, f"a directory exists at {destination!r}")
            if existing is not None and existing.id == obj.id:
                return self._normalize(obj, source)

            name = self._target_name(destination, obj, existing)
            copied = self._controller.copy(obj.id, parent_id, new_name=name)
            if existing is not None:
                self._delete_object(destination, existing)
            self._resolver.remember(copied, destination)
            logger.info("Copied %s to %s as %s", source, destination, copied.id)

            if self._visibility.get_visibility(obj) is Visibility.PUBLIC:
                if not self._visibility.publish(copied):
                    logger.warning("Copy %s of public %s stayed private", copied.id, source)
            copied = self._resolver.resolve(destination) or copied
        return self._normalize(copied, destination)

    def move(self, source: str, destination: str) -> Metadata:
        """
        Move a file (copy, then delete the source) or a folder (re-parent).

        A destination that already resolves to the source object is left as is.

        Raises:
            MoveIncompleteError: the copy exists but the source could not be
                deleted; `copied` holds the copy's metadata.
        """
        source = normalize_path(source)
        destination = normalize_path(destination)
        with self._translate(MoveError, source):
            obj = self._resolver.resolve(source)
            if obj is None:
                raise MoveError(source, "source not found")
            target = self._resolver.resolve(destination)
            if target is not None and target.id == obj.id:
                return self._normalize(obj, source)
            if obj.is_folder:
                return self._move_folder(source, destination, obj)

        try:
            copied = self.copy(source, destination)
        except CopyError as exc:
            raise MoveError(source, str(exc), cause=exc) from exc

        try:
            self.delete(source)
        except DeleteError as exc:
            logger.warning("Move of %s left a copy at %s: %s", source, destination, exc)
            raise MoveIncompleteError(
                source,
                f"copied to {destination!r} but the source could not be deleted",
                copied=copied,
                details={"destination": destination},
                cause=exc,
            ) from exc
        return copied

    # ----------------------------
    # Listing
    # ----------------------------
    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[Metadata]:
        """
        Lazily yield the entries of the folder at path.

        A missing folder yields nothing. With deep=True each sub-folder is
        descended after the page that listed it.
        """
        path = normalize_path(path)
        with self._translate(ListError, path):
            folder = self._resolver.resolve_folder(path)
            if folder is None:
                return
            yield from self._walk(folder, "" if self._resolver.is_root(path) else path, deep)

    # ----------------------------
    # Metadata
    # ----------------------------
    def get_metadata(self, path: str) -> Metadata:
        path = normalize_path(path)
        with self._translate(MetadataError, path):
            obj = self._resolver.resolve(path, check_has_children=True)
        if obj is None:
            raise MetadataError(path, "not found")
        return self._normalize(obj, path)

    def mime_type(self, path: str) -> str:
        metadata = self.get_metadata(path)
        if metadata.mime_type is None:
            raise MetadataError(path, "no MIME type for a directory")
        return metadata.mime_type

    def last_modified(self, path: str) -> int:
        metadata = self.get_metadata(path)
        if metadata.last_modified is None:
            raise MetadataError(path, "no modification time reported")
        return metadata.last_modified

    def file_size(self, path: str) -> int:
        metadata = self.get_metadata(path)
        if metadata.is_dir:
            raise MetadataError(path, "no size for a directory")
        return metadata.size

    def visibility(self, path: str) -> Visibility:
        path = normalize_path(path)
        with self._translate(MetadataError, path):
            obj = self._resolver.resolve(path)
        if obj is None:
            raise MetadataError(path, "not found")
        return self._visibility.get_visibility(obj)

    def set_visibility(self, path: str, visibility: Union[Visibility, str]) -> None:
        value = _coerce_visibility(visibility)
        path = normalize_path(path)
        with self._translate(VisibilityError, path):
            obj = self._resolver.resolve(path)
        if obj is None:
            raise VisibilityError(path, "not found")

        if value is Visibility.PUBLIC:
            ok = self._visibility.publish(obj)
        else:
            ok = self._visibility.unpublish(obj)
        if not ok:
            raise VisibilityError(path, f"could not make the object {value.value}")

    def clear_cache(self) -> None:
        self._cache.clear()

    # ----------------------------
    # Internals
    # ----------------------------
    @contextmanager
    def _translate(self, error_cls: Type[FilesystemOperationError], path: str) -> Iterator[None]:
        """Re-raise collaborator errors as error_cls carrying path."""
        try:
            yield
        except FilesystemOperationError:
            raise
        except GDriveFsError as exc:
            raise error_cls(path, str(exc), cause=exc) from exc

    def _normalize(self, obj: DriveObject, path: str) -> Metadata:
        has_dir = None
        if self._options.use_has_dir and obj.is_folder:
            has_dir = bool(self._cache.get_has_dir(obj.id))
        return normalize_object(
            obj,
            dirname(path),
            path_mode=self._options.path_mode,
            publish_permission=self._options.publish_permission,
            additional_fields=self._options.additional_fetch_fields,
            has_dir=has_dir,
        )

    def _download(self, path: str, fd: IO[bytes]) -> None:
        path = normalize_path(path)
        with self._translate(ReadError, path):
            obj = self._resolver.resolve(path)
            if obj is None or obj.is_folder:
                raise ReadError(path, "file not found")

            if is_google_app(obj.mime_type):
                export_mime = export_mime_for(obj.mime_type, self._options.apps_export_map)
                logger.debug("Exporting %s as %s", path, export_mime)
                self._controller.export(obj.id, export_mime, fd)
            else:
                self._controller.download(obj.id, fd)

    def _delete_object(self, path: str, obj: DriveObject) -> None:
        key = self._resolver.cache_key(path)

        if len(obj.parents) > 1:
            parent_id = self._resolver.parent_id(path)
            if parent_id is None or parent_id not in obj.parents:
                raise DeleteError(path, "parent folder not found among the object's parents")
            updated = self._controller.remove_parent(obj.id, parent_id)
            self._cache.put(updated)
            self._cache.put_missing(key)
            logger.info("Removed %s from parent %s", obj.id, parent_id)
            return

        if self._options.delete_action is DeleteAction.DELETE:
            self._controller.delete_permanently(obj.id)
        else:
            self._controller.trash(obj.id)
        logger.info("Deleted %s (%s, %s)", path, obj.id, self._options.delete_action.value)

        # Everything below a folder is gone too.
        if obj.is_folder:
            self._cache.clear()
        else:
            self._cache.invalidate(obj.id)
        if key is not None:
            self._cache.put_missing(key)

    def _move_folder(self, source: str, destination: str, obj: DriveObject) -> Metadata:
        new_parent_id = self._resolver.ensure_directory(dirname(destination))
        if self._resolver.resolve(destination) is not None:
            raise MoveError(source, f"{destination!r} already exists")
        old_parent_id = self._resolver.parent_id(source)

        name = self._target_name(destination, obj, None)
        moved = self._controller.update(
            obj.id,
            body={"name": name} if name != obj.name else None,
            add_parents=new_parent_id if new_parent_id not in obj.parents else None,
            remove_parents=(
                old_parent_id
                if old_parent_id is not None and old_parent_id != new_parent_id
                else None
            ),
        )

        # Descendant paths changed with the folder.
        self._cache.clear()
        self._resolver.remember(moved, destination)
        logger.info("Moved folder %s to %s", source, destination)
        return self._normalize(moved, destination)

    def _target_name(
        self,
        destination: str,
        source: DriveObject,
        existing: Optional[DriveObject],
    ) -> str:
        if existing is not None:
            return existing.name
        _, leaf = self._resolver.name_key(destination)
        if self._options.path_mode is PathMode.ID and leaf == source.id:
            return source.name
        return leaf

    def _walk(self, folder: DriveObject, dir_path: str, deep: bool) -> Iterator[Metadata]:
        query = f"trashed = false and {quote(folder.id)} in parents"
        for page in self._controller.iter_pages(query):
            if self._options.use_has_dir:
                self._resolver.fill_has_dirs(page.objects)

            subfolders = []
            for obj in page.objects:
                child_path = self._resolver.child_path(dir_path, obj)
                self._resolver.remember(obj, child_path)
                yield self._normalize(obj, child_path)
                if deep and obj.is_folder:
                    subfolders.append((obj, child_path))

            for subfolder, subfolder_path in subfolders:
                yield from self._walk(subfolder, subfolder_path, deep)

    def _apply_visibility_hint(
        self,
        path: str,
        metadata: Metadata,
        visibility: Optional[Union[Visibility, str]],
    ) -> Metadata:
        if visibility is None:
            return metadata
        self.set_visibility(path, visibility)
        return self.get_metadata(path)


def _coerce_visibility(value: Union[Visibility, str]) -> Visibility:
    try:
        return Visibility(value)
    except ValueError:
        raise InvalidVisibilityError(
            f"Invalid visibility: {value!r}",
            details={"visibility": value},
        ) from None
