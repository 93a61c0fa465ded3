"""Path to Drive object resolution on top of the session cache."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from gdrivefs.cache import MISSING, ObjectCache
from gdrivefs.config import PathMode
from gdrivefs.controller import DriveController
from gdrivefs.errors import CreateDirectoryError, NotFoundError
from gdrivefs.models import DriveObject
from gdrivefs.paths import NameKey, PathSplitter, dirname, join_path, normalize_path

logger = logging.getLogger(__name__)


class ObjectResolver:
    """
    Resolve paths to Drive objects, consulting the cache before the API.

    Notes:
        - A miss is not an error: resolve() returns None and remembers the miss.
        - Name collisions under one parent resolve to the first listed object.
        - Only NotFoundError is treated as a miss; other collaborator errors
          propagate to the caller.
        - In ID mode the name index is keyed on the resolved parent folder id,
          since parent segments of new paths may still be names.
    """

    def __init__(
        self,
        controller: DriveController,
        cache: ObjectCache,
        splitter: PathSplitter,
        *,
        use_has_dir: bool = False,
    ) -> None:
        self._controller = controller
        self._cache = cache
        self._splitter = splitter
        self._use_has_dir = use_has_dir
        self._root: Optional[DriveObject] = None

    @property
    def splitter(self) -> PathSplitter:
        return self._splitter

    def name_key(self, path: str) -> NameKey:
        return self._splitter.split(path)

    def cache_key(self, path: str) -> Optional[NameKey]:
        """
        Name-index key of path, or None when its parent folder is missing.

        NAME mode uses the splitter key (the parent key is the full parent
        path). ID mode uses (resolved parent folder id, leaf).
        """
        key = self.name_key(path)
        if self._splitter.mode is PathMode.NAME:
            return key
        parent = self.resolve_folder(dirname(path))
        if parent is None:
            return None
        return parent.id, key[1]

    def is_root(self, path: str) -> bool:
        return self._splitter.is_root(path)

    def root(self) -> DriveObject:
        """The root folder, fetched once per resolver."""
        if self._root is None:
            self._root = self._controller.get(self._splitter.root_id)
            logger.debug("Root %s resolved to %s", self._splitter.root_id, self._root.id)
        return self._root

    # ----------------------------
    # Resolution
    # ----------------------------
    def resolve(self, path: str, *, check_has_children: bool = False) -> Optional[DriveObject]:
        """Return the object at path, or None when nothing lives there."""
        if self.is_root(path):
            obj = self.root()
        else:
            obj = self._resolve_child(path)
            if obj is None:
                return None

        if check_has_children and self._use_has_dir and obj.is_folder:
            self.has_child_folders(obj)
        return obj

    def resolve_folder(self, path: str) -> Optional[DriveObject]:
        obj = self.resolve(path)
        if obj is None or not obj.is_folder:
            return None
        return obj

    def parent_id(self, path: str) -> Optional[str]:
        """Id of the folder containing path, or None when that folder is missing."""
        parent = self.resolve_folder(dirname(path))
        return parent.id if parent is not None else None

    def ensure_directory(self, path: str) -> str:
        """
        Return the id of the folder at path, creating it and its ancestors.

        Raises:
            CreateDirectoryError: if a non-folder occupies path or an ancestor.
        """
        path = normalize_path(path)
        if self.is_root(path):
            return self.root().id

        obj = self.resolve(path)
        if obj is not None:
            if not obj.is_folder:
                raise CreateDirectoryError(path, "a file exists at this path")
            return obj.id

        parent_id = self.ensure_directory(dirname(path))
        _, leaf = self.name_key(path)
        created = self._controller.create_folder(leaf, parent_id)
        self.remember(created, path)
        logger.info("Created folder %s as %s", path, created.id)
        return created.id

    # ----------------------------
    # Has-dir flags
    # ----------------------------
    def has_child_folders(self, folder: DriveObject) -> bool:
        flag = self._cache.get_has_dir(folder.id)
        if flag is None:
            flag = self._controller.has_child_folder(folder.id)
            self._cache.set_has_dir(folder.id, flag)
        return flag

    def fill_has_dirs(self, folders: Iterable[DriveObject]) -> None:
        """Fill unknown has-dir flags for folders with a single batch request."""
        batch = self._controller.batch()
        for folder in folders:
            if folder.is_folder and self._cache.get_has_dir(folder.id) is None:
                batch.add(folder.id, self._controller.has_child_folder_request(folder.id))
        if not len(batch):
            return

        for folder_id, result in batch.execute().items():
            if result.ok:
                self._cache.set_has_dir(folder_id, bool((result.response or {}).get("files")))
            else:
                logger.debug("Has-dir check failed for %s: %s", folder_id, result.error)

    # ----------------------------
    # Cache maintenance
    # ----------------------------
    def remember(self, obj: DriveObject, path: str) -> None:
        """Cache obj under its id and under the cache key of path."""
        self._cache.put(obj, self.cache_key(path))

    def child_path(self, dir_path: str, obj: DriveObject) -> str:
        """Path of obj listed inside dir_path, as this resolver would address it."""
        segment = obj.id if self._splitter.mode is PathMode.ID else obj.name
        return join_path("" if self.is_root(dir_path) else dir_path, segment)

    # ----------------------------
    # Internals
    # ----------------------------
    def _resolve_child(self, path: str) -> Optional[DriveObject]:
        parent_key, leaf = self.name_key(path)

        if self._splitter.mode is PathMode.ID:
            by_id = self._cache.get_by_id(leaf)
            if by_id is not None and self._is_child(by_id, path, parent_key):
                return by_id

        key = self.cache_key(path)
        if key is not None:
            cached = self._cache.get_by_name(key)
            if cached is MISSING:
                logger.debug("Cache miss recorded for %s", path)
                return None
            if isinstance(cached, DriveObject):
                return cached

        obj = self._fetch(path, parent_key, leaf)
        if key is None:
            # Parent folder unreachable: nothing to key a tombstone on.
            if obj is not None:
                self._cache.put(obj)
            return obj

        if obj is None:
            self._cache.put_missing(key)
            return None

        self._cache.put(obj, key)
        return obj

    def _fetch(self, path: str, parent_key: str, leaf: str) -> Optional[DriveObject]:
        if self._splitter.mode is PathMode.ID:
            try:
                obj = self._controller.get(leaf)
            except NotFoundError:
                obj = None
            if obj is not None and not obj.trashed and self._is_child(obj, path, parent_key):
                return obj

        parent = self.resolve_folder(dirname(path))
        if parent is None:
            return None
        return self._controller.find_child(parent.id, leaf)

    def _is_child(self, obj: DriveObject, path: str, parent_key: str) -> bool:
        # Objects outside the folder graph (e.g. shared with me) carry no parents.
        if not obj.parents or parent_key in obj.parents:
            return True
        parent = self.resolve_folder(dirname(path))
        return parent is not None and parent.id in obj.parents
