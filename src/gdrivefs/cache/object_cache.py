"""Session cache of Drive objects, indexed by id and by (parent key, leaf name)."""

from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager, nullcontext
from typing import Optional, Union

from gdrivefs.models import DriveObject
from gdrivefs.paths import NameKey

logger = logging.getLogger(__name__)


class _Missing:
    """Tombstone for a name key known not to exist."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()

CacheValue = Union[DriveObject, _Missing]


class ObjectCache:
    """
    In-process memo tables for one adapter session.

    Notes:
        - No expiry: entries live until invalidated or cleared.
        - The id index and the name index are kept consistent: putting an
          object replaces every name entry that pointed at an older copy, and
          invalidating an id drops its name entries too.
        - Not thread-safe unless built with thread_safe=True.
    """

    def __init__(self, *, thread_safe: bool = False) -> None:
        self._by_id: dict[str, DriveObject] = {}
        self._by_name: dict[NameKey, CacheValue] = {}
        self._names_of: dict[str, set[NameKey]] = {}
        self._has_dirs: dict[str, bool] = {}
        self._lock: AbstractContextManager = threading.RLock() if thread_safe else nullcontext()

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)

    # ----------------------------
    # Lookups
    # ----------------------------
    def get_by_id(self, object_id: str) -> Optional[DriveObject]:
        with self._lock:
            return self._by_id.get(object_id)

    def get_by_name(self, name_key: NameKey) -> Optional[CacheValue]:
        """Return the object, MISSING for a tombstone, or None when unknown."""
        with self._lock:
            return self._by_name.get(name_key)

    def get_has_dir(self, object_id: str) -> Optional[bool]:
        with self._lock:
            return self._has_dirs.get(object_id)

    # ----------------------------
    # Mutations
    # ----------------------------
    def put(self, obj: DriveObject, name_key: Optional[NameKey] = None) -> None:
        """Store obj under its id and, if given, under name_key."""
        with self._lock:
            self._by_id[obj.id] = obj
            names = self._names_of.setdefault(obj.id, set())
            for key in names:
                if isinstance(self._by_name.get(key), DriveObject):
                    self._by_name[key] = obj
            if name_key is not None:
                self._drop_name(name_key)
                self._by_name[name_key] = obj
                names.add(name_key)

    def put_missing(self, name_key: NameKey) -> None:
        with self._lock:
            self._drop_name(name_key)
            self._by_name[name_key] = MISSING

    def set_has_dir(self, object_id: str, has_dir: bool) -> None:
        with self._lock:
            self._has_dirs[object_id] = has_dir

    def invalidate(self, object_id: str) -> None:
        """Forget an object under both indices."""
        with self._lock:
            self._by_id.pop(object_id, None)
            self._has_dirs.pop(object_id, None)
            for key in self._names_of.pop(object_id, set()):
                self._by_name.pop(key, None)
        logger.debug("Cache invalidated: %s", object_id)

    def invalidate_name(self, name_key: NameKey) -> None:
        with self._lock:
            self._drop_name(name_key)

    def clear(self) -> None:
        with self._lock:
            self._by_id.clear()
            self._by_name.clear()
            self._names_of.clear()
            self._has_dirs.clear()
        logger.debug("Cache cleared")

    def _drop_name(self, name_key: NameKey) -> None:
        previous = self._by_name.pop(name_key, None)
        if isinstance(previous, DriveObject):
            self._names_of.get(previous.id, set()).discard(name_key)
