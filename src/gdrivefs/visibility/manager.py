"""Public/private visibility on top of Drive's permission lists."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from gdrivefs.cache import ObjectCache
from gdrivefs.controller import DriveController
from gdrivefs.errors import GDriveFsError
from gdrivefs.models import DriveObject, DrivePermission, Visibility

logger = logging.getLogger(__name__)


def is_public(permissions: Iterable[DrivePermission], template: Mapping[str, Any]) -> bool:
    """True when any permission has the template's type and role."""
    return any(p.matches(dict(template)) for p in permissions)


class VisibilityManager:
    """
    Map the publish permission onto a binary visibility flag.

    publish() and unpublish() never raise for collaborator failures: they log
    a warning and return False, and callers must check the result.
    """

    def __init__(
        self,
        controller: DriveController,
        cache: ObjectCache,
        publish_permission: Mapping[str, Any],
    ) -> None:
        self._controller = controller
        self._cache = cache
        self._template = dict(publish_permission)

    def get_visibility(self, obj: DriveObject) -> Visibility:
        if is_public(obj.permissions, self._template):
            return Visibility.PUBLIC
        return Visibility.PRIVATE

    def publish(self, obj: DriveObject) -> bool:
        if self.get_visibility(obj) is Visibility.PUBLIC:
            return True

        try:
            self._controller.create_permission(obj.id, self._template)
        except GDriveFsError as exc:
            logger.warning("Could not publish %s: %s", obj.id, exc)
            return False

        self._refresh(obj)
        return True

    def unpublish(self, obj: DriveObject) -> bool:
        try:
            permissions = self._controller.list_permissions(obj.id)
            removed = 0
            for permission in permissions:
                if permission.id and permission.matches(self._template):
                    self._controller.delete_permission(obj.id, permission.id)
                    removed += 1
        except GDriveFsError as exc:
            logger.warning("Could not unpublish %s: %s", obj.id, exc)
            self._cache.invalidate(obj.id)
            return False

        if removed:
            self._refresh(obj)
        return True

    def _refresh(self, obj: DriveObject) -> None:
        try:
            self._cache.put(self._controller.get(obj.id))
        except GDriveFsError as exc:
            logger.debug("Refresh after visibility change failed for %s: %s", obj.id, exc)
            self._cache.invalidate(obj.id)
