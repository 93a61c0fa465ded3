import unittest

from fakes import FakeDriveController

from gdrivefs.cache import ObjectCache
from gdrivefs.errors import PermissionError, QuotaExceededError
from gdrivefs.models import DrivePermission, Visibility
from gdrivefs.visibility import VisibilityManager, is_public

PUBLISH = {"type": "anyone", "role": "reader"}


class TestIsPublic(unittest.TestCase):
    def test_matches_type_and_role(self) -> None:
        self.assertTrue(is_public([DrivePermission(type="anyone", role="reader")], PUBLISH))
        self.assertFalse(is_public([DrivePermission(type="anyone", role="writer")], PUBLISH))
        self.assertFalse(is_public([DrivePermission(type="user", role="reader")], PUBLISH))
        self.assertFalse(is_public([], PUBLISH))


class TestVisibilityManager(unittest.TestCase):
    def setUp(self) -> None:
        self.fake = FakeDriveController()
        self.cache = ObjectCache()
        self.manager = VisibilityManager(self.fake, self.cache, PUBLISH)
        self.file = self.fake.add_file("a.txt")

    def test_publish_then_unpublish(self) -> None:
        obj = self.fake.get(self.file.id)
        self.assertIs(self.manager.get_visibility(obj), Visibility.PRIVATE)

        self.assertTrue(self.manager.publish(obj))
        refreshed = self.cache.get_by_id(self.file.id)
        self.assertIs(self.manager.get_visibility(refreshed), Visibility.PUBLIC)

        self.assertTrue(self.manager.unpublish(refreshed))
        self.assertIs(
            self.manager.get_visibility(self.cache.get_by_id(self.file.id)),
            Visibility.PRIVATE,
        )
        self.assertEqual(self.fake.objects[self.file.id].permissions, [])

    def test_publish_is_idempotent(self) -> None:
        self.assertTrue(self.manager.publish(self.fake.get(self.file.id)))
        self.assertTrue(self.manager.publish(self.cache.get_by_id(self.file.id)))

        self.assertEqual(self.fake.calls.count("create_permission"), 1)

    def test_unpublish_keeps_other_permissions(self) -> None:
        self.fake.objects[self.file.id].permissions = [
            DrivePermission(type="user", role="owner", id="owner"),
            DrivePermission(type="anyone", role="reader", id="anyone1"),
            DrivePermission(type="anyone", role="reader", id="anyone2"),
        ]

        self.assertTrue(self.manager.unpublish(self.fake.get(self.file.id)))

        remaining = [p.id for p in self.fake.objects[self.file.id].permissions]
        self.assertEqual(remaining, ["owner"])

    def test_publish_failure_returns_false(self) -> None:
        self.fake.failures["create_permission"] = PermissionError("sharing disabled")

        with self.assertLogs("gdrivefs.visibility.manager", level="WARNING"):
            self.assertFalse(self.manager.publish(self.fake.get(self.file.id)))

    def test_unpublish_failure_returns_false(self) -> None:
        self.fake.objects[self.file.id].permissions = [
            DrivePermission(type="anyone", role="reader", id="anyone1"),
        ]
        self.fake.failures["delete_permission"] = QuotaExceededError("quota")

        with self.assertLogs("gdrivefs.visibility.manager", level="WARNING"):
            self.assertFalse(self.manager.unpublish(self.fake.get(self.file.id)))


if __name__ == "__main__":
    unittest.main()
