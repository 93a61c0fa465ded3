import unittest
from datetime import datetime, timezone

from gdrivefs.config import PathMode
from gdrivefs.metadata import normalize_object
from gdrivefs.models import DriveObject, DrivePermission, Visibility
from gdrivefs.util.mime import FOLDER_MIME

PUBLISH = {"type": "anyone", "role": "reader"}
MODIFIED = datetime(2025, 1, 1, tzinfo=timezone.utc)


class TestNormalizeObject(unittest.TestCase):
    def test_file_record(self) -> None:
        obj = DriveObject(
            id="F1",
            name="archive.tar.gz",
            mime_type="application/gzip",
            parents=["P1"],
            size=42,
            modified_time=MODIFIED,
        )

        meta = normalize_object(obj, "P1", publish_permission=PUBLISH)

        self.assertEqual(meta.path, "P1/F1")
        self.assertEqual(meta.type, "file")
        self.assertEqual(meta.filename, "archive.tar")
        self.assertEqual(meta.extension, "gz")
        self.assertEqual(meta.size, 42)
        self.assertEqual(meta.mime_type, "application/gzip")
        self.assertEqual(meta.last_modified, int(MODIFIED.timestamp()))
        self.assertIs(meta.visibility, Visibility.PRIVATE)
        self.assertIsNone(meta.has_dir)

    def test_directory_has_zero_size_and_no_mime(self) -> None:
        obj = DriveObject(id="D1", name="docs", mime_type=FOLDER_MIME, size=None)

        meta = normalize_object(obj, "", has_dir=True)

        self.assertEqual(meta.path, "D1")
        self.assertTrue(meta.is_dir)
        self.assertEqual(meta.size, 0)
        self.assertIsNone(meta.mime_type)
        self.assertTrue(meta.has_dir)
        self.assertEqual(meta.extension, "")

    def test_name_mode_uses_display_name(self) -> None:
        obj = DriveObject(id="F1", name="notes.txt", mime_type="text/plain")

        meta = normalize_object(obj, "docs/2024", path_mode=PathMode.NAME)

        self.assertEqual(meta.path, "docs/2024/notes.txt")

    def test_public_permission_and_additional_fields(self) -> None:
        obj = DriveObject(
            id="F1",
            name="a",
            mime_type="text/plain",
            permissions=[DrivePermission(type="anyone", role="reader", id="p")],
            extra={"description": "hello", "starred": True},
        )

        meta = normalize_object(
            obj,
            "",
            publish_permission=PUBLISH,
            additional_fields=("description",),
        )

        self.assertIs(meta.visibility, Visibility.PUBLIC)
        self.assertEqual(meta.extra, {"description": "hello"})

    def test_missing_size_and_time(self) -> None:
        obj = DriveObject(id="F1", name="doc", mime_type="application/vnd.google-apps.document")

        meta = normalize_object(obj, "")

        self.assertEqual(meta.size, 0)
        self.assertIsNone(meta.last_modified)


if __name__ == "__main__":
    unittest.main()
