import argparse
import io
import os
import unittest

from gdrivefs import AdapterOptions, AuthInfo, GoogleDriveAdapter, PathMode, Visibility

DEFAULT_SCOPES = ("https://www.googleapis.com/auth/drive",)


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


class TestGoogleDriveIntegration(unittest.TestCase):
    """
    Integration test with real Google Drive.

    Required env vars:
        - GDRIVEFS_CLIENT_SECRETS: path to OAuth client secrets json
        - GDRIVEFS_TOKEN_FILE: path to token json (will be created/updated)
        - GDRIVEFS_TEST_ROOT_ID: Drive folder ID used as test root (safe sandbox)

    Optional:
        - GDRIVEFS_SCOPES: comma-separated scopes (default: full drive)

    Skipped when the required variables are not set.
    """

    @classmethod
    def setUpClass(cls) -> None:
        cls.client_secrets = _env("GDRIVEFS_CLIENT_SECRETS")
        cls.token_file = _env("GDRIVEFS_TOKEN_FILE")
        cls.root_id = _env("GDRIVEFS_TEST_ROOT_ID")

        scopes_raw = _env("GDRIVEFS_SCOPES")
        if scopes_raw:
            cls.scopes = tuple(s.strip() for s in scopes_raw.split(",") if s.strip())
        else:
            cls.scopes = DEFAULT_SCOPES

    def setUp(self) -> None:
        if not (self.client_secrets and self.token_file and self.root_id):
            self.skipTest("Set GDRIVEFS_CLIENT_SECRETS, GDRIVEFS_TOKEN_FILE, GDRIVEFS_TEST_ROOT_ID")

    def _adapter(self) -> GoogleDriveAdapter:
        auth_info = AuthInfo.oauth(self.client_secrets, self.token_file)
        options = AdapterOptions(root_id=self.root_id, path_mode=PathMode.NAME)
        return GoogleDriveAdapter(auth_info, options=options, scopes=self.scopes)

    def test_file_lifecycle_smoke(self) -> None:
        adapter = self._adapter()
        folder = "gdrivefs_it_tmp"

        try:
            adapter.write(f"{folder}/hello.txt", b"hello from gdrivefs integration test\n")
            self.assertTrue(adapter.file_exists(f"{folder}/hello.txt"))
            self.assertEqual(
                adapter.read(f"{folder}/hello.txt"),
                b"hello from gdrivefs integration test\n",
            )

            adapter.write_stream(f"{folder}/stream.bin", io.BytesIO(b"\x00" * 4096))
            self.assertEqual(adapter.file_size(f"{folder}/stream.bin"), 4096)

            adapter.copy(f"{folder}/hello.txt", f"{folder}/copy.txt")
            adapter.move(f"{folder}/copy.txt", f"{folder}/sub/moved.txt")
            self.assertFalse(adapter.exists(f"{folder}/copy.txt"))
            self.assertTrue(adapter.exists(f"{folder}/sub/moved.txt"))

            adapter.set_visibility(f"{folder}/hello.txt", Visibility.PUBLIC)
            self.assertIs(adapter.visibility(f"{folder}/hello.txt"), Visibility.PUBLIC)
            adapter.set_visibility(f"{folder}/hello.txt", Visibility.PRIVATE)
            self.assertIs(adapter.visibility(f"{folder}/hello.txt"), Visibility.PRIVATE)

            names = sorted(m.path for m in adapter.list_contents(folder, deep=True))
            self.assertIn(f"{folder}/sub/moved.txt", names)
        finally:
            # Trash only; permanent deletion is never the default.
            if adapter.directory_exists(folder):
                adapter.delete_directory(folder)

        self.assertFalse(adapter.exists(folder))

    def test_optional_danger_delete(self) -> None:
        """
        Optional test: permanent delete.

        Enabled only when env GDRIVEFS_DANGER_DELETE=1 is set.
        """
        if _env("GDRIVEFS_DANGER_DELETE") != "1":
            self.skipTest("Set GDRIVEFS_DANGER_DELETE=1 to enable permanent delete test")

        auth_info = AuthInfo.oauth(self.client_secrets, self.token_file)
        options = AdapterOptions(
            root_id=self.root_id,
            path_mode=PathMode.NAME,
            delete_action="delete",
        )
        adapter = GoogleDriveAdapter(auth_info, options=options, scopes=self.scopes)

        adapter.write("gdrivefs_it_delete_tmp/delete_me.txt", b"delete me\n")
        adapter.delete("gdrivefs_it_delete_tmp/delete_me.txt")
        adapter.delete_directory("gdrivefs_it_delete_tmp")

        adapter.clear_cache()
        self.assertFalse(adapter.exists("gdrivefs_it_delete_tmp"))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose unittest output",
    )
    return parser.parse_args()


if __name__ == "__main__":
    args = _parse_args()
    unittest.main(verbosity=2 if args.verbose else 1)
