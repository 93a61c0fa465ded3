import unittest

from gdrivefs.auth import AuthInfo


class TestAuthInfo(unittest.TestCase):
    def test_auth_info_valid_oauth(self) -> None:
        info = AuthInfo(
            kind="oauth",
            data={
                "client_secrets_file": "/tmp/client_secrets.json",
                "token_file": "/tmp/token.json",
            },
        )
        self.assertEqual(info.kind, "oauth")
        self.assertEqual(info.token_file, "/tmp/token.json")

    def test_auth_info_authorized_user(self) -> None:
        info = AuthInfo.authorized_user("cid", "secret", "refresh")
        self.assertEqual(info.kind, "authorized_user")
        self.assertEqual(info.data["refresh_token"], "refresh")

    def test_auth_info_service_account(self) -> None:
        info = AuthInfo(kind="service_account", data={"service_account_file": "/tmp/sa.json"})
        self.assertEqual(info.kind, "service_account")

    def test_auth_info_invalid_kind(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="api_key", data={})

    def test_auth_info_missing_keys(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="oauth", data={"client_secrets_file": "x"})
        with self.assertRaises(ValueError):
            AuthInfo(kind="authorized_user", data={"client_id": "x", "client_secret": "y"})


if __name__ == "__main__":
    unittest.main()
