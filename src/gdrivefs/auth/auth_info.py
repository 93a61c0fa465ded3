"""Authentication information for gdrivefs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    # Installed-app flow with a token cache on disk.
    "oauth": ("client_secrets_file", "token_file"),
    # Long-lived refresh token obtained elsewhere.
    "authorized_user": ("client_id", "client_secret", "refresh_token"),
    "service_account": ("service_account_file",),
}


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Authentication information.

    Supported kinds:
        kind = "oauth"
            - client_secrets_file
            - token_file
        kind = "authorized_user"
            - client_id
            - client_secret
            - refresh_token
            - token_uri (optional)
        kind = "service_account"
            - service_account_file
            - subject (optional, domain-wide delegation)
    """

    kind: str
    data: dict[str, Any]

    def __post_init__(self) -> None:
        if self.kind not in _REQUIRED_KEYS:
            raise ValueError(
                f"AuthInfo.kind must be one of {', '.join(sorted(_REQUIRED_KEYS))}"
            )

        if not isinstance(self.data, dict):
            raise TypeError("AuthInfo.data must be a dict")

        for key in _REQUIRED_KEYS[self.kind]:
            value = self.data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AuthInfo.data['{key}'] must be a non-empty string")

    @classmethod
    def oauth(cls, client_secrets_file: str, token_file: str) -> "AuthInfo":
        return cls(
            kind="oauth",
            data={"client_secrets_file": client_secrets_file, "token_file": token_file},
        )

    @classmethod
    def authorized_user(
        cls,
        client_id: str,
        client_secret: str,
        refresh_token: str,
    ) -> "AuthInfo":
        return cls(
            kind="authorized_user",
            data={
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
            },
        )

    @property
    def client_secrets_file(self) -> str:
        """Path to OAuth client secrets JSON."""
        return str(self.data["client_secrets_file"])

    @property
    def token_file(self) -> str:
        """Path to OAuth token JSON (authorized user)."""
        return str(self.data["token_file"])
