"""Credential loading and Drive service construction for gdrivefs."""

from __future__ import annotations

import logging
import os
from typing import Sequence

from gdrivefs.errors import AuthError, InvalidArgumentError

from .auth_info import AuthInfo

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


class OAuthClient:
    """Create credentials and Drive API service objects from an AuthInfo."""

    def __init__(self, auth_info: AuthInfo) -> None:
        self._auth_info = auth_info

    def get_credentials(self, scopes: Sequence[str], ensure_valid: bool = True):
        """
        Return credentials for the given scopes.

        Args:
            scopes: OAuth scopes.
            ensure_valid: If True, refresh credentials when possible.

        Raises:
            AuthError: on load/refresh/flow failures.
            InvalidArgumentError: if scopes is invalid.
        """
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise InvalidArgumentError("scopes must be a non-empty sequence of strings")

        kind = self._auth_info.kind
        if kind == "authorized_user":
            return self._authorized_user_credentials(scopes, ensure_valid)
        if kind == "service_account":
            return self._service_account_credentials(scopes)
        return self._installed_app_credentials(scopes, ensure_valid)

    def build_drive_service(self, scopes: Sequence[str], ensure_valid: bool = True):
        """
        Build a Drive API service resource.

        Returns:
            googleapiclient.discovery.Resource
        """
        try:
            from googleapiclient.discovery import build
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "google-api-python-client is not available",
                details={"hint": "Install google-api-python-client"},
                cause=exc,
            ) from exc

        creds = self.get_credentials(scopes=scopes, ensure_valid=ensure_valid)
        try:
            return build("drive", "v3", credentials=creds, cache_discovery=False)
        except Exception as exc:
            raise AuthError("Failed to build Drive service", cause=exc) from exc

    # ----------------------------
    # Credential kinds
    # ----------------------------
    def _authorized_user_credentials(self, scopes: Sequence[str], ensure_valid: bool):
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        data = self._auth_info.data
        creds = Credentials(
            token=None,
            refresh_token=data["refresh_token"],
            token_uri=data.get("token_uri") or DEFAULT_TOKEN_URI,
            client_id=data["client_id"],
            client_secret=data["client_secret"],
            scopes=list(scopes),
        )
        if not ensure_valid:
            return creds

        try:
            creds.refresh(Request())
        except Exception as exc:
            raise AuthError("Failed to refresh OAuth credentials", cause=exc) from exc
        return creds

    def _service_account_credentials(self, scopes: Sequence[str]):
        from google.oauth2 import service_account

        path = str(self._auth_info.data["service_account_file"])
        try:
            creds = service_account.Credentials.from_service_account_file(
                path,
                scopes=list(scopes),
            )
        except Exception as exc:
            raise AuthError(
                "Failed to load service_account_file",
                details={"service_account_file": path},
                cause=exc,
            ) from exc

        subject = self._auth_info.data.get("subject")
        if subject:
            creds = creds.with_subject(subject)
        return creds

    def _installed_app_credentials(self, scopes: Sequence[str], ensure_valid: bool):
        try:
            from google.auth.transport.requests import Request
            from google.oauth2.credentials import Credentials
            from google_auth_oauthlib.flow import InstalledAppFlow
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "Google auth libraries are not available",
                details={"hint": "Install google-auth and google-auth-oauthlib"},
                cause=exc,
            ) from exc

        token_file = self._auth_info.token_file
        creds = None

        if os.path.exists(token_file):
            try:
                creds = Credentials.from_authorized_user_file(
                    token_file,
                    scopes=list(scopes),
                )
            except Exception as exc:
                raise AuthError(
                    "Failed to load token_file",
                    details={"token_file": token_file},
                    cause=exc,
                ) from exc

            if not ensure_valid:
                return creds

            if not creds.valid and creds.refresh_token:
                try:
                    creds.refresh(Request())
                    self._save_credentials(creds)
                except Exception as exc:
                    raise AuthError(
                        "Failed to refresh OAuth credentials",
                        details={"token_file": token_file},
                        cause=exc,
                    ) from exc

            if creds.valid:
                return creds

        # No usable token: run the browser flow.
        client_secrets = self._auth_info.client_secrets_file
        logger.info("Starting OAuth authorization flow with %s", client_secrets)
        try:
            flow = InstalledAppFlow.from_client_secrets_file(
                client_secrets,
                scopes=list(scopes),
            )
            creds = flow.run_local_server(port=0)
        except Exception as exc:
            raise AuthError(
                "OAuth authorization flow failed",
                details={
                    "client_secrets_file": client_secrets,
                    "token_file": token_file,
                },
                cause=exc,
            ) from exc
        self._save_credentials(creds)
        return creds

    def _save_credentials(self, creds) -> None:
        token_file = self._auth_info.token_file
        token_dir = os.path.dirname(token_file)
        if token_dir:
            os.makedirs(token_dir, exist_ok=True)

        try:
            with open(token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except OSError as exc:
            raise AuthError(
                "Failed to save OAuth token file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
