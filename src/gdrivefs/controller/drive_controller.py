"""Google Drive API controller: the only module that talks to the Drive service."""

from __future__ import annotations

import io
import json
import logging
import time
from dataclasses import dataclass
from typing import IO, Any, Callable, Iterator, Optional, Sequence, TypeVar

from google.auth.exceptions import RefreshError, TransportError
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload, MediaUpload

from gdrivefs.auth import AuthInfo, OAuthClient
from gdrivefs.config import AdapterOptions
from gdrivefs.errors import (
    ApiError,
    AuthError,
    GDriveFsError,
    HttpErrorInfo,
    NetworkError,
    RateLimitError,
    map_http_error,
)
from gdrivefs.models import DriveObject, DrivePermission, Page
from gdrivefs.util.mime import FOLDER_MIME

from .batch import DriveBatch
from .fields import file_fields, list_fields

logger = logging.getLogger(__name__)

T = TypeVar("T")

PERMISSION_FIELDS: str = "id,type,role,emailAddress,domain"

# Commands that accept supportsAllDrives.
_ALL_DRIVES_COMMANDS: tuple[str, ...] = (
    "files.copy",
    "files.create",
    "files.delete",
    "files.get",
    "files.list",
    "files.update",
    "permissions.create",
    "permissions.delete",
    "permissions.list",
)


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class DriveController:
    """
    Drive API controller.

    Notes:
        - Every call merges the per-command default params from the options.
        - Collaborator errors are raised as gdrivefs errors; 429/5xx/network
          failures are retried with exponential backoff.
        - Chunk pushes of a resumable upload are NOT retried here; see
          next_chunk.
    """

    DEFAULT_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive",)

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        options: Optional[AdapterOptions] = None,
        scopes: Optional[Sequence[str]] = None,
    ) -> None:
        use_scopes = list(scopes) if scopes is not None else list(self.DEFAULT_SCOPES)
        client = OAuthClient(auth_info)
        service = client.build_drive_service(use_scopes, ensure_valid=True)
        self._setup(service, options or AdapterOptions())

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        options: Optional[AdapterOptions] = None,
    ) -> "DriveController":
        """Create controller from a pre-built Drive service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._setup(service, options or AdapterOptions())
        return obj

    def _setup(self, service: Any, options: AdapterOptions) -> None:
        self._service = service
        self._options = options
        self._retry_policy = _RetryPolicy(max_retries=options.request_retries)
        self._extra_fields = options.additional_fetch_fields
        self._file_fields = file_fields(options.additional_fetch_fields)
        self._list_fields = list_fields(options.additional_fetch_fields)
        self._default_params = _build_default_params(options)

    @property
    def options(self) -> AdapterOptions:
        return self._options

    # ----------------------------
    # Read
    # ----------------------------
    def get(self, file_id: str) -> DriveObject:
        req = self._service.files().get(
            **self._params("files.get", fileId=file_id, fields=self._file_fields)
        )
        return self._to_object(self._execute(req.execute))

    def list_page(
        self,
        query: str,
        *,
        page_token: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Page:
        req = self._service.files().list(
            **self._params(
                "files.list",
                q=query,
                fields=self._list_fields,
                spaces=self._options.spaces,
                pageSize=page_size or self._options.page_size,
                pageToken=page_token,
            )
        )
        data = self._execute(req.execute)
        objects = [self._to_object(f) for f in data.get("files", []) or []]
        return Page(objects=objects, next_page_token=data.get("nextPageToken") or None)

    def iter_pages(self, query: str, *, page_size: Optional[int] = None) -> Iterator[Page]:
        """Follow continuation tokens until exhausted or max_pages is reached."""
        page_token: Optional[str] = None
        pages = 0
        while True:
            page = self.list_page(query, page_token=page_token, page_size=page_size)
            pages += 1
            yield page

            page_token = page.next_page_token
            if not page_token:
                return
            if self._options.max_pages is not None and pages >= self._options.max_pages:
                logger.debug("Page cap %d reached for query %s", pages, query)
                return

    def find(
        self,
        query: str,
        *,
        parent_id: Optional[str] = None,
        include_trashed: bool = False,
    ) -> list[DriveObject]:
        q = query
        if parent_id is not None:
            q = f"({q}) and {quote(parent_id)} in parents"
        if not include_trashed and "trashed" not in q:
            q = f"({q}) and trashed = false"

        results: list[DriveObject] = []
        for page in self.iter_pages(q):
            results.extend(page.objects)
        return results

    def find_child(self, parent_id: str, name: str) -> Optional[DriveObject]:
        """First non-trashed object named `name` under parent_id; others are ignored."""
        q = f"trashed = false and name = {quote(name)} and {quote(parent_id)} in parents"
        for page in self.iter_pages(q):
            if page.objects:
                if len(page.objects) > 1:
                    logger.debug(
                        "Duplicate name %r under %s; using %s",
                        name,
                        parent_id,
                        page.objects[0].id,
                    )
                return page.objects[0]
        return None

    def has_child_folder_request(self, folder_id: str) -> Any:
        """Unexecuted list request that returns at most one sub-folder of folder_id."""
        q = (
            f"trashed = false and {quote(folder_id)} in parents "
            f"and mimeType = {quote(FOLDER_MIME)}"
        )
        return self._service.files().list(
            **self._params(
                "files.list",
                q=q,
                fields="files(id)",
                spaces=self._options.spaces,
                pageSize=1,
            )
        )

    def has_child_folder(self, folder_id: str) -> bool:
        data = self._execute(self.has_child_folder_request(folder_id).execute)
        return bool(data.get("files"))

    def download(self, file_id: str, fd: IO[bytes]) -> None:
        req = self._service.files().get_media(**self._params("files.get", fileId=file_id))
        self._download_into(req, fd)

    def export(self, file_id: str, mime_type: str, fd: IO[bytes]) -> None:
        req = self._service.files().export_media(
            **self._params("files.export", fileId=file_id, mimeType=mime_type)
        )
        self._download_into(req, fd)

    # ----------------------------
    # Write
    # ----------------------------
    def create_folder(self, name: str, parent_id: str) -> DriveObject:
        body = {"name": name, "mimeType": FOLDER_MIME, "parents": [parent_id]}
        req = self._service.files().create(
            **self._params("files.create", body=body, fields=self._file_fields)
        )
        return self._to_object(self._execute(req.execute))

    def create_file(
        self,
        name: str,
        parent_id: str,
        *,
        mime_type: str,
        data: Optional[bytes] = None,
    ) -> DriveObject:
        """Single-request create; data=None creates an object without content."""
        body = {"name": name, "mimeType": mime_type, "parents": [parent_id]}
        req = self._service.files().create(
            **self._params(
                "files.create",
                body=body,
                media_body=_media(data, mime_type),
                fields=self._file_fields,
            )
        )
        return self._to_object(self._execute(req.execute))

    def update_content(
        self,
        file_id: str,
        *,
        mime_type: str,
        data: Optional[bytes] = None,
    ) -> DriveObject:
        req = self._service.files().update(
            **self._params(
                "files.update",
                fileId=file_id,
                body={"mimeType": mime_type},
                media_body=_media(data, mime_type),
                fields=self._file_fields,
            )
        )
        return self._to_object(self._execute(req.execute))

    def resumable_request(
        self,
        media: MediaUpload,
        *,
        name: Optional[str] = None,
        parent_id: Optional[str] = None,
        file_id: Optional[str] = None,
    ) -> Any:
        """
        Build (without sending) a resumable create or update request.

        The session is opened by the first next_chunk call.
        """
        if file_id is not None:
            return self._service.files().update(
                **self._params(
                    "files.update",
                    fileId=file_id,
                    body={"mimeType": media.mimetype()},
                    media_body=media,
                    fields=self._file_fields,
                )
            )

        body = {"name": name, "mimeType": media.mimetype(), "parents": [parent_id]}
        return self._service.files().create(
            **self._params(
                "files.create",
                body=body,
                media_body=media,
                fields=self._file_fields,
            )
        )

    def next_chunk(self, request: Any) -> tuple[Any, Optional[DriveObject]]:
        """
        Push one chunk of a resumable request.

        Returns (progress, None) while the upload continues and
        (None, finalized object) after the last chunk. Retries are limited to
        options.chunk_retries and done by the client library per chunk.
        """
        try:
            status, response = request.next_chunk(num_retries=self._options.chunk_retries)
        except Exception as exc:
            raise self._map_exception(exc) from exc
        if response is None:
            return status, None
        return status, self._to_object(response)

    def update(
        self,
        file_id: str,
        *,
        body: Optional[dict[str, Any]] = None,
        add_parents: Optional[str] = None,
        remove_parents: Optional[str] = None,
    ) -> DriveObject:
        req = self._service.files().update(
            **self._params(
                "files.update",
                fileId=file_id,
                body=body or {},
                addParents=add_parents,
                removeParents=remove_parents,
                fields=self._file_fields,
            )
        )
        return self._to_object(self._execute(req.execute))

    def remove_parent(self, file_id: str, parent_id: str) -> DriveObject:
        """Drop one parent edge; the object stays under its other parents."""
        return self.update(file_id, remove_parents=parent_id)

    def copy(
        self,
        file_id: str,
        new_parent_id: str,
        *,
        new_name: Optional[str] = None,
    ) -> DriveObject:
        body: dict[str, Any] = {"parents": [new_parent_id]}
        if new_name is not None:
            body["name"] = new_name

        req = self._service.files().copy(
            **self._params("files.copy", fileId=file_id, body=body, fields=self._file_fields)
        )
        return self._to_object(self._execute(req.execute))

    def trash(self, file_id: str) -> None:
        req = self._service.files().update(
            **self._params("files.update", fileId=file_id, body={"trashed": True}, fields="id")
        )
        self._execute(req.execute)

    def delete_permanently(self, file_id: str) -> None:
        req = self._service.files().delete(**self._params("files.delete", fileId=file_id))
        self._execute(req.execute)

    # ----------------------------
    # Permissions
    # ----------------------------
    def list_permissions(self, file_id: str) -> list[DrivePermission]:
        permissions: list[DrivePermission] = []
        page_token: Optional[str] = None
        while True:
            req = self._service.permissions().list(
                **self._params(
                    "permissions.list",
                    fileId=file_id,
                    fields=f"nextPageToken,permissions({PERMISSION_FIELDS})",
                    pageToken=page_token,
                )
            )
            data = self._execute(req.execute)
            permissions.extend(
                DrivePermission.from_dict(p) for p in data.get("permissions", []) or []
            )
            page_token = data.get("nextPageToken")
            if not page_token:
                return permissions

    def create_permission(self, file_id: str, permission: dict[str, Any]) -> DrivePermission:
        req = self._service.permissions().create(
            **self._params(
                "permissions.create",
                fileId=file_id,
                body=dict(permission),
                fields=PERMISSION_FIELDS,
            )
        )
        return DrivePermission.from_dict(self._execute(req.execute))

    def delete_permission(self, file_id: str, permission_id: str) -> None:
        req = self._service.permissions().delete(
            **self._params("permissions.delete", fileId=file_id, permissionId=permission_id)
        )
        self._execute(req.execute)

    # ----------------------------
    # Batch
    # ----------------------------
    def batch(self) -> DriveBatch:
        return DriveBatch(
            self._service.new_batch_http_request,
            execute=self._execute,
            map_exception=self._map_exception,
        )

    # ----------------------------
    # Internals
    # ----------------------------
    def _params(self, command: str, **kwargs: Any) -> dict[str, Any]:
        params = dict(self._default_params.get(command, {}))
        params.update({k: v for k, v in kwargs.items() if v is not None})
        return params

    def _to_object(self, data: dict[str, Any]) -> DriveObject:
        return DriveObject.from_dict(data, extra_fields=self._extra_fields)

    def _download_into(self, req: Any, fd: IO[bytes]) -> None:
        downloader = MediaIoBaseDownload(fd, req)
        done = False
        while not done:
            _, done = self._execute(downloader.next_chunk)

    def _execute(self, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    logger.warning(
                        "Drive request failed (%s), retry %d/%d in %.1fs",
                        mapped,
                        attempt + 1,
                        self._retry_policy.max_retries,
                        delay,
                    )
                    time.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, RateLimitError):
            return True
        if isinstance(exc, NetworkError):
            return True
        if isinstance(exc, ApiError):
            status_code = getattr(exc, "details", {}).get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: BaseException) -> GDriveFsError:
        if isinstance(exc, GDriveFsError):
            return exc

        if isinstance(exc, HttpError):
            info = _http_error_to_info(exc)
            return map_http_error(info, cause=exc)

        if isinstance(exc, RefreshError):
            return AuthError("Access token could not be refreshed", cause=exc)

        if isinstance(exc, (OSError, TimeoutError, TransportError)):
            return NetworkError("Network error", cause=exc)

        return ApiError("Drive API error", cause=exc)


def quote(value: str) -> str:
    """Quote a value for the Drive query language."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _media(data: Optional[bytes], mime_type: str) -> Optional[MediaIoBaseUpload]:
    if data is None:
        return None
    return MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type, resumable=False)


def _build_default_params(options: AdapterOptions) -> dict[str, dict[str, Any]]:
    params: dict[str, dict[str, Any]] = {}
    for command in _ALL_DRIVES_COMMANDS:
        params[command] = {"supportsAllDrives": True}
    params["files.list"]["includeItemsFromAllDrives"] = True

    if options.team_drive_id:
        params["files.list"]["corpora"] = options.corpora
        params["files.list"]["driveId"] = options.team_drive_id

    for command, overrides in options.default_params.items():
        params.setdefault(command, {}).update(overrides)
    return params


def _http_error_to_info(exc: HttpError) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None
        if isinstance(payload, dict):
            err = payload.get("error", {})
            if isinstance(err, dict):
                message = err.get("message") or None
                errors = err.get("errors") or []
                if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                    details["domain"] = errors[0].get("domain")
                    details["reason_detail"] = errors[0].get("reason")
                    if isinstance(errors[0].get("reason"), str):
                        reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
