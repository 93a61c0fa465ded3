"""Single-shot and chunked resumable uploads."""

from __future__ import annotations

import logging
import threading
from typing import IO, Callable, Optional, Union

from gdrivefs.config import AdapterOptions
from gdrivefs.controller import DriveController
from gdrivefs.errors import GDriveFsError, UploadCancelledError, WriteError
from gdrivefs.metadata import normalize_object
from gdrivefs.models import DriveObject, Metadata, UploadSession
from gdrivefs.paths import dirname, normalize_path
from gdrivefs.resolver import ObjectResolver
from gdrivefs.util.mime import guess_mime_type

from .chunking import chunk_size_for, read_chunk, stream_size
from .media import StreamChunkUpload

logger = logging.getLogger(__name__)

Content = Union[bytes, bytearray, str, IO[bytes]]

# Bytes handed to the content sniffer.
SNIFF_SIZE = 8192


class UploadEngine:
    """
    Write content to a path, creating or updating the Drive file.

    Notes:
        - bytes/str content, and streams that end within the first chunk, go
          up in one request.
        - Larger streams use a resumable session pushed chunk by chunk;
          chunk pushes are retried options.chunk_retries times (0 by default).
        - A set cancel event stops the loop before the next push; the session
          is abandoned, not aborted server-side.
    """

    def __init__(
        self,
        controller: DriveController,
        resolver: ObjectResolver,
        options: AdapterOptions,
    ) -> None:
        self._controller = controller
        self._resolver = resolver
        self._options = options

    def upload(
        self,
        path: str,
        content: Content,
        *,
        mime_type: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
        progress: Optional[Callable[[UploadSession], None]] = None,
    ) -> Metadata:
        path = normalize_path(path)
        if self._resolver.is_root(path):
            raise WriteError(path, "cannot write to the root")

        try:
            obj = self._upload(path, content, mime_type, cancel, progress)
        except WriteError:
            raise
        except GDriveFsError as exc:
            raise WriteError(path, str(exc), cause=exc) from exc

        self._resolver.remember(obj, path)
        return normalize_object(
            obj,
            dirname(path),
            path_mode=self._options.path_mode,
            publish_permission=self._options.publish_permission,
            additional_fields=self._options.additional_fetch_fields,
        )

    def _upload(
        self,
        path: str,
        content: Content,
        mime_type: Optional[str],
        cancel: Optional[threading.Event],
        progress: Optional[Callable[[UploadSession], None]],
    ) -> DriveObject:
        parent_id = self._resolver.ensure_directory(dirname(path))
        existing = self._resolver.resolve(path)
        if existing is not None and existing.is_folder:
            raise WriteError(path, "a directory exists at this path")

        name = existing.name if existing is not None else self._resolver.name_key(path)[1]
        file_id = existing.id if existing is not None else None

        if isinstance(content, (bytes, bytearray, str)):
            data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
            mime = mime_type or guess_mime_type(name, data[:SNIFF_SIZE])
            _check_cancel(path, cancel, 0)
            return self._upload_single(path, name, parent_id, file_id, data, mime)

        chunk_size = chunk_size_for(self._options.memory_limit)
        total_size = stream_size(content)
        head = read_chunk(content, chunk_size)
        mime = mime_type or guess_mime_type(name, head[:SNIFF_SIZE])

        if len(head) < chunk_size or (total_size is not None and total_size <= chunk_size):
            _check_cancel(path, cancel, 0)
            return self._upload_single(path, name, parent_id, file_id, head, mime)

        session = UploadSession(path=path, chunk_size=chunk_size, total_size=total_size)
        media = StreamChunkUpload(
            content,
            mimetype=mime,
            chunksize=chunk_size,
            size=total_size,
            head=head,
        )
        request = self._controller.resumable_request(
            media,
            name=name,
            parent_id=parent_id,
            file_id=file_id,
        )
        logger.info(
            "Resumable upload of %s started (size=%s, chunk=%d)",
            path,
            total_size if total_size is not None else "unknown",
            chunk_size,
        )

        while True:
            _check_cancel(path, cancel, session.bytes_sent)
            status, obj = self._controller.next_chunk(request)
            session.chunks_sent += 1
            session.resumable_uri = getattr(request, "resumable_uri", None)
            if obj is not None:
                session.position = session.bytes_sent = media.position
            else:
                session.position = session.bytes_sent = status.resumable_progress
            if progress is not None:
                progress(session)
            if obj is not None:
                logger.info(
                    "Resumable upload of %s finished: %d bytes in %d chunks",
                    path,
                    session.bytes_sent,
                    session.chunks_sent,
                )
                return obj

    def _upload_single(
        self,
        path: str,
        name: str,
        parent_id: str,
        file_id: Optional[str],
        data: bytes,
        mime_type: str,
    ) -> DriveObject:
        if file_id is not None:
            obj = self._controller.update_content(file_id, mime_type=mime_type, data=data)
        else:
            obj = self._controller.create_file(name, parent_id, mime_type=mime_type, data=data)
        logger.info("Uploaded %s (%d bytes, %s)", path, len(data), mime_type)
        return obj


def _check_cancel(path: str, cancel: Optional[threading.Event], bytes_sent: int) -> None:
    if cancel is not None and cancel.is_set():
        logger.info("Upload of %s cancelled after %d bytes", path, bytes_sent)
        raise UploadCancelledError(path, "cancelled", details={"bytes_sent": bytes_sent})
