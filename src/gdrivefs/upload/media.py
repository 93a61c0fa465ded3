"""MediaUpload over a forward-only stream."""

from __future__ import annotations

from typing import IO, Optional

from googleapiclient.http import MediaUpload

from gdrivefs.errors import InvalidStateError

from .chunking import read_chunk


class StreamChunkUpload(MediaUpload):
    """
    Resumable media that keeps at most one chunk of the stream in memory.

    MediaIoBaseUpload seeks its stream for every chunk; this class only reads
    forward, so it also serves pipes and sockets. The client may ask again
    for bytes the server did not acknowledge, as long as they are still in
    the current buffer.
    """

    def __init__(
        self,
        stream: IO[bytes],
        *,
        mimetype: str,
        chunksize: int,
        size: Optional[int] = None,
        head: bytes = b"",
    ) -> None:
        super().__init__()
        self._stream = stream
        self._mimetype = mimetype
        self._chunksize = chunksize
        self._size = size
        self._buffer = head
        self._buffer_start = 0
        self._eof = False

    def chunksize(self) -> int:
        return self._chunksize

    def mimetype(self) -> str:
        return self._mimetype

    def size(self) -> Optional[int]:
        return self._size

    def resumable(self) -> bool:
        return True

    def has_stream(self) -> bool:
        return False

    def stream(self) -> IO[bytes]:
        return self._stream

    @property
    def position(self) -> int:
        """Offset just past the last byte read from the stream."""
        return self._buffer_start + len(self._buffer)

    def getbytes(self, begin: int, length: int) -> bytes:
        if begin < self._buffer_start or begin > self.position:
            raise InvalidStateError(
                "Requested bytes are no longer buffered",
                details={"begin": begin, "buffer_start": self._buffer_start},
            )

        self._buffer = self._buffer[begin - self._buffer_start :]
        self._buffer_start = begin

        missing = length - len(self._buffer)
        if missing > 0 and not self._eof:
            data = read_chunk(self._stream, missing)
            if len(data) < missing:
                self._eof = True
            self._buffer += data

        return self._buffer[:length]

    def to_json(self) -> str:
        raise NotImplementedError("StreamChunkUpload cannot be serialized")
