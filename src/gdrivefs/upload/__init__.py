"""Upload engine."""

from __future__ import annotations

from .chunking import (
    CHUNK_UNIT,
    MAX_CHUNK_SIZE,
    MIN_CHUNK_SIZE,
    chunk_size_for,
    detect_chunk_size,
    memory_limit,
    memory_used,
    read_chunk,
    stream_size,
)
from .engine import UploadEngine
from .media import StreamChunkUpload

__all__ = [
    "CHUNK_UNIT",
    "MAX_CHUNK_SIZE",
    "MIN_CHUNK_SIZE",
    "StreamChunkUpload",
    "UploadEngine",
    "chunk_size_for",
    "detect_chunk_size",
    "memory_limit",
    "memory_used",
    "read_chunk",
    "stream_size",
]
