"""Chunk-size policy and stream helpers for resumable uploads."""

from __future__ import annotations

import logging
import os
import resource
from typing import IO, Optional

import psutil

logger = logging.getLogger(__name__)

KiB = 1024
MiB = 1024 * KiB

# Resumable chunks must be multiples of 256 KiB, except the last one.
CHUNK_UNIT: int = 256 * KiB
MIN_CHUNK_SIZE: int = CHUNK_UNIT
MAX_CHUNK_SIZE: int = 100 * MiB

READ_SIZE: int = 8 * KiB


def detect_chunk_size(memory_limit: int, memory_used: int) -> int:
    """
    Chunk size for a process limited to memory_limit bytes using memory_used.

    A quarter of the headroom, rounded down to a 256 KiB multiple and clamped
    to [256 KiB, 100 MiB]. A limit <= 0 means unlimited.
    """
    if memory_limit <= 0:
        return MAX_CHUNK_SIZE

    headroom = max(memory_limit - memory_used, 0)
    size = (headroom // 4) // CHUNK_UNIT * CHUNK_UNIT
    return max(MIN_CHUNK_SIZE, min(MAX_CHUNK_SIZE, size))


def memory_limit(configured: Optional[int] = None) -> int:
    """Configured limit, else the address-space rlimit; 0 when unlimited."""
    if configured is not None:
        return configured
    try:
        soft, _ = resource.getrlimit(resource.RLIMIT_AS)
    except (ValueError, OSError):
        return 0
    if soft == resource.RLIM_INFINITY or soft < 0:
        return 0
    return soft


def memory_used() -> int:
    """Resident set size of the current process."""
    return psutil.Process(os.getpid()).memory_info().rss


def chunk_size_for(configured_limit: Optional[int] = None) -> int:
    limit = memory_limit(configured_limit)
    used = memory_used() if limit > 0 else 0
    size = detect_chunk_size(limit, used)
    logger.debug("Chunk size %d (limit=%d, used=%d)", size, limit, used)
    return size


def read_chunk(stream: IO[bytes], size: int) -> bytes:
    """
    Read up to size bytes, accumulating short reads.

    Returns fewer than size bytes only at end of stream.
    """
    parts: list[bytes] = []
    remaining = size
    while remaining > 0:
        data = stream.read(min(READ_SIZE, remaining))
        if not data:
            break
        if isinstance(data, str):
            data = data.encode("utf-8")
        parts.append(data)
        remaining -= len(data)
    return b"".join(parts)


def stream_size(stream: IO[bytes]) -> Optional[int]:
    """Bytes left in stream from its current position, or None when unknown."""
    try:
        position = stream.tell()
    except (AttributeError, OSError, ValueError):
        position = None

    try:
        total = os.fstat(stream.fileno()).st_size
        if total > 0 and position is not None:
            return max(total - position, 0)
    except (AttributeError, OSError, ValueError):
        pass

    if position is None:
        return None
    try:
        if not stream.seekable():
            return None
        end = stream.seek(0, os.SEEK_END)
        stream.seek(position)
    except (AttributeError, OSError, ValueError):
        return None
    return max(end - position, 0)
