"""Keyed batch of Drive requests executed in one HTTP round trip."""

from __future__ import annotations

import logging
from typing import Any, Callable

from gdrivefs.errors import GDriveFsError, InvalidArgumentError, InvalidStateError
from gdrivefs.models import BatchResult

logger = logging.getLogger(__name__)


class DriveBatch:
    """
    Collect unexecuted requests under caller-chosen ids, then run them once.

    Notes:
        - execute() returns one BatchResult per id; a failed sub-request is
          reported in its result and never raised.
        - Drive accepts at most MAX_REQUESTS per HTTP batch; larger batches
          are split transparently.
        - A batch can be executed only once.
    """

    MAX_REQUESTS = 100

    def __init__(
        self,
        new_http_batch: Callable[..., Any],
        *,
        execute: Callable[[Callable[[], Any]], Any],
        map_exception: Callable[[BaseException], GDriveFsError],
    ) -> None:
        self._new_http_batch = new_http_batch
        self._execute = execute
        self._map_exception = map_exception
        self._requests: dict[str, Any] = {}
        self._executed = False

    def __len__(self) -> int:
        return len(self._requests)

    def add(self, request_id: str, request: Any) -> "DriveBatch":
        if self._executed:
            raise InvalidStateError("Batch already executed")
        if request_id in self._requests:
            raise InvalidArgumentError(
                "Duplicate batch request id",
                details={"request_id": request_id},
            )
        self._requests[request_id] = request
        return self

    def execute(self) -> dict[str, BatchResult]:
        if self._executed:
            raise InvalidStateError("Batch already executed")
        self._executed = True

        results: dict[str, BatchResult] = {}

        def _callback(request_id: str, response: Any, exception: Any) -> None:
            if exception is not None:
                results[request_id] = BatchResult(
                    request_id=request_id,
                    error=self._map_exception(exception),
                )
            else:
                results[request_id] = BatchResult(request_id=request_id, response=response)

        ids = list(self._requests)
        for start in range(0, len(ids), self.MAX_REQUESTS):
            http_batch = self._new_http_batch(callback=_callback)
            for request_id in ids[start : start + self.MAX_REQUESTS]:
                http_batch.add(self._requests[request_id], request_id=request_id)
            self._execute(http_batch.execute)

        failed = sum(1 for r in results.values() if not r.ok)
        logger.debug("Batch executed: %d requests, %d failed", len(ids), failed)
        return results
