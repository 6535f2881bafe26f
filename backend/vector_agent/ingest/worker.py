"""Background worker pool that runs ingestion off the request path."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, TypeVar

from vector_agent.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class IngestWorker:
    """Thin wrapper around a thread pool; callers enqueue and return immediately."""

    def __init__(self, max_workers: int = 4) -> None:
        self.max_workers = max_workers
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._pending: set[Future] = set()

    def submit(self, fn: Callable[..., T], *args, **kwargs) -> Future[T]:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="vagent-ingest",
                )
            future = self._executor.submit(fn, *args, **kwargs)
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executor = self._executor
            self._executor = None
        if executor is not None:
            logger.info("Stopping ingest worker (wait=%s)", wait)
            executor.shutdown(wait=wait)

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        exc = future.exception() if not future.cancelled() else None
        if exc is not None:
            logger.error("Ingest task raised outside its own error handling: %s", exc, exc_info=exc)


__all__ = ["IngestWorker"]
