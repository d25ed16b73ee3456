"""Fire-and-forget submission of review runs.

Callers hand over a package id and move on; observers poll the stored
``ai_review_status`` (``reviewing`` until the run finishes). The package id is
the correlation id, and at most one run per package is in flight within this
process.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

from complens_core.errors import ConcurrentReviewInProgress
from complens_core.models import ReviewResult

logger = logging.getLogger(__name__)


class ReviewScheduler:
    """Runs reviews on a thread pool, single-flight per package id.

    ``run`` is normally ``functools.partial(run_review, backend=..., config=...)``;
    it receives the package id and returns the stored ReviewResult.
    """

    def __init__(self, run: Callable[[str], ReviewResult], max_workers: int = 4):
        self._run = run
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="complens-review")
        self._lock = threading.Lock()
        self._inflight: dict[str, Future] = {}

    def submit(self, package_id: str) -> Future:
        """Queue a review for ``package_id`` and return its Future.

        Raises ConcurrentReviewInProgress if this scheduler is already
        running a review for the same package.
        """
        with self._lock:
            if package_id in self._inflight:
                raise ConcurrentReviewInProgress(package_id)
            future = self._executor.submit(self._execute, package_id)
            self._inflight[package_id] = future
        future.add_done_callback(lambda f: self._log_outcome(package_id, f))
        logger.debug("Submitted review for package %s", package_id)
        return future

    def in_progress(self, package_id: str) -> bool:
        with self._lock:
            return package_id in self._inflight

    def pending(self) -> int:
        with self._lock:
            return len(self._inflight)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _execute(self, package_id: str) -> ReviewResult:
        try:
            return self._run(package_id)
        finally:
            # Released before the Future resolves, so a caller woken by
            # result() can resubmit straight away.
            with self._lock:
                self._inflight.pop(package_id, None)

    def _log_outcome(self, package_id: str, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            # run_review records its own failures; this only fires for a broken backend.
            logger.error("Review task for package %s raised: %s", package_id, exc)
        else:
            logger.debug("Review for package %s finished: %s", package_id, future.result().status)

    def __enter__(self) -> ReviewScheduler:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=True)
