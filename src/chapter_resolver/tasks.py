"""Cancellable background work with single-context delivery."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future
from typing import Generic, TypeVar

R = TypeVar("R")


class SearchTask(Generic[R]):
    """Run ``work`` on a worker executor, deliver on the completion executor.

    ``on_complete`` runs at most once and never after :meth:`cancel` has
    been observed. A delivery that is already executing when ``cancel`` is
    called is allowed to finish.
    """

    def __init__(
        self,
        work: Callable[[], R],
        on_complete: Callable[[R], None],
        *,
        worker: Executor,
        completion: Executor,
        logger: logging.Logger,
        name: str = "task",
    ) -> None:
        self._work = work
        self._on_complete = on_complete
        self._worker = worker
        self._completion = completion
        self._logger = logger
        self.name = name
        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._delivered = False
        self._future: Future[None] | None = None

    def __repr__(self) -> str:
        return f"<SearchTask {self.name} cancelled={self.cancelled} delivered={self._delivered}>"

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def delivered(self) -> bool:
        return self._delivered

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def start(self) -> SearchTask[R]:
        if self._future is not None:
            raise RuntimeError(f"{self.name} already started")
        self._future = self._worker.submit(self._run)
        self._future.add_done_callback(self._log_failure)
        return self

    def cancel(self) -> None:
        if self._cancelled.is_set():
            return
        self._logger.debug("Cancelling %s", self.name)
        self._cancelled.set()
        self._finished.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until delivered, cancelled or failed. False on timeout."""
        return self._finished.wait(timeout)

    def _run(self) -> None:
        if self.cancelled:
            return
        result = self._work()
        if self.cancelled:
            self._logger.debug("Dropping result of cancelled %s", self.name)
            return
        try:
            self._completion.submit(self._deliver, result)
        except RuntimeError:
            # Completion executor already shut down.
            self._logger.debug("Completion context closed before %s finished", self.name)
            self._finished.set()

    def _deliver(self, result: R) -> None:
        if self.cancelled:
            self._logger.debug("Suppressed delivery of cancelled %s", self.name)
            return
        self._delivered = True
        try:
            self._on_complete(result)
        finally:
            self._finished.set()

    def _log_failure(self, future: Future[None]) -> None:
        if future.cancelled():
            self._finished.set()
            return
        exc = future.exception()
        if exc is not None:
            self._logger.error("%s failed: %s", self.name, exc, exc_info=exc)
            self._finished.set()


def start_task(
    work: Callable[[], R],
    on_complete: Callable[[R], None],
    *,
    worker: Executor,
    completion: Executor,
    logger: logging.Logger,
    name: str = "task",
) -> SearchTask[R]:
    """Create and start a :class:`SearchTask`; the task is its own handle."""
    return SearchTask(
        work,
        on_complete,
        worker=worker,
        completion=completion,
        logger=logger,
        name=name,
    ).start()
