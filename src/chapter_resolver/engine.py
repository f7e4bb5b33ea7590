"""Chapter search state machine and per-result chapter cache."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor

from .config import ResolverConfig
from .errors import NetworkError, NoChaptersFound, NoResults
from .filtering import filter_by_duration
from .models import Chapter, ChapterResult, Completed, Fetcher, Idle, Searching, SearchState
from .provider import ChapterDBClient
from .tasks import SearchTask

ChapterLoad = SearchTask[tuple[Chapter, ...] | None]


class ResolutionEngine:
    """Coordinate searching, result selection and lazy chapter loads.

    Network work runs on ``worker``; every completion is applied on the
    single-threaded ``completion`` executor. Caller-side transitions and
    completions share one lock, so state and cache are never written
    concurrently. Executors not supplied by the caller are owned by the
    engine and shut down by :meth:`close`.
    """

    def __init__(
        self,
        config: ResolverConfig,
        *,
        fetcher: Fetcher,
        logger: logging.Logger,
        worker: Executor | None = None,
        completion: Executor | None = None,
    ) -> None:
        self._config = config
        self._logger = logger
        self._client = ChapterDBClient(
            fetcher=fetcher,
            base_url=config.base_url,
            user_agent=config.user_agent,
            logger=logger,
        )
        self._owned: list[Executor] = []
        if worker is None:
            worker = ThreadPoolExecutor(
                max_workers=config.workers, thread_name_prefix="chapterdb-fetch"
            )
            self._owned.append(worker)
        if completion is None:
            completion = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chapterdb-engine")
            self._owned.append(completion)
        self._worker = worker
        self._completion = completion
        self._lock = threading.RLock()
        self._state: SearchState = Idle()
        self._cache: dict[int, tuple[Chapter, ...]] = {}
        self._loads: dict[int, ChapterLoad] = {}
        self._closed = False

    def __enter__(self) -> ResolutionEngine:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    @property
    def state(self) -> SearchState:
        return self._state

    def cached_chapters(self, result_id: int) -> tuple[Chapter, ...] | None:
        """Return loaded chapters for ``result_id`` or None while not loaded."""
        return self._cache.get(result_id)

    def is_loaded(self, result_id: int) -> bool:
        return result_id in self._cache

    # Search

    def search(self, title: str, duration_ms: int = 0) -> SearchTask[tuple[ChapterResult, ...]]:
        """Start a new search, cancelling any search still in flight."""
        with self._lock:
            self._ensure_open()
            if isinstance(self._state, Searching):
                self._state.task.cancel()
            task: SearchTask[tuple[ChapterResult, ...]] = SearchTask(
                lambda: self._run_search(title, duration_ms),
                lambda results: self._search_done(task, results),
                worker=self._worker,
                completion=self._completion,
                logger=self._logger,
                name=f"search {title!r}",
            )
            self._state = Searching(task=task)
            self._logger.info("Searching for chapters: %r (duration %d ms)", title, duration_ms)
            return task.start()

    def _run_search(self, title: str, duration_ms: int) -> tuple[ChapterResult, ...]:
        try:
            results = self._client.search(title)
        except NetworkError as exc:
            self._logger.warning("Search failed: %s", exc)
            return ()
        except NoResults as exc:
            self._logger.info("%s", exc)
            return ()
        filtered = filter_by_duration(results, duration_ms)
        if len(filtered) != len(results):
            self._logger.info(
                "Duration filter kept %d of %d results", len(filtered), len(results)
            )
        return tuple(filtered)

    def _search_done(
        self, task: SearchTask[tuple[ChapterResult, ...]], results: tuple[ChapterResult, ...]
    ) -> None:
        with self._lock:
            if self._closed or not (isinstance(self._state, Searching) and self._state.task is task):
                self._logger.debug("Ignoring stale completion of %s", task.name)
                return
            if not results:
                self._state = Idle()
                return
            first = results[0]
            self._state = Completed(results=results, selected=self._with_cached(first))
            self._logger.info("Found %d chapter sets", len(results))
            self.load_chapters(first)

    def cancel(self) -> None:
        """Cancel the running search; the state keeps its Searching shape."""
        with self._lock:
            if isinstance(self._state, Searching):
                self._state.task.cancel()

    # Selection

    def select_result(self, result_id: int) -> bool:
        """Select a result by id; returns False when the id is unknown."""
        with self._lock:
            self._ensure_open()
            state = self._state
            if not isinstance(state, Completed):
                return False
            match = next((result for result in state.results if result.id == result_id), None)
            if match is None:
                return False
            self._state = Completed(results=state.results, selected=self._with_cached(match))
            if result_id not in self._cache:
                self.load_chapters(match)
            return True

    def _with_cached(self, result: ChapterResult) -> ChapterResult:
        chapters = self._cache.get(result.id)
        return result if chapters is None else result.with_chapters(chapters)

    # Lazy chapter loads

    def load_chapters(self, result: ChapterResult) -> ChapterLoad | None:
        """Fetch chapters for ``result`` unless already cached or loading."""
        with self._lock:
            self._ensure_open()
            if result.id in self._cache:
                return None
            pending = self._loads.get(result.id)
            if pending is not None and not pending.finished:
                return pending
            task: ChapterLoad = SearchTask(
                lambda: self._run_load(result.id),
                lambda chapters: self._load_done(result.id, chapters),
                worker=self._worker,
                completion=self._completion,
                logger=self._logger,
                name=f"chapters {result.id}",
            )
            self._loads[result.id] = task
            return task.start()

    def _run_load(self, result_id: int) -> tuple[Chapter, ...] | None:
        try:
            return tuple(self._client.chapters(result_id))
        except NoChaptersFound as exc:
            self._logger.info("%s", exc)
            return ()
        except NetworkError as exc:
            self._logger.warning("Chapter load failed: %s", exc)
            return None

    def _load_done(self, result_id: int, chapters: tuple[Chapter, ...] | None) -> None:
        with self._lock:
            self._loads.pop(result_id, None)
            if chapters is None:
                return
            self._cache[result_id] = chapters
            self._logger.debug("Cached %d chapters for %d", len(chapters), result_id)
            state = self._state
            if isinstance(state, Completed) and state.selected.id == result_id:
                self._state = Completed(
                    results=state.results, selected=state.selected.with_chapters(chapters)
                )

    def wait_for_chapters(self, result_id: int, timeout: float | None = None) -> bool:
        """Block until chapters for ``result_id`` are cached or its load ends."""
        with self._lock:
            if result_id in self._cache:
                return True
            task = self._loads.get(result_id)
        if task is not None:
            task.wait(timeout)
        return result_id in self._cache

    # Export

    def export_chapters(self) -> tuple[Chapter, ...]:
        """Return the selected result's cached chapters, empty if not loaded."""
        state = self._state
        if not isinstance(state, Completed):
            return ()
        return self._cache.get(state.selected.id, ())

    # Lifecycle

    def close(self) -> None:
        """Cancel in-flight work and release executors owned by the engine."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if isinstance(self._state, Searching):
                self._state.task.cancel()
            for task in self._loads.values():
                task.cancel()
            self._loads.clear()
        for executor in self._owned:
            executor.shutdown(wait=False)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("ResolutionEngine is closed")
