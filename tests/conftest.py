from __future__ import annotations

from collections.abc import Callable, Mapping
from concurrent.futures import Executor, Future
from typing import Any

import pytest

from chapter_resolver.errors import NetworkError

BASE_URL = "https://chapterdb.example"

SEARCH_HTML = """<html>
<body>
<table class="ui celled table">
  <thead>
    <tr>
      <th>Matches</th>
      <th>Title</th>
      <th>Chapters</th>
      <th>Duration</th>
    </tr>
  </thead>
  <tbody>
    <tr>
      <td><span class="ui small label">12</span></td>
      <td><a href="/browse/1001">The Matrix</a></td>
      <td>39</td>
      <td>02:16.17</td>
    </tr>
    <tr>
      <td><span class="ui small label">3</span></td>
      <td><a href="/browse/1002">The Matrix (Extended)</a></td>
      <td>40</td>
      <td>02:18.05</td>
    </tr>
  </tbody>
</table>
</body>
</html>
"""

DETAIL_HTML = """<html>
<body>
<table class="ui striped table">
  <thead>
    <tr>
      <th>#</th>
      <th>Name</th>
      <th>Time</th>
    </tr>
  </thead>
  <tbody>
    <tr>
      <td>1</td>
      <td>Intro</td>
      <td>00:00:00</td>
    </tr>
    <tr>
      <td>2</td>
      <td></td>
      <td>00:05:30</td>
    </tr>
    <tr>
      <td>3</td>
      <td>End</td>
      <td>01:02:03.5</td>
    </tr>
  </tbody>
</table>
</body>
</html>
"""

EXTENDED_DETAIL_HTML = """<table class="ui striped table">
    <tr>
      <td>1</td>
      <td>Opening</td>
      <td>00:00:00.000</td>
    </tr>
</table>
"""


class FakeFetcher:
    def __init__(self, pages: Mapping[str, bytes | Exception]) -> None:
        self.pages = dict(pages)
        self.calls: list[str] = []
        self.headers: list[dict[str, str]] = []

    def fetch(self, url: str, headers: Mapping[str, str]) -> bytes:
        self.calls.append(url)
        self.headers.append(dict(headers))
        page = self.pages.get(url)
        if page is None:
            raise NetworkError(f"404 for {url}")
        if isinstance(page, Exception):
            raise page
        return page


class InlineExecutor(Executor):
    """Runs submitted callables immediately on the calling thread."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class DeferredExecutor(Executor):
    """Queues submitted callables until the test runs them."""

    def __init__(self) -> None:
        self.pending: list[tuple[Future, Callable[..., Any], tuple, dict]] = []

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_next(self) -> None:
        future, fn, args, kwargs = self.pending.pop(0)
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)

    def run_all(self) -> None:
        while self.pending:
            self.run_next()


def search_url(title: str) -> str:
    return f"{BASE_URL}/grid?Title={title.replace(' ', '%20')}"


@pytest.fixture
def pages() -> dict[str, bytes | Exception]:
    return {
        search_url("The Matrix"): SEARCH_HTML.encode("utf-8"),
        f"{BASE_URL}/browse/1001": DETAIL_HTML.encode("utf-8"),
        f"{BASE_URL}/browse/1002": EXTENDED_DETAIL_HTML.encode("utf-8"),
    }


@pytest.fixture
def fake_fetcher(pages: dict[str, bytes | Exception]) -> FakeFetcher:
    return FakeFetcher(pages)


@pytest.fixture
def inline_executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def deferred_worker() -> DeferredExecutor:
    return DeferredExecutor()


@pytest.fixture
def deferred_completion() -> DeferredExecutor:
    return DeferredExecutor()
