"""Protocols, value types and engine state shapes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Protocol, Union

if TYPE_CHECKING:
    from .tasks import SearchTask


class Fetcher(Protocol):
    """Contract for HTTP fetchers."""

    def fetch(self, url: str, headers: Mapping[str, str]) -> bytes:
        """Return the raw response body or raise NetworkError."""


@dataclass(frozen=True)
class Chapter:
    """A named chapter marker."""

    name: str
    timestamp_ms: int


@dataclass(frozen=True)
class ChapterResult:
    """One candidate chapter set from the remote database.

    ``chapters`` stays empty until the detail page has been loaded; the
    engine then rebuilds the record with :meth:`with_chapters`.
    """

    id: int
    title: str
    duration_ms: int
    confirmations: int = 1
    chapters: tuple[Chapter, ...] = ()

    def with_chapters(self, chapters: tuple[Chapter, ...]) -> ChapterResult:
        return replace(self, chapters=tuple(chapters))


@dataclass(frozen=True)
class Idle:
    """No search running and nothing to choose from."""


@dataclass(frozen=True)
class Searching:
    task: SearchTask[tuple[ChapterResult, ...]]


@dataclass(frozen=True)
class Completed:
    results: tuple[ChapterResult, ...]
    selected: ChapterResult


SearchState = Union[Idle, Searching, Completed]
