"""ChapterDB site adapter: URLs, decoding and typed failures."""

from __future__ import annotations

import logging
from urllib.parse import quote

from .errors import NetworkError, NoChaptersFound, NoResults
from .models import Chapter, ChapterResult, Fetcher
from .parsing import parse_chapter_details, parse_search_results

SEARCH_PATH = "/grid"
DETAIL_PATH = "/browse"


class ChapterDBClient:
    """Fetch and parse ChapterDB pages.

    Raises ``NetworkError`` when a page cannot be fetched or decoded,
    ``NoResults`` for an empty search and ``NoChaptersFound`` for a detail
    page without chapters.
    """

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        base_url: str,
        user_agent: str,
        logger: logging.Logger,
    ) -> None:
        self._fetcher = fetcher
        self._base_url = base_url.rstrip("/")
        self._headers = {"User-Agent": user_agent}
        self._logger = logger

    def search_url(self, title: str) -> str:
        return f"{self._base_url}{SEARCH_PATH}?Title={quote(title, safe='')}"

    def detail_url(self, result_id: int) -> str:
        return f"{self._base_url}{DETAIL_PATH}/{result_id}"

    def search(self, title: str) -> list[ChapterResult]:
        url = self.search_url(title)
        self._logger.debug("Searching ChapterDB: %s", url)
        results = parse_search_results(self._get_text(url))
        if not results:
            raise NoResults(f"No results for {title!r}")
        self._logger.debug("Parsed %d results for %r", len(results), title)
        return results

    def chapters(self, result_id: int) -> list[Chapter]:
        url = self.detail_url(result_id)
        self._logger.debug("Loading chapters: %s", url)
        chapters = parse_chapter_details(self._get_text(url))
        if not chapters:
            raise NoChaptersFound(f"No chapters on {url}")
        return chapters

    def _get_text(self, url: str) -> str:
        payload = self._fetcher.fetch(url, self._headers)
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NetworkError(f"Undecodable response from {url}") from exc
