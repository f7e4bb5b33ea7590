"""HTTP fetchers."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from requests import Session
from requests.exceptions import RequestException

from .errors import NetworkError
from .validation import is_supported_url


def make_session(user_agent: str) -> Session:
    """Create a requests session carrying the resolver's User-Agent."""
    session = Session()
    session.headers.update({"User-Agent": user_agent})
    return session


class RequestsFetcher:
    """Requests-based fetcher returning raw response bytes."""

    def __init__(self, *, session: Session, timeout: float, logger: logging.Logger) -> None:
        self._session = session
        self._timeout = timeout
        self._logger = logger

    def fetch(self, url: str, headers: Mapping[str, str]) -> bytes:
        if not is_supported_url(url):
            raise NetworkError(f"Unsupported URL: {url}")
        try:
            response = self._session.get(url, headers=dict(headers), timeout=self._timeout)
            response.raise_for_status()
        except RequestException as exc:
            self._logger.debug("Requests fetch failed for %s: %s", url, exc)
            raise NetworkError(f"GET {url} failed: {exc}") from exc
        return bytes(response.content)
