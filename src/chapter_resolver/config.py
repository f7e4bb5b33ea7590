"""Runtime configuration model."""

from __future__ import annotations

from dataclasses import dataclass

from .validation import validate_runtime_constraints

DEFAULT_BASE_URL = "https://chapterdb.plex.tv"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_WORKERS = 4


@dataclass(frozen=True)
class ResolverConfig:
    """Validated configuration used by the resolution engine."""

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    workers: int = DEFAULT_WORKERS
    show_progress: bool = True

    def __post_init__(self) -> None:
        validate_runtime_constraints(
            base_url=self.base_url,
            user_agent=self.user_agent,
            request_timeout=self.request_timeout,
            workers=self.workers,
        )
