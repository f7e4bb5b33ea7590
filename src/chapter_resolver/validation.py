"""Validation and runtime guardrails."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from .errors import ConfigError

_CLOCK_DURATION = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{2})(?:\.(\d{1,3}))?$")
_PLAIN_MS = re.compile(r"[0-9]+")


def is_supported_url(url: str) -> bool:
    """Allow only absolute HTTP(S) URLs with a hostname."""
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def parse_duration_arg(value: str) -> int:
    """Parse a CLI duration as plain milliseconds or ``[H:]MM:SS[.mmm]``."""
    text = value.strip()
    if _PLAIN_MS.fullmatch(text):
        return int(text)
    match = _CLOCK_DURATION.match(text)
    if not match:
        raise ConfigError(f"Unrecognised duration: {value!r}")
    hours, minutes, seconds, fraction = match.groups()
    millis = int((fraction or "0").ljust(3, "0"))
    return ((int(hours or 0) * 3600 + int(minutes) * 60 + int(seconds)) * 1000) + millis


def validate_runtime_constraints(
    *,
    base_url: str,
    user_agent: str,
    request_timeout: float,
    workers: int,
) -> None:
    """Validate CLI/runtime configuration and raise ConfigError on invalid values."""
    if not is_supported_url(base_url):
        raise ConfigError("--base-url must be an absolute http(s) URL.")
    if not user_agent.strip():
        raise ConfigError("--user-agent cannot be empty.")
    if request_timeout <= 0:
        raise ConfigError("--timeout must be > 0.")
    if workers < 1:
        raise ConfigError("--workers must be >= 1.")
