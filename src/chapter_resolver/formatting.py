"""Text formatting for chapter listings and export payloads."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .models import Chapter, ChapterResult


def format_timestamp(ms: int) -> str:
    """Format milliseconds as ``HH:MM:SS.mmm``."""
    seconds, millis = divmod(max(ms, 0), 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def format_result_row(index: int, result: ChapterResult, *, selected: bool = False) -> str:
    marker = "*" if selected else " "
    count = str(len(result.chapters)) if result.chapters else "-"
    return (
        f"{marker}{index:>3}  {format_timestamp(result.duration_ms)}  "
        f"{result.confirmations:>4}  {count:>4}  {result.title}"
    )


def format_chapter_row(chapter: Chapter) -> str:
    return f"{format_timestamp(chapter.timestamp_ms)}  {chapter.name}"


def chapters_to_payload(chapters: Sequence[Chapter]) -> list[dict[str, Any]]:
    """Build the export payload handed to callers importing the chapters."""
    return [
        {
            "title": chapter.name,
            "timestamp_ms": chapter.timestamp_ms,
            "timestamp": format_timestamp(chapter.timestamp_ms),
        }
        for chapter in chapters
    ]
