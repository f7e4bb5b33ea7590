"""Pure line-oriented parsers for ChapterDB search and detail pages.

Both pages are plain HTML tables. Rather than building a DOM, the parsers
scan the markup line by line, collect the lines between ``<tr>`` and
``</tr>`` and then pull each field out with a small extraction helper.
Every helper returns ``None`` when its field cannot be read so the caller
can substitute a default without losing the rest of the row.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from .models import Chapter, ChapterResult

ROW_OPEN = re.compile(r"<tr(?:\s[^>]*)?>", re.IGNORECASE)
ROW_CLOSE = re.compile(r"</tr\s*>", re.IGNORECASE)
DETAIL_LINK = re.compile(r"/browse/(\d+)")
LINK_TITLE = re.compile(r">([^<]+)</a>")
BADGE_MARKER = "ui small label"
BADGE_COUNT = re.compile(r">\s*(\d+)\s*<")
SEARCH_DURATION = re.compile(r"(\d{1,2}):(\d{2})\.(\d{2})")
CHAPTER_TIME = re.compile(r"(\d{1,2}):(\d{2}):(\d{2})\.?(\d*)")
CHAPTER_TABLE_MARKERS = ("ui table", "striped", "fluid")
SIGNED_INT = re.compile(r"[+-]?\d+")
MAX_RESULT_ID = 0xFFFF_FFFF_FFFF_FFFF

DEFAULT_TITLE = "Unknown"
DEFAULT_CONFIRMATIONS = 1
DEFAULT_DURATION_MS = 0

HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def split_rows(lines: Iterable[str]) -> list[tuple[str, ...]]:
    """Group the lines found between row open and close tags."""
    rows: list[tuple[str, ...]] = []
    current: list[str] = []
    inside = False
    for line in lines:
        if ROW_OPEN.search(line):
            inside = True
            current = []
        elif ROW_CLOSE.search(line) and inside:
            inside = False
            rows.append(tuple(current))
        elif inside:
            current.append(line)
    return rows


def is_cell_line(line: str) -> bool:
    return "<td" in line and "</td>" in line


def to_millis(hours: str, minutes: str, seconds: str) -> int:
    return (int(hours) * 3600 + int(minutes) * 60 + int(seconds)) * 1000


def decode_entities(text: str) -> str:
    """Decode the handful of entities ChapterDB emits in chapter names."""
    for entity, replacement in HTML_ENTITIES:
        text = text.replace(entity, replacement)
    return text


def cell_text(line: str) -> str | None:
    """Return the trimmed text between the first ``>`` and ``</td>``."""
    start = line.find(">")
    end = line.find("</td>")
    if start == -1 or end == -1 or end <= start:
        return None
    return line[start + 1 : end].strip()


# Search page fields


def find_detail_link(row: Sequence[str]) -> str | None:
    return next((line for line in row if "/browse/" in line), None)


def extract_result_id(link_line: str) -> int | None:
    match = DETAIL_LINK.search(link_line)
    if not match:
        return None
    value = int(match.group(1))
    return value if value <= MAX_RESULT_ID else None


def extract_title(link_line: str) -> str | None:
    match = LINK_TITLE.search(link_line)
    return match.group(1) if match else None


def extract_confirmations(row: Sequence[str]) -> int | None:
    for line in row:
        if "<span" in line and BADGE_MARKER in line:
            match = BADGE_COUNT.search(line)
            if match:
                return int(match.group(1))
    return None


def extract_search_duration(row: Sequence[str]) -> int | None:
    for line in row:
        if not is_cell_line(line) or "/browse/" in line:
            continue
        match = SEARCH_DURATION.search(line)
        if match:
            return to_millis(*match.groups())
    return None


def parse_search_row(row: Sequence[str]) -> ChapterResult | None:
    """Build one search result, or ``None`` when the row has no usable id."""
    link_line = find_detail_link(row)
    if link_line is None:
        return None
    result_id = extract_result_id(link_line)
    if result_id is None:
        return None

    title = extract_title(link_line)
    confirmations = extract_confirmations(row)
    duration_ms = extract_search_duration(row)
    return ChapterResult(
        id=result_id,
        title=DEFAULT_TITLE if title is None else title,
        duration_ms=DEFAULT_DURATION_MS if duration_ms is None else duration_ms,
        confirmations=DEFAULT_CONFIRMATIONS if confirmations is None else confirmations,
    )


def parse_search_results(html: str) -> list[ChapterResult]:
    """Parse a ``/grid`` search page into results in document order."""
    results: list[ChapterResult] = []
    for row in split_rows(html.splitlines()):
        result = parse_search_row(row)
        if result is not None:
            results.append(result)
    return results


# Detail page fields


def chapter_table_lines(lines: Sequence[str]) -> list[str]:
    """Return the lines inside the first chapter table, tags excluded."""
    body: list[str] = []
    inside = False
    for line in lines:
        if not inside:
            if "<table" in line and any(marker in line for marker in CHAPTER_TABLE_MARKERS):
                inside = True
            continue
        if "</table>" in line:
            break
        body.append(line)
    return body


def extract_chapter_number(line: str) -> int | None:
    text = cell_text(line)
    if text is None or not SIGNED_INT.fullmatch(text):
        return None
    return int(text)


def extract_chapter_name(line: str) -> str | None:
    text = cell_text(line)
    if text is None:
        return None
    return decode_entities(text).strip()


def extract_chapter_time(line: str) -> int | None:
    # The fractional group is matched but ignored.
    match = CHAPTER_TIME.search(line)
    if not match:
        return None
    hours, minutes, seconds, _fraction = match.groups()
    return to_millis(hours, minutes, seconds)


def parse_chapter_row(row: Sequence[str]) -> Chapter | None:
    """Assign cells by position: number, name, timestamp."""
    cells = [line for line in row if is_cell_line(line)]
    if len(cells) < 3:
        return None

    number = extract_chapter_number(cells[0])
    number = 0 if number is None else number
    name = extract_chapter_name(cells[1]) or ""
    timestamp_ms = extract_chapter_time(cells[2])
    timestamp_ms = 0 if timestamp_ms is None else timestamp_ms

    if not name and number > 0:
        name = f"Chapter {number:02d}"
    if number < 0 or timestamp_ms < 0:
        return None
    return Chapter(name=name, timestamp_ms=timestamp_ms)


def parse_chapter_details(html: str) -> list[Chapter]:
    """Parse a ``/browse/<id>`` detail page into its chapter list."""
    chapters: list[Chapter] = []
    for row in split_rows(chapter_table_lines(html.splitlines())):
        chapter = parse_chapter_row(row)
        if chapter is not None:
            chapters.append(chapter)
    return chapters
