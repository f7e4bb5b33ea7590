"""Search-term cleanup for media file names."""

from __future__ import annotations

import re
from pathlib import PurePath

SEPARATORS = re.compile(r"[._]+")
WHITESPACE = re.compile(r"\s+")
EXTENSION = re.compile(r"\.(?=[a-z0-9]*[a-z])[a-z0-9]{2,4}$", re.IGNORECASE)
RELEASE_TOKEN = re.compile(
    r"[\[(]?\b(?:(?:19|20)\d{2}|\d{3,4}[pi]|4k|uhd|bluray|blu-ray|bdrip|brrip|"
    r"web-?dl|webrip|hdtv|dvdrip|remux|x26[45]|h26[45]|hevc)\b",
    re.IGNORECASE,
)


def search_term_from_filename(name: str) -> str:
    """Turn ``The.Matrix.1999.1080p.BluRay.mkv`` into ``The Matrix``.

    Directories and the extension are dropped, dot and underscore separators
    become spaces, and the title is cut before the first release token (year,
    resolution, source or codec tag) that does not open the name.
    """
    base = EXTENSION.sub("", PurePath(name.strip()).name)
    cleaned = WHITESPACE.sub(" ", SEPARATORS.sub(" ", base)).strip()
    for match in RELEASE_TOKEN.finditer(cleaned):
        if match.start() == 0:
            continue
        title = cleaned[: match.start()].strip(" -[(")
        if title:
            return title
    return cleaned
