"""Duration tolerance filter for search results."""

from __future__ import annotations

from collections.abc import Sequence

from .models import ChapterResult

DURATION_TOLERANCE_MS = 20000


def filter_by_duration(
    results: Sequence[ChapterResult], target_ms: int
) -> list[ChapterResult]:
    """Keep results within the tolerance band around ``target_ms``.

    A zero target disables filtering. When nothing falls inside the band the
    unfiltered list is returned so a tight filter never hides every candidate.
    """
    if target_ms == 0:
        return list(results)
    low = target_ms - DURATION_TOLERANCE_MS
    high = target_ms + DURATION_TOLERANCE_MS
    keep = [result for result in results if low < result.duration_ms < high]
    return keep or list(results)
