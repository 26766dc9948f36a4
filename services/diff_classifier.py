"""Classification of a freshly fetched record against the stored row."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from models.manga import Manga
from models.series import SeriesRow


class DiffKind(str, Enum):
    NO_CHANGE = "no_change"
    UPCOMING = "upcoming"
    RELEASED = "released"


@dataclass(frozen=True)
class DiffResult:
    kind: DiffKind
    row: SeriesRow
    manga: Manga


def classify(stored: SeriesRow, fetched: Manga, now=None) -> DiffKind:
    """
    Decide what changed for one series.

    A chapter counts as released once JST "now" reaches its release date. A
    stored row that was still waiting on its chapter turns RELEASED as soon as
    that chapter goes out, even when the chapter title is unchanged.
    """
    title_changed = stored.latest_chapter_title != fetched.latest_chapter_title
    released = fetched.is_released(now)

    if (title_changed or not stored.latest_chapter_released) and released:
        return DiffKind.RELEASED
    if title_changed and not released:
        return DiffKind.UPCOMING
    return DiffKind.NO_CHANGE


def build_diff(stored: SeriesRow, fetched: Manga, now=None) -> DiffResult:
    return DiffResult(kind=classify(stored, fetched, now), row=stored, manga=fetched)


def apply_diff(diff: DiffResult, now=None) -> Optional[SeriesRow]:
    """Row to persist for ``diff``, or None when nothing changed."""
    if diff.kind is DiffKind.NO_CHANGE:
        return None
    return SeriesRow.from_manga(diff.row.source, diff.row.manga_id, diff.manga, now)
