"""Persisted row model for the ``series`` table."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, List, Mapping, Optional, Tuple, TypeVar

from models.manga import Manga, Weekday
from models.source import MangaSource
from utils.time import current_time_in_publisher_zone, to_naive_publisher_time


T = TypeVar("T")

SeriesKey = Tuple[MangaSource, str]


@dataclass
class SeriesRow:
    source: MangaSource
    manga_id: str
    title: str
    cover_url: str
    author: str
    latest_chapter_title: str
    latest_chapter_url: str
    latest_chapter_release_date: datetime
    latest_chapter_publish_day: Weekday
    latest_chapter_released: bool
    last_update: datetime

    @property
    def key(self) -> SeriesKey:
        return (self.source, self.manga_id)

    @classmethod
    def from_manga(
        cls,
        source: MangaSource,
        manga_id: str,
        manga: Manga,
        now: Optional[datetime] = None,
    ) -> "SeriesRow":
        """Build the row to persist for ``manga``; timestamps are stored as naive JST."""
        current = now if now is not None else current_time_in_publisher_zone()
        return cls(
            source=source,
            manga_id=manga_id,
            title=manga.title,
            cover_url=manga.cover_url,
            author=manga.author,
            latest_chapter_title=manga.latest_chapter_title,
            latest_chapter_url=manga.latest_chapter_url,
            latest_chapter_release_date=to_naive_publisher_time(manga.latest_chapter_release_date),
            latest_chapter_publish_day=manga.latest_chapter_publish_day,
            latest_chapter_released=manga.is_released(current),
            last_update=to_naive_publisher_time(current),
        )

    @classmethod
    def from_db_row(cls, row: Mapping[str, Any]) -> "SeriesRow":
        source = MangaSource.parse(row["source"])
        if source is None:
            raise ValueError(f"unknown source in storage: {row['source']!r}")

        day = Weekday.parse(row["latest_chapter_publish_day"])
        if day is None:
            raise ValueError(f"invalid publish day in storage: {row['latest_chapter_publish_day']!r}")

        return cls(
            source=source,
            manga_id=row["manga_id"],
            title=row["title"],
            cover_url=row["cover_url"],
            author=row["author"],
            latest_chapter_title=row["latest_chapter_title"],
            latest_chapter_url=row["latest_chapter_url"],
            latest_chapter_release_date=row["latest_chapter_release_date"],
            latest_chapter_publish_day=day,
            latest_chapter_released=bool(row["latest_chapter_released"]),
            last_update=row["last_update"],
        )

    def to_manga(self) -> Manga:
        return Manga(
            title=self.title,
            cover_url=self.cover_url,
            author=self.author,
            latest_chapter_title=self.latest_chapter_title,
            latest_chapter_url=self.latest_chapter_url,
            latest_chapter_release_date=self.latest_chapter_release_date,
        )

    def to_db_tuple(self) -> tuple:
        return (
            self.source.value,
            self.manga_id,
            self.title,
            self.cover_url,
            self.author,
            self.latest_chapter_title,
            self.latest_chapter_url,
            self.latest_chapter_release_date,
            self.latest_chapter_publish_day.value,
            self.latest_chapter_released,
            self.last_update,
        )


@dataclass
class SeriesQuery:
    source: Optional[MangaSource] = None
    title: Optional[str] = None
    author: Optional[str] = None
    chapter_title: Optional[str] = None
    day: Optional[Weekday] = None


@dataclass
class Paginated(Generic[T]):
    data: List[T] = field(default_factory=list)
    total_count: int = 0
    total_page: int = 0

    @staticmethod
    def page_count(total_count: int, page_size: int) -> int:
        if page_size <= 0:
            return 0
        return math.ceil(total_count / page_size)
