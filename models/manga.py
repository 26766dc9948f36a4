"""Canonical in-memory record produced by every source crawler."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from utils.time import is_released, to_publisher_zone


class Weekday(str, Enum):
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @classmethod
    def from_datetime(cls, value: datetime) -> "Weekday":
        return list(cls)[to_publisher_zone(value).weekday()]

    @classmethod
    def parse(cls, value: object) -> Optional["Weekday"]:
        if isinstance(value, Weekday):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip()[:3].lower()
        for day in cls:
            if day.value.lower() == normalized:
                return day
        return None


@dataclass(frozen=True)
class Manga:
    title: str
    cover_url: str
    author: str
    latest_chapter_title: str
    latest_chapter_url: str
    latest_chapter_release_date: datetime

    def __post_init__(self):
        # Keep every release date in the publisher zone so the weekday below is stable.
        object.__setattr__(
            self,
            "latest_chapter_release_date",
            to_publisher_zone(self.latest_chapter_release_date),
        )

    @property
    def latest_chapter_publish_day(self) -> Weekday:
        return Weekday.from_datetime(self.latest_chapter_release_date)

    def is_released(self, now: Optional[datetime] = None) -> bool:
        return is_released(self.latest_chapter_release_date, now)

    def with_title(self, title: str) -> "Manga":
        return replace(self, title=title)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "cover_url": self.cover_url,
            "author": self.author,
            "latest_chapter_title": self.latest_chapter_title,
            "latest_chapter_url": self.latest_chapter_url,
            "latest_chapter_release_date": self.latest_chapter_release_date.isoformat(),
            "latest_chapter_publish_day": self.latest_chapter_publish_day.value,
        }
