from datetime import datetime, timedelta

import pytest

from models.manga import Manga, Weekday
from models.series import SeriesRow
from models.source import MangaSource
from services.diff_classifier import DiffKind, apply_diff, build_diff, classify
from utils.time import PUBLISHER_TZ


NOW = datetime(2024, 5, 6, 12, 0, tzinfo=PUBLISHER_TZ)
PAST = NOW - timedelta(hours=12)
FUTURE = NOW + timedelta(days=7)


def _stored(chapter_title, released):
    return SeriesRow(
        source=MangaSource.COMIC_DAYS,
        manga_id="123",
        title="Foo",
        cover_url="",
        author="作者",
        latest_chapter_title=chapter_title,
        latest_chapter_url="https://comic-days.com/episode/11",
        latest_chapter_release_date=datetime(2024, 4, 29),
        latest_chapter_publish_day=Weekday.MON,
        latest_chapter_released=released,
        last_update=datetime(2024, 4, 29, 1, 0),
    )


def _fetched(chapter_title, release_date):
    return Manga(
        title="Foo",
        cover_url="https://cdn.example/12.png",
        author="作者",
        latest_chapter_title=chapter_title,
        latest_chapter_url="https://comic-days.com/episode/12",
        latest_chapter_release_date=release_date,
    )


@pytest.mark.parametrize(
    "stored_title,stored_released,fetched_title,release_date,expected",
    [
        ("第11話", True, "第12話", PAST, DiffKind.RELEASED),
        ("第11話", True, "第12話", FUTURE, DiffKind.UPCOMING),
        ("第12話", False, "第12話", PAST, DiffKind.RELEASED),
        ("第12話", True, "第12話", PAST, DiffKind.NO_CHANGE),
        ("第12話", False, "第12話", FUTURE, DiffKind.NO_CHANGE),
    ],
)
def test_classification_table(stored_title, stored_released, fetched_title, release_date, expected):
    kind = classify(_stored(stored_title, stored_released), _fetched(fetched_title, release_date), now=NOW)

    assert kind is expected


def test_release_boundary_is_inclusive():
    assert classify(_stored("第11話", True), _fetched("第12話", NOW), now=NOW) is DiffKind.RELEASED


def test_applied_row_is_stable_on_the_next_pass():
    diff = build_diff(_stored("第11話", True), _fetched("第12話", PAST), now=NOW)

    updated = apply_diff(diff, now=NOW)

    assert updated.latest_chapter_title == "第12話"
    assert updated.latest_chapter_released is True
    assert updated.latest_chapter_release_date == PAST.replace(tzinfo=None)
    assert updated.last_update == NOW.replace(tzinfo=None)
    assert classify(updated, _fetched("第12話", PAST), now=NOW) is DiffKind.NO_CHANGE


def test_upcoming_row_turns_released_once_due():
    diff = build_diff(_stored("第11話", True), _fetched("第12話", FUTURE), now=NOW)
    updated = apply_diff(diff, now=NOW)

    assert updated.latest_chapter_released is False
    assert classify(updated, _fetched("第12話", FUTURE), now=NOW) is DiffKind.NO_CHANGE
    assert classify(updated, _fetched("第12話", FUTURE), now=FUTURE) is DiffKind.RELEASED


def test_no_change_has_nothing_to_apply():
    diff = build_diff(_stored("第12話", True), _fetched("第12話", PAST), now=NOW)

    assert diff.kind is DiffKind.NO_CHANGE
    assert apply_diff(diff, now=NOW) is None
