import asyncio
from datetime import datetime

import services.manga_service as manga_service
from crawlers.errors import FetchError
from models.manga import Manga, Weekday
from models.series import Paginated, SeriesRow
from models.source import MangaSource
from utils.time import PUBLISHER_TZ


class FakeConnection:
    def __init__(self):
        self.commit_count = 0
        self.rollback_count = 0

    def commit(self):
        self.commit_count += 1

    def rollback(self):
        self.rollback_count += 1


MANGA = Manga(
    title="Foo",
    cover_url="https://cdn.example/1.png",
    author="作者",
    latest_chapter_title="第1話",
    latest_chapter_url="https://comic-days.com/episode/1",
    latest_chapter_release_date=datetime(2024, 5, 6, tzinfo=PUBLISHER_TZ),
)


def _fetcher(result, calls=None):
    async def fake_fetch(source, manga_id, *, session, browser=None):
        if calls is not None:
            calls.append((source, manga_id))
        return result

    return fake_fetch


def test_add_manga_inserts_and_commits(monkeypatch):
    conn = FakeConnection()
    inserted = []
    monkeypatch.setattr(manga_service, "get_series", lambda _conn, _source, _id: None)
    monkeypatch.setattr(manga_service, "insert_series", lambda _conn, row: inserted.append(row) or True)

    result = asyncio.run(
        manga_service.add_manga_service(conn, None, "ComicDays", " 123 ", fetcher=_fetcher(MANGA))
    )

    assert result["success"] is True
    assert result["manga_id"] == "123"
    assert inserted[0].key == (MangaSource.COMIC_DAYS, "123")
    assert inserted[0].latest_chapter_publish_day is Weekday.MON
    assert conn.commit_count == 1


def test_add_manga_validates_input():
    conn = FakeConnection()

    unknown = asyncio.run(manga_service.add_manga_service(conn, None, "Nowhere", "1", fetcher=_fetcher(MANGA)))
    blank = asyncio.run(manga_service.add_manga_service(conn, None, "ComicDays", "  ", fetcher=_fetcher(MANGA)))

    assert unknown == {"success": False, "error": "SOURCE_REQUIRED"}
    assert blank == {"success": False, "error": "MANGA_ID_REQUIRED"}


def test_add_manga_skips_fetch_for_tracked_series(monkeypatch):
    calls = []
    monkeypatch.setattr(manga_service, "get_series", lambda _conn, _source, _id: object())

    result = asyncio.run(
        manga_service.add_manga_service(FakeConnection(), None, "ComicDays", "1", fetcher=_fetcher(MANGA, calls))
    )

    assert result["error"] == "ALREADY_EXISTS"
    assert calls == []


def test_add_manga_conflict_on_insert_rolls_back(monkeypatch):
    conn = FakeConnection()
    monkeypatch.setattr(manga_service, "get_series", lambda _conn, _source, _id: None)
    monkeypatch.setattr(manga_service, "insert_series", lambda _conn, _row: False)

    result = asyncio.run(manga_service.add_manga_service(conn, None, "ComicDays", "1", fetcher=_fetcher(MANGA)))

    assert result["error"] == "ALREADY_EXISTS"
    assert conn.rollback_count == 1
    assert conn.commit_count == 0


def test_add_manga_reports_fetch_failure(monkeypatch):
    conn = FakeConnection()
    monkeypatch.setattr(manga_service, "get_series", lambda _conn, _source, _id: None)

    result = asyncio.run(
        manga_service.add_manga_service(
            conn, None, "GANMA", "abc", fetcher=_fetcher(FetchError.chapter_not_found("chapter count not found"))
        )
    )

    assert result == {
        "success": False,
        "error": "FETCH_FAILED",
        "message": "Chapter Not Found: chapter count not found",
    }
    assert conn.commit_count == 0


def test_retrieve_manga_returns_page(monkeypatch):
    row = SeriesRow.from_manga(MangaSource.COMIC_DAYS, "1", MANGA, now=datetime(2024, 5, 7, tzinfo=PUBLISHER_TZ))
    monkeypatch.setattr(
        manga_service,
        "list_series_paginated",
        lambda _conn, page, size, query=None: Paginated(data=[row], total_count=11, total_page=2),
    )

    result = manga_service.retrieve_manga_service(FakeConnection(), 1, 10)

    assert result["total_count"] == 11
    assert result["total_page"] == 2
    source, manga_id, manga = result["data"][0]
    assert (source, manga_id) == (MangaSource.COMIC_DAYS, "1")
    assert manga.latest_chapter_title == "第1話"


def test_delete_manga_commits_when_rows_deleted(monkeypatch):
    conn = FakeConnection()
    captured = {}

    def fake_delete(_conn, keys):
        captured["keys"] = keys
        return len(keys)

    monkeypatch.setattr(manga_service, "delete_series_bulk", fake_delete)

    result = manga_service.delete_manga_service(conn, [("ComicDays", "1"), ("GANMA", "x")])

    assert result == {"success": True, "deleted_count": 2}
    assert captured["keys"] == [(MangaSource.COMIC_DAYS, "1"), (MangaSource.GANMA, "x")]
    assert conn.commit_count == 1


def test_delete_manga_error_codes(monkeypatch):
    conn = FakeConnection()
    monkeypatch.setattr(manga_service, "delete_series_bulk", lambda _conn, _keys: 0)

    assert manga_service.delete_manga_service(conn, []) == {"success": False, "error": "EMPTY_REQUEST"}
    assert manga_service.delete_manga_service(conn, [("Nowhere", "1")]) == {
        "success": False,
        "error": "SOURCE_REQUIRED",
    }
    assert manga_service.delete_manga_service(conn, [("ComicDays", "1")]) == {
        "success": False,
        "error": "NOT_DELETED",
    }
    assert conn.rollback_count == 1
    assert conn.commit_count == 0
