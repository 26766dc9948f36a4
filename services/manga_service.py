"""Add / list / delete flows for tracked series."""

import logging

from crawlers.errors import FetchError
from crawlers.registry import fetch_manga
from models.series import SeriesRow
from models.source import MangaSource
from repositories.series_repo import (
    delete_series_bulk,
    get_series,
    insert_series,
    list_series_paginated,
)

LOGGER = logging.getLogger(__name__)


def _already_exists(source, manga_id):
    return {"success": False, "error": "ALREADY_EXISTS", "source": source.value, "manga_id": manga_id}


async def add_manga_service(conn, session, source, manga_id, browser=None, fetcher=fetch_manga):
    """Fetch a series once and start tracking it."""
    parsed_source = MangaSource.parse(source)
    if parsed_source is None:
        return {"success": False, "error": "SOURCE_REQUIRED"}

    manga_id = (manga_id or "").strip()
    if not manga_id:
        return {"success": False, "error": "MANGA_ID_REQUIRED"}

    if get_series(conn, parsed_source, manga_id) is not None:
        return _already_exists(parsed_source, manga_id)

    result = await fetcher(parsed_source, manga_id, session=session, browser=browser)
    if isinstance(result, FetchError):
        return {"success": False, "error": "FETCH_FAILED", "message": result.describe()}

    row = SeriesRow.from_manga(parsed_source, manga_id, result)
    try:
        inserted = insert_series(conn, row)
    except Exception:
        conn.rollback()
        raise

    if not inserted:
        conn.rollback()
        return _already_exists(parsed_source, manga_id)

    conn.commit()
    LOGGER.info("tracking new series source=%s manga_id=%s title=%s", parsed_source.value, manga_id, result.title)
    return {"success": True, "source": parsed_source.value, "manga_id": manga_id, "manga": result}


def retrieve_manga_service(conn, page_number, page_size, query=None):
    page = list_series_paginated(conn, page_number, page_size, query)
    return {
        "success": True,
        "data": [(row.source, row.manga_id, row.to_manga()) for row in page.data],
        "total_count": page.total_count,
        "total_page": page.total_page,
    }


def delete_manga_service(conn, keys):
    """Stop tracking the given ``(source, manga_id)`` pairs."""
    if not keys:
        return {"success": False, "error": "EMPTY_REQUEST"}

    normalized = []
    for source, manga_id in keys:
        parsed_source = MangaSource.parse(source)
        if parsed_source is None:
            return {"success": False, "error": "SOURCE_REQUIRED"}
        normalized.append((parsed_source, manga_id))

    try:
        deleted_count = delete_series_bulk(conn, normalized)
    except Exception:
        conn.rollback()
        raise

    if deleted_count == 0:
        conn.rollback()
        return {"success": False, "error": "NOT_DELETED"}

    conn.commit()
    return {"success": True, "deleted_count": deleted_count}
