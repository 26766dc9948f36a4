"""Repository for tracked series rows."""

import logging

import psycopg2.extras

from database import get_cursor
from models.series import Paginated, SeriesRow

EXECUTE_VALUES_PAGE_SIZE = 1000
LOGGER = logging.getLogger(__name__)

SERIES_COLUMNS = (
    "source",
    "manga_id",
    "title",
    "cover_url",
    "author",
    "latest_chapter_title",
    "latest_chapter_url",
    "latest_chapter_release_date",
    "latest_chapter_publish_day",
    "latest_chapter_released",
    "last_update",
)

_SELECT_COLUMNS = ", ".join(SERIES_COLUMNS)


def _build_filters(query):
    clauses = []
    params = []
    if query is None:
        return clauses, params

    if query.source is not None:
        clauses.append("source = %s")
        params.append(query.source.value)
    if query.title:
        clauses.append("title ILIKE %s")
        params.append(f"%{query.title}%")
    if query.author:
        clauses.append("author ILIKE %s")
        params.append(f"%{query.author}%")
    if query.chapter_title:
        clauses.append("latest_chapter_title ILIKE %s")
        params.append(f"%{query.chapter_title}%")
    if query.day is not None:
        clauses.append("latest_chapter_publish_day = %s")
        params.append(query.day.value)
    return clauses, params


def list_series_paginated(conn, page_number, page_size, query=None):
    """
    Return one page of series rows ordered by ``(source, manga_id)``.

    Pages are 1-based and never overlap: page ``n`` starts at offset
    ``(n - 1) * page_size``. A page past the end is empty.
    """
    if page_number < 1:
        raise ValueError("page_number must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    clauses, params = _build_filters(query)
    where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    cursor = get_cursor(conn)
    try:
        cursor.execute(
            f"""
            SELECT {_SELECT_COLUMNS}, count(*) OVER () AS total_count
            FROM series
            {where_sql}
            ORDER BY source, manga_id
            LIMIT %s OFFSET %s
            """,
            (*params, page_size, (page_number - 1) * page_size),
        )
        rows = cursor.fetchall()

        if rows:
            total_count = int(rows[0]["total_count"])
        else:
            cursor.execute(f"SELECT count(*) AS total_count FROM series {where_sql}", tuple(params))
            count_row = cursor.fetchone()
            total_count = int(count_row["total_count"]) if count_row else 0
    finally:
        cursor.close()

    return Paginated(
        data=[SeriesRow.from_db_row(row) for row in rows],
        total_count=total_count,
        total_page=Paginated.page_count(total_count, page_size),
    )


def get_series(conn, source, manga_id):
    cursor = get_cursor(conn)
    try:
        cursor.execute(
            f"SELECT {_SELECT_COLUMNS} FROM series WHERE source = %s AND manga_id = %s",
            (source.value, manga_id),
        )
        row = cursor.fetchone()
    finally:
        cursor.close()
    return SeriesRow.from_db_row(row) if row else None


def insert_series(conn, row) -> bool:
    """
    Insert a new tracked row.

    Returns True if inserted, False if ``(source, manga_id)`` already existed.
    The caller owns the transaction.
    """
    placeholders = ", ".join(["%s"] * len(SERIES_COLUMNS))
    cursor = get_cursor(conn)
    try:
        cursor.execute(
            f"""
            INSERT INTO series ({_SELECT_COLUMNS})
            VALUES ({placeholders})
            ON CONFLICT (source, manga_id) DO NOTHING
            RETURNING manga_id
            """,
            row.to_db_tuple(),
        )
        return cursor.fetchone() is not None
    finally:
        cursor.close()


def batch_update_series(conn, rows) -> int:
    """
    Overwrite the stored state of ``rows`` in one transaction.

    Rows are staged in a temporary table and applied with a single
    ``UPDATE ... FROM``; either every row is written or none is.
    """
    if not rows:
        return 0

    cursor = get_cursor(conn)
    try:
        cursor.execute(
            """
            CREATE TEMP TABLE series_update_staging (
                LIKE series INCLUDING DEFAULTS
            ) ON COMMIT DROP
            """
        )
        psycopg2.extras.execute_values(
            cursor,
            f"INSERT INTO series_update_staging ({_SELECT_COLUMNS}) VALUES %s",
            [row.to_db_tuple() for row in rows],
            page_size=EXECUTE_VALUES_PAGE_SIZE,
        )
        cursor.execute(
            """
            UPDATE series AS s
            SET title = staged.title,
                cover_url = staged.cover_url,
                author = staged.author,
                latest_chapter_title = staged.latest_chapter_title,
                latest_chapter_url = staged.latest_chapter_url,
                latest_chapter_release_date = staged.latest_chapter_release_date,
                latest_chapter_publish_day = staged.latest_chapter_publish_day,
                latest_chapter_released = staged.latest_chapter_released,
                last_update = staged.last_update
            FROM series_update_staging AS staged
            WHERE s.source = staged.source AND s.manga_id = staged.manga_id
            """
        )
        updated = cursor.rowcount
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()

    LOGGER.info("batch update applied rows=%s updated=%s", len(rows), updated)
    return updated


def delete_series_bulk(conn, keys) -> int:
    """Delete rows by ``(source, manga_id)`` keys; the caller commits."""
    if not keys:
        return 0

    cursor = get_cursor(conn)
    try:
        cursor.execute(
            "DELETE FROM series WHERE (source, manga_id) IN %s",
            (tuple((source.value, manga_id) for source, manga_id in keys),),
        )
        return cursor.rowcount
    finally:
        cursor.close()
