# database.py
import os
from contextlib import contextmanager

import psycopg2
import psycopg2.extras


SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS series (
        source TEXT NOT NULL,
        manga_id TEXT NOT NULL,
        title TEXT NOT NULL,
        cover_url TEXT NOT NULL,
        author TEXT NOT NULL,
        latest_chapter_title TEXT NOT NULL,
        latest_chapter_url TEXT NOT NULL,
        latest_chapter_release_date TIMESTAMP NOT NULL,
        latest_chapter_publish_day TEXT NOT NULL
            CHECK (latest_chapter_publish_day IN ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')),
        latest_chapter_released BOOLEAN NOT NULL,
        last_update TIMESTAMP NOT NULL,
        PRIMARY KEY (source, manga_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_series_publish_day ON series (latest_chapter_publish_day)",
    """
    CREATE TABLE IF NOT EXISTS update_job_reports (
        id SERIAL PRIMARY KEY,
        job_name TEXT NOT NULL,
        status TEXT NOT NULL,
        report_data JSONB NOT NULL,
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
    """,
)


def _create_connection():
    """Open a psycopg2 connection from ``DATABASE_URL`` or the individual ``DB_*`` variables.

    The session time zone follows ``DB_TIMEZONE`` (default Asia/Tokyo) so that
    naive ``TIMESTAMP`` columns are read back as publisher-local wall clock.
    """
    timezone = os.getenv("DB_TIMEZONE", "Asia/Tokyo")
    options = f"-c timezone={timezone}"

    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return psycopg2.connect(database_url, options=options)

    return psycopg2.connect(
        dbname=os.getenv("DB_NAME"),
        user=os.getenv("DB_USER"),
        password=os.getenv("DB_PASSWORD"),
        host=os.getenv("DB_HOST"),
        port=os.getenv("DB_PORT", "5432"),
        options=options,
    )


def create_standalone_connection():
    """Connection for scripts and background jobs (no request context)."""
    return _create_connection()


def get_cursor(conn):
    return conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)


@contextmanager
def managed_cursor(conn):
    cursor = get_cursor(conn)
    try:
        yield cursor
    finally:
        cursor.close()


def setup_database(conn):
    with managed_cursor(conn) as cursor:
        for statement in SCHEMA_STATEMENTS:
            cursor.execute(statement)
    conn.commit()


def setup_database_standalone():
    conn = create_standalone_connection()
    try:
        setup_database(conn)
    finally:
        conn.close()
