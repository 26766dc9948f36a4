import pytest

import database


class FakeCursor:
    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.statements = []
        self.closed = False

    def execute(self, sql, params=None):
        if self.fail_on and self.fail_on in sql:
            raise RuntimeError("ddl failed")
        self.statements.append(" ".join(sql.split()))

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.commit_count = 0
        self.closed = False

    def commit(self):
        self.commit_count += 1

    def close(self):
        self.closed = True


def test_setup_database_creates_series_and_report_tables(monkeypatch):
    cursor = FakeCursor()
    conn = FakeConnection()
    monkeypatch.setattr(database, "get_cursor", lambda _conn: cursor)

    database.setup_database(conn)

    assert any(s.startswith("CREATE TABLE IF NOT EXISTS series (") for s in cursor.statements)
    assert any("PRIMARY KEY (source, manga_id)" in s for s in cursor.statements)
    assert any(s.startswith("CREATE TABLE IF NOT EXISTS update_job_reports") for s in cursor.statements)
    assert conn.commit_count == 1
    assert cursor.closed is True


def test_setup_database_standalone_closes_connection_on_error(monkeypatch):
    cursor = FakeCursor(fail_on="update_job_reports")
    conn = FakeConnection()
    monkeypatch.setattr(database, "get_cursor", lambda _conn: cursor)
    monkeypatch.setattr(database, "create_standalone_connection", lambda: conn)

    with pytest.raises(RuntimeError, match="ddl failed"):
        database.setup_database_standalone()

    assert conn.commit_count == 0
    assert conn.closed is True
    assert cursor.closed is True


def test_managed_cursor_closes_on_exception(monkeypatch):
    cursor = FakeCursor()
    monkeypatch.setattr(database, "get_cursor", lambda _conn: cursor)

    with pytest.raises(RuntimeError):
        with database.managed_cursor(conn=object()):
            raise RuntimeError("boom")

    assert cursor.closed is True


def _record_connect(monkeypatch):
    calls = []

    def fake_connect(*args, **kwargs):
        calls.append((args, kwargs))
        return FakeConnection()

    monkeypatch.setattr(database.psycopg2, "connect", fake_connect)
    return calls


def test_session_zone_is_publisher_local_unless_overridden(monkeypatch):
    calls = _record_connect(monkeypatch)
    monkeypatch.setenv("DATABASE_URL", "postgres://series")
    monkeypatch.delenv("DB_TIMEZONE", raising=False)

    database.create_standalone_connection()
    monkeypatch.setenv("DB_TIMEZONE", "UTC")
    database.create_standalone_connection()

    assert [args for args, _ in calls] == [("postgres://series",), ("postgres://series",)]
    assert [kwargs["options"] for _, kwargs in calls] == ["-c timezone=Asia/Tokyo", "-c timezone=UTC"]


def test_individual_vars_default_the_port(monkeypatch):
    calls = _record_connect(monkeypatch)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("DB_PORT", raising=False)
    monkeypatch.delenv("DB_TIMEZONE", raising=False)
    monkeypatch.setenv("DB_NAME", "manga")
    monkeypatch.setenv("DB_USER", "crawler")
    monkeypatch.setenv("DB_PASSWORD", "secret")
    monkeypatch.setenv("DB_HOST", "db.internal")

    conn = database.create_standalone_connection()

    assert isinstance(conn, FakeConnection)
    args, kwargs = calls[0]
    assert args == ()
    assert kwargs == {
        "dbname": "manga",
        "user": "crawler",
        "password": "secret",
        "host": "db.internal",
        "port": "5432",
        "options": "-c timezone=Asia/Tokyo",
    }


def test_get_cursor_returns_dict_rows():
    class RecordingConnection:
        def cursor(self, cursor_factory=None):
            return cursor_factory

    assert database.get_cursor(RecordingConnection()) is database.psycopg2.extras.RealDictCursor
