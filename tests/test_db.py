import sqlite3
import threading
import time

import pytest

import movie_notes.db as db_module
from movie_notes.db import Database, detect_dialect, is_unique_violation


@pytest.mark.parametrize(
    "dsn,dialect",
    [
        ("postgresql://u:p@localhost/db", "postgres"),
        ("postgres://u:p@localhost/db", "postgres"),
        ("sqlite:///data/app.sqlite", "sqlite"),
        ("./app.sqlite", "sqlite"),
        ("", "sqlite"),
    ],
)
def test_detect_dialect(dsn, dialect):
    assert detect_dialect(dsn) == dialect


def test_database_initializes_lazily(db):
    assert db.initialized is False
    with db.session() as conn:
        row = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()
    assert row["n"] == 0
    assert db.initialized is True


def test_concurrent_first_use_initializes_once(cfg, monkeypatch):
    calls = []
    real_init = db_module.init_db

    def slow_init(dsn):
        calls.append(dsn)
        time.sleep(0.05)
        real_init(dsn)

    monkeypatch.setattr(db_module, "init_db", slow_init)
    database = Database(cfg.DB_DSN)

    threads = [threading.Thread(target=database.ensure_initialized) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert calls == [cfg.DB_DSN]
    assert database.initialized is True


def test_is_unique_violation(tmp_path):
    conn = sqlite3.connect(str(tmp_path / "u.sqlite"))
    conn.execute("CREATE TABLE t (email TEXT UNIQUE)")
    conn.execute("INSERT INTO t VALUES ('a@x.com')")
    with pytest.raises(sqlite3.IntegrityError) as exc:
        conn.execute("INSERT INTO t VALUES ('a@x.com')")
    conn.close()
    assert is_unique_violation(exc.value) is True
    assert is_unique_violation(ValueError("UNIQUE")) is False


class _FakeCursor:
    def __init__(self):
        self.executed = []
        self.closed = False

    def execute(self, sql, params):
        self.executed.append((sql, params))

    def close(self):
        self.closed = True


class _FakePGConn:
    def __init__(self):
        self.cursors = []
        self.closed = False

    def cursor(self):
        cur = _FakeCursor()
        self.cursors.append(cur)
        return cur

    def close(self):
        self.closed = True


def test_pg_connection_rewrites_placeholders_and_closes_cursors():
    raw = _FakePGConn()
    conn = db_module.PGConnection(raw)

    conn.execute("SELECT * FROM notes WHERE id=? AND user_id=?", ("n-1", "u-1"))
    conn.execute("SELECT 1")
    assert raw.cursors[0].executed == [("SELECT * FROM notes WHERE id=%s AND user_id=%s", ("n-1", "u-1"))]
    assert not any(c.closed for c in raw.cursors)

    conn.close()
    assert all(c.closed for c in raw.cursors)
    assert raw.closed is True
