from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Sequence
from urllib.parse import urlparse

from movie_notes.schema import get_schema_sql


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def detect_dialect(dsn: str) -> str:
    """Return 'postgres' or 'sqlite'."""
    s = (dsn or "").strip()
    if not s:
        return "sqlite"
    try:
        scheme = urlparse(s).scheme.lower()
    except ValueError:
        scheme = ""
    if scheme in ("postgres", "postgresql"):
        return "postgres"
    return "sqlite"


def _sqlite_path(dsn: str) -> str:
    s = (dsn or "").strip()
    if s.lower().startswith("sqlite:///"):
        s = s[len("sqlite:///") :]
    return s


def is_unique_violation(exc: BaseException) -> bool:
    """True when `exc` is a UNIQUE constraint failure from either driver."""
    if isinstance(exc, sqlite3.IntegrityError):
        return "UNIQUE" in str(exc).upper()
    # psycopg2 unique_violation
    return getattr(exc, "pgcode", None) == "23505"


class PGConnection:
    """Makes a psycopg2 connection accept the qmark placeholders used by the repositories.

    None of our statements contain a literal '?', so a plain substitution is enough.

    Cursors handed out by `execute` belong to the connection and are closed with it.
    """

    dialect = "postgres"

    def __init__(self, conn: Any):
        self._conn = conn
        self._cursors: List[Any] = []

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        cur = self._conn.cursor()
        self._cursors.append(cur)
        cur.execute(sql.replace("?", "%s"), tuple(params or ()))
        return cur

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        for cur in self._cursors:
            cur.close()
        self._cursors.clear()
        self._conn.close()


@contextmanager
def connect(db_dsn: str) -> Iterator[Any]:
    """Open one unit of work: commit on success, roll back on error, always close.

    - SQLite: WAL + NORMAL sync, rows are sqlite3.Row.
    - Postgres: psycopg2 with RealDictCursor so rows behave like dicts.
    """
    dsn = (db_dsn or "").strip()

    if detect_dialect(dsn) == "postgres":
        try:
            import psycopg2
            import psycopg2.extras
        except ImportError as e:
            raise RuntimeError(
                "Postgres selected but psycopg2 is not installed. "
                "Install the 'postgres' extra and try again."
            ) from e

        conn: Any = PGConnection(psycopg2.connect(dsn, cursor_factory=psycopg2.extras.RealDictCursor))
    else:
        path = _sqlite_path(dsn)
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")  # 5s

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_dsn: str) -> None:
    """Create all tables (idempotent)."""
    dialect = detect_dialect(db_dsn)
    _debug(f"Initializing DB ({dialect})")
    ddl = get_schema_sql(dialect)
    with connect(db_dsn) as conn:
        if dialect == "postgres":
            for stmt in (s.strip() for s in ddl.split(";")):
                if stmt:
                    conn.execute(stmt)
        else:
            conn.executescript(ddl)


class Database:
    """The process-wide database handle.

    Created once by the app factory and handed to every repository. The schema
    is created (and reachability proven) on first use, exactly once, even
    when the first requests arrive concurrently.
    """

    def __init__(self, dsn: str):
        self.dsn = dsn
        self.dialect = detect_dialect(dsn)
        self._init_lock = threading.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            init_db(self.dsn)
            self._initialized = True
            _debug("Connected")

    @contextmanager
    def session(self) -> Iterator[Any]:
        self.ensure_initialized()
        with connect(self.dsn) as conn:
            yield conn
