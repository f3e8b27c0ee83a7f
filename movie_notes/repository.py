"""Repositories over the three record kinds (users, favorites, notes).

Route handlers depend on the `*Store` protocols; the `Sql*` classes implement them
on top of a shared `Database` handle. Rows are returned already shaped for the
wire (`_id`, `userID`, camelCase favorite fields) and user rows never carry the
password hash unless explicitly asked for.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Protocol

from movie_notes.db import Database, is_unique_violation
from movie_notes.errors import ApiError, ConflictError, InternalError
from movie_notes.util.time import utcnow_iso


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def new_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def _unit_of_work(db: Database) -> Iterator[Any]:
    """Run one store interaction, turning driver failures into InternalError."""
    try:
        with db.session() as conn:
            yield conn
    except ApiError:
        raise
    except Exception as e:
        _debug(f"store failure: {type(e).__name__}: {e}")
        raise InternalError(details=str(e)) from e


# -----------------------------
# Row shaping
# -----------------------------


def public_user(row: Any) -> Dict[str, Any]:
    d = dict(row)
    return {
        "_id": d["id"],
        "first_name": d["first_name"],
        "last_name": d["last_name"],
        "email": d["email"],
        "age": d.get("age"),
        "created_at": d["created_at"],
    }


def _favorite(row: Any) -> Dict[str, Any]:
    d = dict(row)
    return {
        "_id": d["id"],
        "movieName": d["movie_name"],
        "imgUrl": d["img_url"],
        "userID": d["user_id"],
        "movieID": d["movie_id"],
        "created_at": d["created_at"],
    }


def _note(row: Any) -> Dict[str, Any]:
    d = dict(row)
    return {
        "_id": d["id"],
        "title": d["title"],
        "desc": d["description"],
        "userID": d["user_id"],
        "created_at": d["created_at"],
    }


# -----------------------------
# Interfaces
# -----------------------------


class UserStore(Protocol):
    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]: ...

    def create(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        age: Optional[int] = None,
    ) -> Dict[str, Any]: ...

    def list_public(self) -> List[Dict[str, Any]]: ...


class FavoriteStore(Protocol):
    def create(
        self, *, user_id: str, movie_name: Optional[str], img_url: Optional[str], movie_id: Optional[str]
    ) -> Dict[str, Any]: ...

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]: ...


class NoteStore(Protocol):
    def create(self, *, user_id: str, title: Optional[str], desc: Optional[str]) -> Dict[str, Any]: ...

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]: ...

    def delete_owned(self, note_id: str, user_id: str) -> int: ...

    def update_owned(self, note_id: str, user_id: str, *, title: Optional[str], desc: Optional[str]) -> int: ...


# -----------------------------
# SQL implementations
# -----------------------------


class SqlUserRepository:
    def __init__(self, db: Database):
        self._db = db

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Full user row including `password_hash`, or None."""
        e = (email or "").strip()
        if not e:
            return None
        with _unit_of_work(self._db) as conn:
            row = conn.execute("SELECT * FROM users WHERE email=?", (e,)).fetchone()
        return dict(row) if row is not None else None

    def create(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        age: Optional[int] = None,
    ) -> Dict[str, Any]:
        row = {
            "id": new_id(),
            "first_name": first_name,
            "last_name": last_name,
            "email": email.strip(),
            "password_hash": password_hash,
            "age": age,
            "created_at": utcnow_iso(),
        }
        with _unit_of_work(self._db) as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO users (id, first_name, last_name, email, password_hash, age, created_at)
                    VALUES (?,?,?,?,?,?,?)
                    """,
                    (
                        row["id"],
                        row["first_name"],
                        row["last_name"],
                        row["email"],
                        row["password_hash"],
                        row["age"],
                        row["created_at"],
                    ),
                )
            except Exception as e:
                # Two signups racing past the existence check.
                if is_unique_violation(e):
                    raise ConflictError() from e
                raise
        return public_user(row)

    def list_public(self) -> List[Dict[str, Any]]:
        with _unit_of_work(self._db) as conn:
            rows = conn.execute(
                "SELECT id, first_name, last_name, email, age, created_at FROM users ORDER BY seq"
            ).fetchall()
        return [public_user(r) for r in rows]


class SqlFavoriteRepository:
    def __init__(self, db: Database):
        self._db = db

    def create(
        self, *, user_id: str, movie_name: Optional[str], img_url: Optional[str], movie_id: Optional[str]
    ) -> Dict[str, Any]:
        row = {
            "id": new_id(),
            "user_id": user_id,
            "movie_name": movie_name,
            "img_url": img_url,
            "movie_id": movie_id,
            "created_at": utcnow_iso(),
        }
        with _unit_of_work(self._db) as conn:
            conn.execute(
                """
                INSERT INTO favorites (id, user_id, movie_name, img_url, movie_id, created_at)
                VALUES (?,?,?,?,?,?)
                """,
                (row["id"], user_id, movie_name, img_url, movie_id, row["created_at"]),
            )
        return _favorite(row)

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        with _unit_of_work(self._db) as conn:
            rows = conn.execute(
                "SELECT * FROM favorites WHERE user_id=? ORDER BY seq",
                (user_id,),
            ).fetchall()
        return [_favorite(r) for r in rows]


class SqlNoteRepository:
    def __init__(self, db: Database):
        self._db = db

    def create(self, *, user_id: str, title: Optional[str], desc: Optional[str]) -> Dict[str, Any]:
        row = {
            "id": new_id(),
            "user_id": user_id,
            "title": title,
            "description": desc,
            "created_at": utcnow_iso(),
        }
        with _unit_of_work(self._db) as conn:
            conn.execute(
                "INSERT INTO notes (id, user_id, title, description, created_at) VALUES (?,?,?,?,?)",
                (row["id"], user_id, title, desc, row["created_at"]),
            )
        return _note(row)

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        with _unit_of_work(self._db) as conn:
            rows = conn.execute(
                "SELECT * FROM notes WHERE user_id=? ORDER BY seq",
                (user_id,),
            ).fetchall()
        return [_note(r) for r in rows]

    def delete_owned(self, note_id: str, user_id: str) -> int:
        """Delete the note only if `user_id` owns it. Returns rows removed (0 or 1)."""
        with _unit_of_work(self._db) as conn:
            cur = conn.execute("DELETE FROM notes WHERE id=? AND user_id=?", (note_id, user_id))
            return int(cur.rowcount or 0)

    def update_owned(self, note_id: str, user_id: str, *, title: Optional[str], desc: Optional[str]) -> int:
        with _unit_of_work(self._db) as conn:
            cur = conn.execute(
                "UPDATE notes SET title=?, description=? WHERE id=? AND user_id=?",
                (title, desc, note_id, user_id),
            )
            return int(cur.rowcount or 0)
