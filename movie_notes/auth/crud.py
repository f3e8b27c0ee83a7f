from __future__ import annotations

from typing import Any, Dict, Optional

from movie_notes.errors import ConflictError, NotFoundError, ValidationError
from movie_notes.repository import UserStore

from .security import TokenIssuer, hash_password, verify_password


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def signup(
    users: UserStore,
    *,
    first_name: Optional[str],
    last_name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    age: Optional[int] = None,
) -> Dict[str, Any]:
    """Register a user and return the stored record without its password."""
    if not all(_present(v) for v in (first_name, last_name, email, password)):
        raise ValidationError("Missing fields")

    e = normalize_email(email)
    # Racy on its own; the UNIQUE index on users.email settles ties.
    if users.find_by_email(e) is not None:
        raise ConflictError("Email already exists")

    try:
        password_hash = hash_password(str(password))
    except ValueError as exc:
        # e.g. bcrypt refuses NUL bytes
        raise ValidationError("Invalid request body", details=str(exc))

    return users.create(
        first_name=str(first_name).strip(),
        last_name=str(last_name).strip(),
        email=e,
        password_hash=password_hash,
        age=age,
    )


def signin(users: UserStore, issuer: TokenIssuer, *, email: Optional[str], password: Optional[str]) -> str:
    """Check credentials and return a fresh bearer token.

    Unknown accounts are reported as such ("User doesn't exist") rather than
    folded into the generic credential failure.
    """
    if not _present(email) or not _present(password):
        raise ValidationError("Email and password required")

    row = users.find_by_email(normalize_email(email))
    if row is None:
        raise NotFoundError("User doesn't exist")

    if not verify_password(str(password), str(row["password_hash"])):
        raise ValidationError("Invalid credentials")

    return issuer.issue(user_id=str(row["id"]), email=str(row["email"]))
