import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1]))

from typing import Any, Dict, Tuple

import pytest
from fastapi.testclient import TestClient

from movie_notes.api.server import create_app
from movie_notes.auth.security import TokenIssuer
from movie_notes.config import Config, load_config
from movie_notes.db import Database

TEST_SECRET = "test-secret-not-for-production"


@pytest.fixture()
def cfg(tmp_path: _Path) -> Config:
    """Config pointing at a fresh SQLite file per test."""
    return load_config(
        {
            "DATABASE_URL": f"sqlite:///{tmp_path / 'movie_notes.sqlite'}",
            "JWT_SECRET": TEST_SECRET,
        }
    )


@pytest.fixture()
def db(cfg: Config) -> Database:
    return Database(cfg.DB_DSN)


@pytest.fixture()
def app(cfg: Config, db: Database):
    return create_app(cfg, db=db)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET)


def signup_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "password": "pw123456",
        "age": 36,
    }
    payload.update(overrides)
    return payload


def register_and_login(client: TestClient, email: str, password: str = "pw123456") -> Tuple[Dict[str, Any], str]:
    """Sign up a user through the API and return (user, token)."""
    r = client.post("/signup", json=signup_payload(email=email, password=password))
    assert r.status_code == 200, r.text
    user = r.json()["user"]

    r = client.post("/signin", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return user, r.json()["token"]


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
