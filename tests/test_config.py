import pytest

from movie_notes.config import ConfigError, load_config


def test_load_config_defaults():
    cfg = load_config({"DATABASE_URL": "sqlite:///x.sqlite", "JWT_SECRET": "s"})
    assert cfg.DB_DSN == "sqlite:///x.sqlite"
    assert cfg.JWT_SECRET == "s"
    assert cfg.PORT == 5000
    assert cfg.API_HOST == "0.0.0.0"
    assert cfg.cors_origins() == ["*"]


def test_database_url_alias():
    cfg = load_config({"MOVIE_NOTES_DATABASE_URL": "sqlite:///y.sqlite", "JWT_SECRET": "s"})
    assert cfg.DB_DSN == "sqlite:///y.sqlite"


@pytest.mark.parametrize(
    "env",
    [
        {"JWT_SECRET": "s"},
        {"DATABASE_URL": "sqlite:///x.sqlite"},
        {"DATABASE_URL": "sqlite:///x.sqlite", "JWT_SECRET": "   "},
        {"DATABASE_URL": "", "JWT_SECRET": "s"},
    ],
)
def test_missing_essentials_fail(env):
    with pytest.raises(ConfigError):
        load_config(env)


def test_port_and_origins_overrides():
    cfg = load_config(
        {
            "DATABASE_URL": "sqlite:///x.sqlite",
            "JWT_SECRET": "s",
            "PORT": "8080",
            "CORS_ALLOW_ORIGINS": "http://localhost:5173, http://127.0.0.1:5173,",
        }
    )
    assert cfg.PORT == 8080
    assert cfg.cors_origins() == ["http://localhost:5173", "http://127.0.0.1:5173"]


def test_non_numeric_port_fails():
    with pytest.raises(ConfigError):
        load_config({"DATABASE_URL": "sqlite:///x.sqlite", "JWT_SECRET": "s", "PORT": "http"})


def test_main_exits_without_secret(monkeypatch, tmp_path):
    import movie_notes.__main__ as entry

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'db.sqlite'}")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setattr(entry.uvicorn, "run", lambda *a, **kw: pytest.fail("server must not start"))

    with pytest.raises(SystemExit) as exc:
        entry.main()
    assert exc.value.code == 1


def test_main_exits_when_database_unusable(monkeypatch, tmp_path):
    import movie_notes.__main__ as entry

    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{blocker / 'db.sqlite'}")
    monkeypatch.setenv("JWT_SECRET", "s")
    monkeypatch.setattr(entry.uvicorn, "run", lambda *a, **kw: pytest.fail("server must not start"))

    with pytest.raises(SystemExit) as exc:
        entry.main()
    assert exc.value.code == 1


def test_main_starts_server_when_configured(monkeypatch, tmp_path):
    import movie_notes.__main__ as entry

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'db.sqlite'}")
    monkeypatch.setenv("JWT_SECRET", "s")
    monkeypatch.setenv("PORT", "5050")
    calls = []
    monkeypatch.setattr(entry.uvicorn, "run", lambda app, **kw: calls.append(kw))

    entry.main()
    assert calls and calls[0]["port"] == 5050
    assert (tmp_path / "db.sqlite").exists()
