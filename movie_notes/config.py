import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

# Load a local .env file if present. Real environment variables win.
load_dotenv()


class ConfigError(RuntimeError):
    """Raised when required startup configuration is missing or unusable."""


def _env_str(env: Mapping[str, str], *names: str) -> Optional[str]:
    """Return the first non-blank value among `names`, stripped."""
    for name in names:
        raw = env.get(name)
        if raw is not None and raw.strip():
            return raw.strip()
    return None


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Provide secrets via environment variables or a .env file.
    Do not hardcode them in source code.
    """

    # -----------------
    # Core
    # -----------------
    # sqlite:///path/to/file.sqlite, a bare file path, or postgresql://...
    DB_DSN: str

    # -----------------
    # Auth (JWT)
    # -----------------
    # HS256 signing secret. There is no dev default: the API refuses to start without it.
    JWT_SECRET: str

    # -----------------
    # HTTP
    # -----------------
    API_HOST: str = "0.0.0.0"
    PORT: int = 5000

    # The original clients call the API from arbitrary origins.
    CORS_ALLOW_ORIGINS: str = "*"

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in (self.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]


def load_config(env: Mapping[str, str] | None = None) -> Config:
    """Build a Config from the environment, failing fast on missing essentials."""
    env = os.environ if env is None else env

    db_dsn = _env_str(env, "DATABASE_URL", "MOVIE_NOTES_DATABASE_URL")
    if not db_dsn:
        raise ConfigError("DATABASE_URL is not defined")

    secret = _env_str(env, "JWT_SECRET")
    if not secret:
        raise ConfigError("JWT_SECRET is not defined")

    return Config(
        DB_DSN=db_dsn,
        JWT_SECRET=secret,
        API_HOST=_env_str(env, "API_HOST") or "0.0.0.0",
        PORT=_env_int(env, "PORT", 5000),
        CORS_ALLOW_ORIGINS=_env_str(env, "CORS_ALLOW_ORIGINS") or "*",
    )
