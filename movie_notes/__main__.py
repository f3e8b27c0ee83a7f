"""Run the API: ``python -m movie_notes``.

Configuration problems and an unreachable database stop the process before
it starts listening.
"""

from __future__ import annotations

import sys

import uvicorn

from movie_notes.api.server import create_app
from movie_notes.config import ConfigError, load_config
from movie_notes.db import Database


def _fatal(msg: str) -> None:
    print(f"FATAL: {msg}", file=sys.stderr)
    sys.exit(1)


def main() -> None:
    try:
        cfg = load_config()
    except ConfigError as e:
        _fatal(str(e))
        return

    db = Database(cfg.DB_DSN)
    try:
        db.ensure_initialized()
    except Exception as e:
        _fatal(f"database unavailable: {type(e).__name__}: {e}")
        return

    app = create_app(cfg, db=db)
    print(f"[api] Server running on port {cfg.PORT}")
    uvicorn.run(app, host=cfg.API_HOST, port=cfg.PORT, reload=False)


if __name__ == "__main__":
    main()
