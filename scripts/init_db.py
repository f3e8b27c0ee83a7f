import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from movie_notes.config import load_config
from movie_notes.db import detect_dialect, init_db


def main() -> None:
    cfg = load_config()
    init_db(cfg.DB_DSN)
    print(f"DB initialized ({detect_dialect(cfg.DB_DSN)})")


if __name__ == "__main__":
    main()
