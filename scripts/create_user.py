"""Create a user account directly in the configured DB.

Usage:
  python scripts/create_user.py --first-name Ada --last-name Lovelace --email ada@example.com --password '...'

NOTE: This is intended for local/dev seeding.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from movie_notes.auth.crud import signup
from movie_notes.config import load_config
from movie_notes.db import Database
from movie_notes.errors import ApiError
from movie_notes.repository import SqlUserRepository


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--first-name", required=True)
    ap.add_argument("--last-name", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--age", type=int, default=None)
    args = ap.parse_args()

    cfg = load_config()
    users = SqlUserRepository(Database(cfg.DB_DSN))

    try:
        u = signup(
            users,
            first_name=args.first_name,
            last_name=args.last_name,
            email=args.email,
            password=args.password,
            age=args.age,
        )
    except ApiError as e:
        print(f"Could not create user: {e.message}", file=sys.stderr)
        sys.exit(1)

    print("Created user:")
    print(u)


if __name__ == "__main__":
    main()
