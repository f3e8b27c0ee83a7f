import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from movie_notes.__main__ import main


if __name__ == "__main__":
    main()
