#!/usr/bin/env python
"""Replace the drill catalog with the contents of the seed file."""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from bank import DRILLS_SEED_FILE, SeedError, seed_drills  # noqa: E402
from db import SessionLocal, init_db  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--file", type=Path, default=DRILLS_SEED_FILE, help="JSON list of drills")
    parser.add_argument(
        "--append", action="store_true", help="keep existing drills instead of replacing them"
    )
    parser.add_argument(
        "--create-tables", action="store_true", help="create missing tables first (dev only)"
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    if args.create_tables:
        init_db()

    with SessionLocal() as db:
        try:
            n = seed_drills(db, path=args.file, replace=not args.append)
        except SeedError as e:
            print(f"Error: {e}")
            sys.exit(1)
    print(f"Seeded {n} drills from {args.file}")


if __name__ == "__main__":
    main()
