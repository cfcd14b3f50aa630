"""
Release phase: migrate the schema to head, then run the idempotent seed.

Usage:
  python scripts/release.py              # migrate + seed
  python scripts/release.py --no-seed    # migrate only
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def release_database_url() -> str:
    db_url = (os.environ.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("DATABASE_URL must be set for the release phase.")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and db_url.startswith("sqlite"):
        raise RuntimeError("Refusing to release against sqlite in production; point DATABASE_URL at Postgres.")
    return db_url


def alembic_config(db_url: str):
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def migrate(db_url: str) -> None:
    from alembic import command

    print("Upgrading schema to head...", flush=True)
    command.upgrade(alembic_config(db_url), "head")


def run_release(*, seed: bool = True) -> None:
    db_url = release_database_url()
    print("=== CAD release start ===", flush=True)
    migrate(db_url)
    if seed:
        from scripts.init_db import seed_only

        print("Seeding permissions, owner, settings and default values...", flush=True)
        seed_only(database_url=db_url)
    print("=== CAD release done ===", flush=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--no-seed", action="store_true", help="only run migrations")
    args = parser.parse_args(argv)
    run_release(seed=not args.no_seed)


if __name__ == "__main__":
    main()
