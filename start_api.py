#!/usr/bin/env python3
"""
Container entrypoint: wait for Postgres, apply migrations, seed demo data,
then hand the process over to uvicorn.
"""
import logging
import os
import sys

from alembic import command
from alembic.config import Config

import wait_for_db

logger = logging.getLogger("start_api")

ROOT = os.path.dirname(os.path.abspath(__file__))


def migrate(database_url: str) -> None:
    cfg = Config(os.path.join(ROOT, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(ROOT, "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    logger.info("Applying migrations")
    command.upgrade(cfg, "head")


def serve() -> None:
    port = os.getenv("PORT", "8000")
    logger.info("Starting uvicorn on port %s", port)
    os.execv(
        sys.executable,
        [sys.executable, "-m", "uvicorn", "courtside.main:app", "--host", "0.0.0.0", "--port", port],
    )


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    wait_for_db.wait()

    from courtside.core.config import settings
    migrate(settings.DATABASE_URL)

    from courtside.seed import run as run_seed
    run_seed()

    serve()


if __name__ == "__main__":
    main()
