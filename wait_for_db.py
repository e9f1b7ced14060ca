"""Block until the Postgres behind DATABASE_URL accepts connections."""
import logging
import os
import time

import psycopg2

logger = logging.getLogger("wait_for_db")


def libpq_url(database_url: str) -> str:
    # libpq understands postgresql:// only; drop the SQLAlchemy driver suffix and the Heroku-style scheme
    for prefix in ("postgresql+psycopg2://", "postgres://"):
        if database_url.startswith(prefix):
            return "postgresql://" + database_url[len(prefix):]
    return database_url


def wait(database_url: str | None = None, timeout_s: int | None = None) -> None:
    database_url = database_url or os.getenv("DATABASE_URL")
    if not database_url:
        raise SystemExit("DATABASE_URL is not set")
    if timeout_s is None:
        timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))

    dsn = libpq_url(database_url)
    deadline = time.monotonic() + timeout_s
    attempt = 0
    logger.info("Waiting up to %ss for Postgres", timeout_s)
    while True:
        attempt += 1
        try:
            psycopg2.connect(dsn, connect_timeout=5).close()
        except psycopg2.OperationalError as e:
            if time.monotonic() > deadline:
                logger.error("Postgres still unreachable after %s attempts: %s", attempt, e)
                raise
            time.sleep(1)
            continue
        logger.info("Postgres is ready (attempt %s)", attempt)
        return


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[wait_for_db] %(message)s")
    wait()
