from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from courtside.core.config import settings
from courtside.db.session import Base

# Every model module must be imported for its table to land in Base.metadata
from courtside.models import audit_log, booking, club, court, payment, user, user_club_role  # noqa: F401

config = context.config

# The runtime DATABASE_URL wins over anything in alembic.ini (start_api.py sets it explicitly too)
url = config.get_main_option("sqlalchemy.url") or settings.DATABASE_URL
if not url:
    raise RuntimeError("DATABASE_URL is not set (check .env / courtside.core.config.settings)")

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_offline() -> None:
    """Emit SQL to stdout instead of touching a database (`alembic upgrade head --sql`)."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
