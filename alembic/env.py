"""Alembic environment: metadata from esign.db.models, URL from settings."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from esign.core.config import settings
from esign.db import models  # noqa: F401  registers tables on Base.metadata
from esign.db.session import Base, _to_sync_url

config = context.config

# Programmatic runs (esign.db.migrations) pass the URL explicitly
database_url = (
    config.attributes.get("database_url_override")
    or config.get_main_option("sqlalchemy.url")
    or _to_sync_url(settings.DATABASE_URL)
)

if config.config_file_name is not None and not config.attributes.get("database_url_override"):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = create_engine(database_url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
