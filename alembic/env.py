"""
Alembic environment for the teamcal database.

Target metadata is teamcal.db.base.Base, so `alembic revision --autogenerate`
compares against the ORM models. The URL is taken from the Alembic config
when set (tests point it at a temporary database), otherwise from
settings.DATABASE_URL.
"""

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context

from teamcal.core.config import settings
from teamcal.db.base import Base
from teamcal.models import member, stored_session  # noqa: F401


config = context.config

# Callers that already configured logging (the test suite) set configure_logger=False
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def get_url() -> str:
    """Resolve the database URL from the Alembic config or the app settings."""
    return config.get_main_option("sqlalchemy.url") or settings.DATABASE_URL


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL without a live connection)."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode (with a live database connection)."""
    connectable = create_engine(get_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            # SQLite cannot ALTER most things in place
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
