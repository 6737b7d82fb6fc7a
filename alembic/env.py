"""Alembic environment for the TaskFlow schema (project root is on sys.path via alembic.ini)."""

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context
from taskflow.config import get_settings
from taskflow.database import Base, connect_args_for
from taskflow.models.task import Task  # noqa: F401
from taskflow.models.user import User  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = get_settings()
target_metadata = Base.metadata
is_sqlite = settings.DATABASE_URL.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL for the configured database without connecting."""
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=is_sqlite,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a connection bounded by DB_TIMEOUT_SECONDS."""
    connectable = create_engine(
        settings.DATABASE_URL,
        poolclass=pool.NullPool,
        connect_args=connect_args_for(settings.DATABASE_URL, settings.DB_TIMEOUT_SECONDS),
    )
    with connectable.connect() as connection:
        # SQLite cannot ALTER most constraints in place.
        context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=is_sqlite)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
