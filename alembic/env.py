"""
Alembic environment for the inspection store.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import load_env_files, require_postgres_url, resolve_database_url
from db.models import (  # noqa: F401  imports trigger Base.metadata registration
    Establishment,
    Inspection,
    SyncRun,
    Violation,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _migration_url() -> str:
    """
    First match wins: ``-x db_url=...``, ALEMBIC_DATABASE_URL,
    sqlalchemy.url in alembic.ini, then the application's own resolution.
    """

    load_env_files()

    candidates = (
        ("-x db_url", context.get_x_argument(as_dictionary=True).get("db_url")),
        ("ALEMBIC_DATABASE_URL", os.getenv("ALEMBIC_DATABASE_URL")),
        ("sqlalchemy.url", config.get_main_option("sqlalchemy.url")),
    )
    for source, value in candidates:
        if value and value.strip():
            return require_postgres_url(value.strip(), source=source)
    return require_postgres_url(resolve_database_url())


def run_migrations_offline() -> None:
    context.configure(
        url=_migration_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _migration_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
