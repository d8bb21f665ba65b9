"""
Alembic environment for the summary job store.

Database URL lookup order: ``-x db_url=...``, ALEMBIC_DATABASE_URL,
``sqlalchemy.url`` in alembic.ini, then the application's DATABASE_URL /
LOCAL_DATABASE_URL.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

import db.models  # noqa: F401 (registers summary_jobs on Base.metadata)
from db.base import Base
from db.config import load_env_files, normalize_postgres_url, resolve_database_url

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _migration_url() -> str:
    load_env_files()
    overrides = (
        context.get_x_argument(as_dictionary=True).get("db_url"),
        os.getenv("ALEMBIC_DATABASE_URL"),
        config.get_main_option("sqlalchemy.url"),
    )
    url = next((value.strip() for value in overrides if value and value.strip()), None)
    return normalize_postgres_url(url) if url else resolve_database_url()


def _run() -> None:
    options = {"target_metadata": Base.metadata, "compare_type": True}

    if context.is_offline_mode():
        context.configure(
            url=_migration_url(),
            literal_binds=True,
            dialect_opts={"paramstyle": "named"},
            **options,
        )
        with context.begin_transaction():
            context.run_migrations()
        return

    engine = create_engine(_migration_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, **options)
        with context.begin_transaction():
            context.run_migrations()


_run()
