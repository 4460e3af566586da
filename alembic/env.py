"""Alembic environment for the event registration schema.

The database URL is resolved in this order: ``-x dburl=...`` on the command
line, ``sqlalchemy.url`` in alembic.ini, then ``DB_URL`` from the service
settings. Synchronous URLs are switched to their async driver.
"""
from __future__ import annotations

import asyncio
import os
import sys
from logging.config import fileConfig
from typing import Optional

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Imported after the path fix; __import__ keeps linters from flagging E402
__import__("event_registration.models")
settings_module = __import__(
    "event_registration.core.settings", fromlist=["DatabaseSettings", "get_settings"]
)
Base = __import__("event_registration.database", fromlist=["Base"]).Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def resolve_url() -> str:
    x_args = context.get_x_argument(as_dictionary=True)
    explicit: Optional[str] = x_args.get("dburl") or config.get_main_option(
        "sqlalchemy.url"
    )
    if explicit:
        # Reuse the service's driver rewriting for URLs given by hand
        return str(settings_module.DatabaseSettings(DB_URL=explicit).database_url)
    return str(settings_module.get_settings().database.database_url)


def _configure(**kwargs: object) -> None:
    url = config.get_main_option("sqlalchemy.url") or ""
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(
        config.get_main_option("sqlalchemy.url") or "", poolclass=pool.NullPool
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


config.set_main_option("sqlalchemy.url", resolve_url())

if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
