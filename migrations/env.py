import asyncio
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncConnection

from app.dependencies import get_settings
from app.types.sqlalchemy import Base
from app.utils.state import init_engine

# Alembic Config object, giving access to the values of `alembic.ini`
config = context.config


# The logging sections of `alembic.ini` are only used when alembic is invoked from the CLI.
# At startup the application passes its own connection and its loggers are already configured
if config.config_file_name is not None and "connection" not in config.attributes:
    # Don't disable existing loggers
    # See https://stackoverflow.com/questions/42427487/using-alembic-config-main-redirects-log-output
    fileConfig(config.config_file_name, disable_existing_loggers=False)


target_metadata = Base.metadata

# Models must be imported for autogenerate to see their tables (do not remove)
for models_file in Path().glob("app/**/models_*.py"):
    __import__(".".join(models_file.with_suffix("").parts))


def run_migrations_offline() -> None:
    """
    Emit the migrations as SQL instead of running them. No DBAPI is needed.
    """
    context.configure(
        url=get_settings().SQLALCHEMY_DATABASE_URL_SYNC,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        # SQLite can not alter a table in place
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def create_async_engine_and_run_async_migrations() -> None:
    """
    Alembic was invoked from the CLI: we open our own engine on the production database.
    """
    settings = get_settings()
    connectable = init_engine(settings)

    async with connectable.connect() as connection:
        await run_async_migrations(connection)
    await connectable.dispose()


async def run_async_migrations(connection: AsyncConnection) -> None:
    # SQLAlchemy does not support `Inspection on an AsyncConnection`, the call to Alembic must be wrapped in `run_sync`
    # See https://alembic.sqlalchemy.org/en/latest/cookbook.html#programmatic-api-use-connection-sharing-with-asyncio
    await connection.run_sync(do_run_migrations)


def run_migrations_online() -> None:
    """
    Run migrations against a live database.

    Without a `connection` attribute, alembic was invoked from the CLI and we migrate the production database
    in a new event loop. At startup, `app.app.get_alembic_config` sets a synchronous `connection` attribute
    and migrations run directly on it.
    See https://alembic.sqlalchemy.org/en/latest/cookbook.html#connection-sharing
    """

    connection: None | Connection | AsyncConnection = config.attributes.get(
        "connection",
        None,
    )

    if connection is None:
        asyncio.run(create_async_engine_and_run_async_migrations())
    elif isinstance(connection, AsyncConnection):
        asyncio.run(run_async_migrations(connection))
    elif isinstance(connection, Connection):
        do_run_migrations(connection)
    else:
        raise TypeError(  # noqa: TRY003
            f"Unsupported connection object {connection}, got a {type(connection)}",
        )


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
