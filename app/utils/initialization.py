import logging
from collections.abc import Sequence

from sqlalchemy import Connection, MetaData
from sqlalchemy.engine import Engine, create_engine
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.utils.config import Settings
from app.types.module import CoreModule
from app.types.sqlalchemy import Base

# These utils are used at startup to run database initializations & migrations


def get_sync_db_engine(settings: Settings) -> Engine:
    """
    Create a synchronous database engine
    """
    return create_engine(
        settings.SQLALCHEMY_DATABASE_URL_SYNC,
        echo=settings.DATABASE_DEBUG,
    )


def drop_db_sync(conn: Connection):
    """
    Drop all tables in the database
    """
    # All tables should be dropped, including the alembic_version table
    # or the application will think that the database is up to date and will not initialize it
    # when running tests a second time.

    # `Base.metadata.drop_all(conn)` is only able to drop tables that are defined in models
    # This means that if a model is deleted, its table will never be dropped by `Base.metadata.drop_all(conn)`

    # Thus we construct a metadata object that reflects the database instead of only using models
    my_metadata: MetaData = MetaData(schema=Base.metadata.schema)
    my_metadata.reflect(bind=conn, resolve_fks=False)
    my_metadata.drop_all(bind=conn)


async def run_factories(
    modules: Sequence[CoreModule],
    db: AsyncSession,
    settings: Settings,
    error_logger: logging.Logger,
) -> None:
    """
    Run the factory of every module which needs it. Factories listed in `depends_on` are run first.
    Changes are flushed, the caller is responsible for committing them.
    """
    factories = [module.factory for module in modules if module.factory is not None]
    already_run: set[type] = set()

    async def run_factory(factory) -> None:
        factory_class = factory if isinstance(factory, type) else type(factory)
        if factory_class in already_run:
            return
        already_run.add(factory_class)

        for dependency in factory.depends_on:
            await run_factory(dependency)

        if await factory.should_run(db):
            error_logger.info(f"Startup: Running {factory_class.__name__}")
            await factory.run(db, settings)
        else:
            error_logger.info(
                f"Startup: {factory_class.__name__} has already been run, skipping",
            )

    for factory in factories:
        await run_factory(factory)
