from typing import TypedDict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.utils.config import Settings
from app.types.sqlalchemy import SessionLocalType


class LifespanState(TypedDict):
    """
    The LifespanState is yielded by the application lifespan.
    Starlette copies it in the state of each request. Use dependencies to access it
    """

    # Database engine, it owns the connection pool
    engine: AsyncEngine
    # Database session creator
    SessionLocal: SessionLocalType


class RuntimeLifespanState(LifespanState):
    """
    Requests contains an extended version of the LifespanState for each request.
    """

    request_id: str


def init_engine(settings: Settings) -> AsyncEngine:
    """
    Return the (asynchronous) database engine, based on the settings
    """

    return create_async_engine(
        settings.SQLALCHEMY_DATABASE_URL,
        echo=settings.DATABASE_DEBUG,
        # Connections are tested before being handed to a request
        pool_pre_ping=True,
    )


def init_SessionLocal(engine: AsyncEngine) -> SessionLocalType:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def disconnect_engine(engine: AsyncEngine) -> None:
    """
    Close every connection of the pool
    """
    await engine.dispose()
