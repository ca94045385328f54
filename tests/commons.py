import logging
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from fastapi import FastAPI
from sqlalchemy import NullPool
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.utils.config import Settings
from app.types.sqlalchemy import Base
from app.utils.state import LifespanState


class FailedToAddObjectToDB(Exception):
    """Exception raised when an object cannot be added to the database."""


def override_get_settings(**kwargs: Any) -> Callable[[], Settings]:
    """
    Return a `get_settings` replacement using the test configuration.
    `kwargs` take precedence over the test configuration files.
    """

    @lru_cache
    def override_get_settings_with_kwargs() -> Settings:
        return Settings(
            _env_file="./tests/.env.test",
            _yaml_file="./tests/config.test.yaml",
            **kwargs,
        )

    return override_get_settings_with_kwargs


settings = override_get_settings()()


engine = create_async_engine(
    settings.SQLALCHEMY_DATABASE_URL,
    echo=settings.DATABASE_DEBUG,
    # The TestClient runs the application in its own event loop. A connection can't be shared between event loops
    # See https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html#using-multiple-asyncio-event-loops
    poolclass=NullPool,
)

# Create a session for testing purposes
TestingSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def init_test_engine() -> AsyncEngine:
    return engine


def init_test_SessionLocal() -> Callable[[], AsyncSession]:
    return TestingSessionLocal


async def override_init_app_state(
    app: FastAPI,
    settings: Settings,
    error_logger: logging.Logger,
) -> LifespanState:
    """
    Initialize the state of the application with the test database engine.
    """
    return LifespanState(
        engine=init_test_engine(),
        SessionLocal=init_test_SessionLocal(),
    )


async def add_object_to_db(db_object: Base) -> None:
    """
    Add an object to the database
    """
    async with TestingSessionLocal() as db:
        try:
            db.add(db_object)
            await db.commit()
        except Exception as error:
            await db.rollback()
            raise FailedToAddObjectToDB from error
        finally:
            await db.close()
