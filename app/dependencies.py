"""
FastAPI [dependencies](https://fastapi.tiangolo.com/tutorial/dependencies/) shared by the endpoints.

```python
async def get_recommendations(db: Database, settings: Settings = Depends(get_settings)):
```
"""

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated, cast

from fastapi import Depends, FastAPI, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import State

from app.core.utils.config import Settings, construct_prod_settings
from app.types.exceptions import InvalidAppStateTypeError
from app.utils.state import (
    LifespanState,
    RuntimeLifespanState,
    disconnect_engine,
    init_engine,
    init_SessionLocal,
)


async def init_app_state(
    app: FastAPI,
    settings: Settings,
    error_logger: logging.Logger,
) -> LifespanState:
    """
    Create the objects living as long as the application. Called by the lifespan through
    `app.dependency_overrides` so that tests can provide their own engine.
    """
    engine = init_engine(settings=settings)
    SessionLocal = init_SessionLocal(engine)

    error_logger.info("Startup: Database engine initialized")

    return LifespanState(
        engine=engine,
        SessionLocal=SessionLocal,
    )


async def disconnect_state(
    state: LifespanState,
    error_logger: logging.Logger,
) -> None:
    """
    Release the objects created by `init_app_state`, at the end of the lifespan.
    """
    await disconnect_engine(state["engine"])

    error_logger.info("Shutdown: Database connections closed")


def get_app_state(request: Request) -> RuntimeLifespanState:
    """
    The lifespan state, completed with the request id by the logging middleware.
    """
    # Starlette exposes the state as a dict or wraps it in a State object
    if isinstance(request.state, dict):
        return cast("RuntimeLifespanState", request.state)
    if isinstance(request.state, State):
        return cast("RuntimeLifespanState", request.state.__dict__["_state"])
    raise InvalidAppStateTypeError


AppState = Annotated[RuntimeLifespanState, Depends(get_app_state)]


async def get_request_id(state: AppState) -> str:
    """
    Unique identifier of the request, to be included in logs
    """
    return state["request_id"]


@lru_cache
def get_settings() -> Settings:
    """
    Production settings, read once from `config.yaml`, `.env` and the environment.
    See https://fastapi.tiangolo.com/advanced/settings/#lru_cache-technical-details
    """
    return construct_prod_settings()


async def get_db(state: AppState) -> AsyncGenerator[AsyncSession, None]:
    """
    A database session committed at the end of the request, holding a pooled connection until then.

    An HTTPException is an expected failure, handled by the endpoint: the session is committed.
    Any other exception rolls back the transaction so that no partial write is persisted.
    The session is closed, and its connection returned to the pool, in every case.

    Cruds must only `flush` their changes, never `commit` them.
    """
    async with state["SessionLocal"]() as db:
        try:
            yield db
        except HTTPException:
            await db.commit()
            raise
        except Exception:
            await db.rollback()
            raise
        else:
            await db.commit()
        finally:
            await db.close()


Database = Annotated[AsyncSession, Depends(get_db)]
RequestId = Annotated[str, Depends(get_request_id)]
