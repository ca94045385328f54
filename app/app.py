"""Construction of the FastAPI application: database initialization, lifespan, middleware and exception handlers"""

import logging
import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

import alembic.command as alembic_command
import alembic.config as alembic_config
import alembic.migration as alembic_migration
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.engine import Connection, Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.utils.config import Settings
from app.core.utils.log import LogConfig
from app.dependencies import (
    disconnect_state,
    init_app_state,
)
from app.module import all_modules
from app.types.exceptions import (
    ContentHTTPException,
    FailureHTTPException,
    InternalServerError,
    InvalidIdError,
    InvalidInputError,
)
from app.types.sqlalchemy import Base
from app.utils import initialization
from app.utils.state import LifespanState

# Loggers are configured by `get_application`, they must not be retrieved at import time


def get_alembic_config(connection: Connection) -> alembic_config.Config:
    """
    Alembic configuration sharing our `connection`, `migrations/env.py` uses it instead of opening its own.
    See https://alembic.sqlalchemy.org/en/latest/cookbook.html#connection-sharing
    """
    alembic_cfg = alembic_config.Config("alembic.ini")
    alembic_cfg.attributes["connection"] = connection

    return alembic_cfg


def get_alembic_current_revision(connection: Connection) -> str | None:
    # Alembic inspects the database, which is not supported on an AsyncConnection
    context = alembic_migration.MigrationContext.configure(connection)
    return context.get_current_revision()


def stamp_alembic_head(connection: Connection) -> None:
    alembic_command.stamp(get_alembic_config(connection), "head")


def run_alembic_upgrade(connection: Connection) -> None:
    alembic_command.upgrade(get_alembic_config(connection), "head")


def update_db_tables(
    sync_engine: Engine,
    error_logger: logging.Logger,
    drop_db: bool = False,
) -> None:
    """
    Bring the database to the latest revision.

    An empty database is created from the models and stamped, there is no need to replay every migration.
    See https://alembic.sqlalchemy.org/en/latest/cookbook.html#building-an-up-to-date-database-from-scratch
    Otherwise pending migrations are run.

    With `drop_db`, every table is dropped first.
    """
    try:
        with sync_engine.begin() as conn:
            if drop_db:
                initialization.drop_db_sync(conn)

            current_revision = get_alembic_current_revision(conn)

            if current_revision is None:
                error_logger.info("Startup: Creating the database tables")
                Base.metadata.create_all(conn)
                stamp_alembic_head(conn)
            else:
                error_logger.info(
                    f"Startup: Database at revision {current_revision}, running pending migrations",
                )
                run_alembic_upgrade(conn)

            error_logger.info("Startup: Database tables up to date")
    except Exception as error:
        error_logger.fatal(
            f"Startup: Could not initialize the database tables: {error}",
        )
        raise


def use_route_path_as_operation_ids(app: FastAPI) -> None:
    """
    Name operations `<method>_<path>`, for example `put_rec_recommendation_id`.
    Generated API clients then get readable function names.

    See https://fastapi.tiangolo.com/advanced/path-operation-advanced-configuration/
    """
    for route in app.routes:
        if isinstance(route, APIRoute):
            method = "_".join(route.methods).lower()
            path = route.path.replace("/", "_").replace("{", "").replace("}", "")
            route.operation_id = method + path


def init_db(
    settings: Settings,
    error_logger: logging.Logger,
    drop_db: bool = False,
) -> None:
    """
    Create the tables or run the migrations, using a synchronous engine disposed afterwards
    """
    sync_engine = initialization.get_sync_db_engine(settings=settings)

    try:
        update_db_tables(
            sync_engine=sync_engine,
            error_logger=error_logger,
            drop_db=drop_db,
        )
    finally:
        sync_engine.dispose()


async def init_lifespan(
    app: FastAPI,
    settings: Settings,
    error_logger: logging.Logger,
    drop_db: bool,
) -> LifespanState:
    error_logger.info(
        f"Startup: Serving recommendations with the {settings.RECOMMENDATION_SCHEMA.value} record shape",
    )

    # Gunicorn initializes the database once before forking its workers, see `gunicorn.conf.py`
    if drop_db or os.environ.get("RECOMMENDATIONS_INIT_DB", "True") != "False":
        init_db(
            settings=settings,
            error_logger=error_logger,
            drop_db=drop_db,
        )

    # Tests override `init_app_state` to use their own engine
    state = await app.dependency_overrides.get(
        init_app_state,
        init_app_state,
    )(
        app=app,
        settings=settings,
        error_logger=error_logger,
    )

    if settings.USE_FACTORIES:
        async with state["SessionLocal"]() as db:
            try:
                await initialization.run_factories(
                    modules=all_modules,
                    db=db,
                    settings=settings,
                    error_logger=error_logger,
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    return state


def get_application(settings: Settings, drop_db: bool = False) -> FastAPI:
    """
    Build the application. Tests pass their own settings and `drop_db=True` to start from an empty database.
    """
    LogConfig().initialize_loggers(settings=settings)

    access_logger = logging.getLogger("recommendations.access")
    error_logger = logging.getLogger("recommendations.error")

    # The yielded state is copied in the state of each request
    # See https://www.starlette.io/lifespan/#lifespan-state
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[LifespanState, None]:
        state = await init_lifespan(
            app=app,
            settings=settings,
            error_logger=error_logger,
            drop_db=drop_db,
        )

        yield state

        error_logger.info("Shutting down")
        await app.dependency_overrides.get(
            disconnect_state,
            disconnect_state,
        )(
            state=state,
            error_logger=error_logger,
        )

    app = FastAPI(
        title="Recommendations API",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    for module in all_modules:
        app.include_router(module.router)
    use_route_path_as_operation_ids(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """
        Give each request a unique identifier, available through the `RequestId` dependency
        and returned in the `X-Request-ID` header, then write one access record per request.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        client_address = (
            f"{request.client.host}:{request.client.port}"
            if request.client is not None
            else "unknown"
        )
        access_record = f'{client_address} - "{request.method} {request.url.path}"'

        try:
            response = await call_next(request)
        except Exception:
            # The exception is answered by `unexpected_exception_handler`
            access_logger.info(f"{access_record} 500 ({request_id})")
            raise

        access_logger.info(f"{access_record} {response.status_code} ({request_id})")
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ):
        error_logger.debug(
            f"Validation error: {exc.errors()} ({request.state.request_id})",
        )

        failure: FailureHTTPException
        if any(error["loc"][0] == "path" for error in exc.errors()):
            failure = InvalidIdError()
        else:
            failure = InvalidInputError()

        return JSONResponse(
            status_code=failure.status_code,
            content=jsonable_encoder(failure.content),
        )

    @app.exception_handler(ContentHTTPException)
    async def content_exception_handler(
        request: Request,
        exc: ContentHTTPException,
    ):
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(exc.content),
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ):
        # Raised by the router for unknown paths and methods
        failure = FailureHTTPException(
            status_code=exc.status_code,
            message=str(exc.detail),
        )

        return JSONResponse(
            status_code=failure.status_code,
            content=jsonable_encoder(failure.content),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(
        request: Request,
        exc: Exception,
    ):
        # `get_db` already rolled back and closed the session
        error_logger.error(
            f"Unexpected error on {request.method} {request.url.path}: {exc} ({request.state.request_id})",
            exc_info=exc,
        )
        failure = InternalServerError()

        return JSONResponse(
            status_code=failure.status_code,
            content=jsonable_encoder(failure.content),
        )

    return app
