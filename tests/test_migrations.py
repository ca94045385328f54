import importlib
from collections.abc import Generator
from pathlib import Path
from types import ModuleType

import pytest
from pytest_alembic import MigrationContext
from pytest_alembic.config import Config
from pytest_alembic.tests import (
    test_single_head_revision,  # noqa: F401
    test_up_down_consistency,  # noqa: F401
    test_upgrade,  # noqa: F401
)
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection

from app.utils.initialization import drop_db_sync
from tests.commons import settings


class MigrationTestError(Exception):
    def __init__(self, revision: str, step: str):
        super().__init__(f"Revision {revision}: {step} failed")


@pytest.fixture
def alembic_config() -> Config:
    return Config()


@pytest.fixture
def alembic_connection() -> Generator[Connection, None, None]:
    """
    A synchronous connection to an emptied test database. Alembic can't be run from an async test.
    """
    connectable = create_engine(settings.SQLALCHEMY_DATABASE_URL_SYNC, echo=False)

    with connectable.begin() as connection:
        drop_db_sync(connection)
        yield connection

    connectable.dispose()


@pytest.fixture
def alembic_engine(alembic_connection: Connection) -> Connection:
    # pytest-alembic accepts a connection in place of an engine
    return alembic_connection


@pytest.fixture(scope="module")
def migration_scripts() -> dict[str, ModuleType]:
    """
    Migration scripts by revision. Each script defines `pre_test_upgrade`, run before its upgrade to insert data,
    and `test_upgrade`, run after it to check the data.
    """
    scripts = {}
    for script_path in Path().glob("migrations/versions/*.py"):
        script = importlib.import_module(".".join(script_path.with_suffix("").parts))
        scripts[script.revision] = script
    return scripts


def test_all_migrations_have_tests(
    migration_scripts: dict[str, ModuleType],
) -> None:
    for revision, script in migration_scripts.items():
        assert hasattr(script, "pre_test_upgrade"), revision
        assert hasattr(script, "test_upgrade"), revision


def test_migrations(
    alembic_runner: MigrationContext,
    alembic_connection: Connection,
    migration_scripts: dict[str, ModuleType],
) -> None:
    for revision in alembic_runner.history.revisions:
        if revision not in migration_scripts:
            # `base` and `heads`
            continue
        script = migration_scripts[revision]

        try:
            script.pre_test_upgrade(alembic_runner, alembic_connection)
        except Exception as error:
            raise MigrationTestError(revision, "pre_test_upgrade") from error
        try:
            alembic_runner.managed_upgrade(revision)
        except Exception as error:
            raise MigrationTestError(revision, "upgrade") from error
        try:
            script.test_upgrade(alembic_runner, alembic_connection)
        except Exception as error:
            raise MigrationTestError(revision, "test_upgrade") from error
