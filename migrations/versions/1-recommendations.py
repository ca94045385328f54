"""recommendations

Create Date: 2026-10-19 10:12:41.318504
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

import sqlalchemy as sa
from alembic import op

if TYPE_CHECKING:
    from pytest_alembic import MigrationContext

# revision identifiers, used by Alembic.
revision: str = "4b1f2c7e9a10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "recommendations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("link", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("likes", sa.Float(), nullable=True),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("message", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("link"),
    )


def downgrade() -> None:
    op.drop_table("recommendations")


def pre_test_upgrade(
    alembic_runner: "MigrationContext",
    alembic_connection: sa.Connection,
) -> None:
    pass


def test_upgrade(
    alembic_runner: "MigrationContext",
    alembic_connection: sa.Connection,
) -> None:
    alembic_connection.execute(
        sa.text(
            "INSERT INTO recommendations (link, type, description, likes) VALUES ('https://docs.python.org', 'documentation', 'The Python documentation', 12)",
        ),
    )
    rows = alembic_connection.execute(
        sa.text("SELECT link, title FROM recommendations"),
    ).all()
    assert rows == [("https://docs.python.org", None)]  # noqa: S101
