from sqlalchemy.orm import Mapped, mapped_column

from app.types.sqlalchemy import Base


class Recommendation(Base):
    """
    A recommendation holds the columns of both record shapes (see `RecommendationSchemaType`).
    Columns of the shape which is not in use stay NULL.
    """

    __tablename__ = "recommendations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True, init=False)
    link: Mapped[str] = mapped_column(unique=True)
    type: Mapped[str]

    # `likes` shape
    description: Mapped[str | None] = mapped_column(default=None)
    likes: Mapped[float | None] = mapped_column(default=None)

    # `message` shape
    title: Mapped[str | None] = mapped_column(default=None)
    message: Mapped[str | None] = mapped_column(default=None)
