from collections.abc import Sequence
from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.recommendation import models_recommendation, schemas_recommendation
from app.modules.recommendation.types_recommendation import RecommendationSchemaType

if TYPE_CHECKING:
    from sqlalchemy.engine import CursorResult


async def get_recommendations(
    schema_type: RecommendationSchemaType,
    db: AsyncSession,
) -> Sequence[models_recommendation.Recommendation]:
    """
    Return all recommendations.
    With the `likes` shape, the most liked recommendations come first.
    """
    query = select(models_recommendation.Recommendation)
    if schema_type == RecommendationSchemaType.likes:
        query = query.order_by(
            models_recommendation.Recommendation.likes.desc(),
            models_recommendation.Recommendation.id,
        )
    else:
        query = query.order_by(models_recommendation.Recommendation.id)

    result = await db.execute(query)
    return result.scalars().all()


async def get_recommendation_by_id(
    recommendation_id: int,
    db: AsyncSession,
) -> models_recommendation.Recommendation | None:
    result = await db.execute(
        select(models_recommendation.Recommendation).where(
            models_recommendation.Recommendation.id == recommendation_id,
        ),
    )
    return result.scalars().one_or_none()


async def get_recommendation_by_link(
    link: str,
    db: AsyncSession,
) -> models_recommendation.Recommendation | None:
    result = await db.execute(
        select(models_recommendation.Recommendation).where(
            models_recommendation.Recommendation.link == link,
        ),
    )
    return result.scalars().one_or_none()


async def create_recommendation(
    recommendation: models_recommendation.Recommendation,
    db: AsyncSession,
) -> models_recommendation.Recommendation:
    """
    Insert the recommendation. The identifier is generated by the database.

    Raise an IntegrityError if the link is already used by another recommendation.
    """
    db.add(recommendation)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise
    else:
        return recommendation


async def update_recommendation(
    recommendation_id: int,
    recommendation: schemas_recommendation.RecommendationBase,
    db: AsyncSession,
) -> int:
    """
    Rewrite every field of the recommendation and return the number of updated rows.

    Raise an IntegrityError if the link is already used by another recommendation.
    """
    try:
        result = await db.execute(
            update(models_recommendation.Recommendation)
            .where(models_recommendation.Recommendation.id == recommendation_id)
            .values(**recommendation.model_dump()),
        )
    except IntegrityError:
        await db.rollback()
        raise
    await db.flush()
    return cast("CursorResult", result).rowcount


async def delete_recommendation(
    recommendation_id: int,
    db: AsyncSession,
) -> int:
    """
    Return the number of deleted rows
    """
    result = await db.execute(
        delete(models_recommendation.Recommendation).where(
            models_recommendation.Recommendation.id == recommendation_id,
        ),
    )
    await db.flush()
    return cast("CursorResult", result).rowcount


async def count_recommendations(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count()).select_from(models_recommendation.Recommendation),
    )
    return result.scalar_one()
