import logging
from typing import Annotated, Any

from fastapi import Body, Depends, Path, Response
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.utils.config import Settings
from app.dependencies import Database, RequestId, get_settings
from app.modules.recommendation import (
    cruds_recommendation,
    models_recommendation,
    schemas_recommendation,
)
from app.modules.recommendation.factory_recommendation import RecommendationFactory
from app.modules.recommendation.types_recommendation import RecommendationSchemaType
from app.types import standard_responses
from app.types.exceptions import (
    InvalidInputError,
    LinkAlreadyTakenError,
    RecommendationNotFoundError,
)
from app.types.module import Module

error_logger = logging.getLogger("recommendations.error")

module = Module(
    root="rec",
    tag="Recommendation",
    factory=RecommendationFactory(),
)

# Identifiers are stored in a 32 bits integer column. Outside of this range, an id is answered as invalid
RecommendationId = Annotated[int, Path(ge=-(2**31), le=2**31 - 1)]


async def check_link_is_available(
    payload: Any,
    recommendation_id: int | None,
    db: AsyncSession,
) -> None:
    """
    Raise a LinkAlreadyTakenError if the payload link belongs to a recommendation other than `recommendation_id`.

    This check only allows to answer before validating the payload, the unique constraint of the table is the actual guarantee.
    """
    link = payload.get("link") if isinstance(payload, dict) else None
    if not isinstance(link, str):
        # The payload validation will reject it
        return

    recommendation = await cruds_recommendation.get_recommendation_by_link(
        link=link,
        db=db,
    )
    if recommendation is not None and recommendation.id != recommendation_id:
        raise LinkAlreadyTakenError


def validate_payload(
    payload: Any,
    schema_type: RecommendationSchemaType,
) -> schemas_recommendation.RecommendationBase:
    try:
        return schemas_recommendation.base_schemas[schema_type].model_validate(
            payload,
        )
    except ValidationError as error:
        raise InvalidInputError from error


@module.router.get(
    "/rec",
    response_model=standard_responses.Envelope[
        list[schemas_recommendation.RecommendationComplete]
    ],
    status_code=200,
)
async def get_recommendations(
    db: Database,
    settings: Settings = Depends(get_settings),
):
    """
    Get all recommendations.

    With the `likes` record shape, recommendations are sorted by likes, in descending order.
    """
    recommendations = await cruds_recommendation.get_recommendations(
        schema_type=settings.RECOMMENDATION_SCHEMA,
        db=db,
    )
    complete_schema = schemas_recommendation.complete_schemas[
        settings.RECOMMENDATION_SCHEMA
    ]

    return standard_responses.Envelope(
        data=[
            complete_schema.model_validate(recommendation)
            for recommendation in recommendations
        ],
    )


@module.router.get(
    "/rec/{recommendation_id}",
    response_model=standard_responses.Envelope[
        schemas_recommendation.RecommendationComplete
    ],
    status_code=200,
)
async def get_recommendation_by_id(
    recommendation_id: RecommendationId,
    db: Database,
    settings: Settings = Depends(get_settings),
):
    recommendation = await cruds_recommendation.get_recommendation_by_id(
        recommendation_id=recommendation_id,
        db=db,
    )
    if recommendation is None:
        raise RecommendationNotFoundError

    return standard_responses.Envelope(
        data=schemas_recommendation.complete_schemas[
            settings.RECOMMENDATION_SCHEMA
        ].model_validate(recommendation),
    )


@module.router.post(
    "/rec",
    response_model=standard_responses.Envelope[int],
    status_code=201,
)
async def create_recommendation(
    response: Response,
    db: Database,
    request_id: RequestId,
    payload: Annotated[Any, Body()] = None,
    settings: Settings = Depends(get_settings),
):
    """
    Create a recommendation. The envelope contains the number of inserted recommendations
    and the `Location` header the path of the new recommendation.

    The link is checked before the payload: a taken link is reported even if the payload is invalid.
    """
    await check_link_is_available(
        payload=payload,
        recommendation_id=None,
        db=db,
    )
    recommendation = validate_payload(
        payload=payload,
        schema_type=settings.RECOMMENDATION_SCHEMA,
    )

    recommendation_db = models_recommendation.Recommendation(
        **recommendation.model_dump(),
    )
    try:
        await cruds_recommendation.create_recommendation(
            recommendation=recommendation_db,
            db=db,
        )
    except IntegrityError as error:
        # Another request inserted the same link after our check
        error_logger.warning(
            f"Recommendation: concurrent insertion of link {recommendation.link} ({request_id})",
        )
        raise LinkAlreadyTakenError from error

    response.headers["Location"] = f"/rec/{recommendation_db.id}"
    return standard_responses.Envelope(data=1)


@module.router.put(
    "/rec/{recommendation_id}",
    response_model=standard_responses.Envelope[int],
    status_code=200,
)
async def update_recommendation(
    recommendation_id: RecommendationId,
    db: Database,
    request_id: RequestId,
    payload: Annotated[Any, Body()] = None,
    settings: Settings = Depends(get_settings),
):
    """
    Replace every field of a recommendation. The envelope contains the number of updated recommendations.

    A recommendation may keep its own link.
    """
    recommendation_db = await cruds_recommendation.get_recommendation_by_id(
        recommendation_id=recommendation_id,
        db=db,
    )
    if recommendation_db is None:
        raise RecommendationNotFoundError

    await check_link_is_available(
        payload=payload,
        recommendation_id=recommendation_id,
        db=db,
    )
    recommendation = validate_payload(
        payload=payload,
        schema_type=settings.RECOMMENDATION_SCHEMA,
    )

    try:
        updated_count = await cruds_recommendation.update_recommendation(
            recommendation_id=recommendation_id,
            recommendation=recommendation,
            db=db,
        )
    except IntegrityError as error:
        error_logger.warning(
            f"Recommendation: concurrent use of link {recommendation.link} ({request_id})",
        )
        raise LinkAlreadyTakenError from error

    # The recommendation may have been deleted since we fetched it
    if updated_count == 0:
        raise RecommendationNotFoundError

    return standard_responses.Envelope(data=updated_count)


@module.router.delete(
    "/rec/{recommendation_id}",
    response_model=standard_responses.Envelope[int],
    status_code=200,
)
async def delete_recommendation(
    recommendation_id: RecommendationId,
    db: Database,
):
    """
    Delete a recommendation. The envelope contains the number of deleted recommendations.
    """
    deleted_count = await cruds_recommendation.delete_recommendation(
        recommendation_id=recommendation_id,
        db=db,
    )
    if deleted_count == 0:
        raise RecommendationNotFoundError

    return standard_responses.Envelope(data=deleted_count)
