from pydantic import BaseModel, ConfigDict, FiniteFloat, field_validator

from app.modules.recommendation.types_recommendation import RecommendationSchemaType


class RecommendationBase(BaseModel):
    """Fields shared by every record shape"""

    # Values are never coerced: `"5"` is not a number and `5` is not a string
    model_config = ConfigDict(strict=True)

    link: str
    type: str


class LikesRecommendationBase(RecommendationBase):
    description: str
    # `1e309`, `NaN` and `Infinity` are parsed as non finite floats, which can not be stored
    likes: int | FiniteFloat

    @field_validator("likes", mode="before")
    @classmethod
    def check_likes_is_not_a_boolean(cls, value):
        # bool is a subclass of int
        if isinstance(value, bool):
            raise ValueError("likes must be a number")  # noqa: TRY004
        return value


class LikesRecommendation(LikesRecommendationBase):
    id: int

    model_config = ConfigDict(from_attributes=True, strict=False)

    @field_validator("likes")
    @classmethod
    def restore_integer_likes(cls, value: int | float) -> int | float:
        # Likes are stored in a float column: `5` is read back as `5.0`
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


class MessageRecommendationBase(RecommendationBase):
    title: str
    message: str | None = None


class MessageRecommendation(MessageRecommendationBase):
    id: int

    model_config = ConfigDict(from_attributes=True, strict=False)


RecommendationComplete = LikesRecommendation | MessageRecommendation

# Schemas used for a given `RECOMMENDATION_SCHEMA` setting
base_schemas: dict[RecommendationSchemaType, type[RecommendationBase]] = {
    RecommendationSchemaType.likes: LikesRecommendationBase,
    RecommendationSchemaType.message: MessageRecommendationBase,
}
complete_schemas: dict[
    RecommendationSchemaType,
    type[LikesRecommendation] | type[MessageRecommendation],
] = {
    RecommendationSchemaType.likes: LikesRecommendation,
    RecommendationSchemaType.message: MessageRecommendation,
}
