"""Schemas of the core endpoints"""

from pydantic import BaseModel

from app.modules.recommendation.types_recommendation import RecommendationSchemaType


class CoreInformation(BaseModel):
    """Information about the API"""

    ready: bool
    version: str
    recommendation_schema: RecommendationSchemaType
