from enum import Enum


class RecommendationSchemaType(str, Enum):
    """
    Shape of the records served by the recommendation module.
    A deployment uses a single shape, selected by the `RECOMMENDATION_SCHEMA` setting:
     * `likes`: a description and a number of likes, recommendations are listed by likes descending
     * `message`: a title and an optional message
    """

    likes = "likes"
    message = "message"
