from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.utils.config import Settings
from app.modules.recommendation import cruds_recommendation
from app.modules.recommendation.models_recommendation import Recommendation
from app.modules.recommendation.types_recommendation import RecommendationSchemaType
from app.types.factory import Factory

faker = Faker("en_US")


class RecommendationFactory(Factory):
    depends_on = []

    @classmethod
    async def run(cls, db: AsyncSession, settings: Settings) -> None:
        types = ["article", "video", "course", "podcast"]
        for i in range(4):
            # Faker may return twice the same url, the index keeps links unique
            link = f"{faker.url()}{faker.slug()}-{i}"
            if settings.RECOMMENDATION_SCHEMA == RecommendationSchemaType.likes:
                recommendation = Recommendation(
                    link=link,
                    type=types[i],
                    description=faker.sentence(nb_words=8),
                    likes=faker.random_int(min=0, max=100),
                )
            else:
                recommendation = Recommendation(
                    link=link,
                    type=types[i],
                    title=faker.sentence(nb_words=3),
                    # The message is optional
                    message=faker.paragraph(nb_sentences=2) if i % 2 == 0 else None,
                )
            await cruds_recommendation.create_recommendation(
                recommendation=recommendation,
                db=db,
            )

    @classmethod
    async def should_run(cls, db: AsyncSession):
        return await cruds_recommendation.count_recommendations(db=db) == 0
