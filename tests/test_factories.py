from fastapi.testclient import TestClient

from app.module import all_modules
from tests.commons import TestingSessionLocal


async def test_factories(factory_running_client: TestClient) -> None:
    async with TestingSessionLocal() as db:
        factories = [
            module.factory for module in all_modules if module.factory is not None
        ]
        for factory in factories:
            assert not await factory.should_run(
                db,
            ), f"Factory {factory.__class__.__name__} should not run"


def test_factories_created_recommendations(factory_running_client: TestClient) -> None:
    response = factory_running_client.get("/rec")
    assert response.status_code == 200

    recommendations = response.json()["data"]
    assert len(recommendations) == 4
    assert len({recommendation["link"] for recommendation in recommendations}) == 4

    likes = [recommendation["likes"] for recommendation in recommendations]
    assert likes == sorted(likes, reverse=True)
