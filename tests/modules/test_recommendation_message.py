from collections.abc import Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.app import get_application
from app.dependencies import get_settings, init_app_state
from app.modules.recommendation import models_recommendation
from tests.commons import (
    add_object_to_db,
    override_get_settings,
    override_init_app_state,
)

rust_book: models_recommendation.Recommendation
python_talk: models_recommendation.Recommendation


@pytest.fixture(scope="module", autouse=True)
def client() -> Generator[TestClient, None, None]:
    """
    Serve recommendations with the `message` record shape
    """
    test_app = get_application(
        settings=override_get_settings(RECOMMENDATION_SCHEMA="message")(),
        drop_db=True,
    )

    test_app.dependency_overrides[init_app_state] = override_init_app_state
    test_app.dependency_overrides[get_settings] = override_get_settings(
        RECOMMENDATION_SCHEMA="message",
    )

    with TestClient(test_app) as client:
        yield client


@pytest_asyncio.fixture(scope="module", autouse=True)
async def init_objects(client: TestClient) -> None:
    global python_talk
    python_talk = models_recommendation.Recommendation(
        link="https://www.youtube.com/watch?v=python-talk",
        type="video",
        title="Beyond PEP 8",
        message="A talk about readable code",
    )
    await add_object_to_db(python_talk)

    global rust_book
    rust_book = models_recommendation.Recommendation(
        link="https://doc.rust-lang.org/book",
        type="book",
        title="The Rust Programming Language",
    )
    await add_object_to_db(rust_book)


def test_get_recommendations(client: TestClient) -> None:
    response = client.get("/rec")
    assert response.status_code == 200

    recommendations = response.json()["data"]
    ids = [recommendation["id"] for recommendation in recommendations]
    assert ids == sorted(ids)
    assert recommendations[:2] == [
        {
            "id": python_talk.id,
            "link": "https://www.youtube.com/watch?v=python-talk",
            "type": "video",
            "title": "Beyond PEP 8",
            "message": "A talk about readable code",
        },
        {
            "id": rust_book.id,
            "link": "https://doc.rust-lang.org/book",
            "type": "book",
            "title": "The Rust Programming Language",
            "message": None,
        },
    ]


def test_information_reports_the_record_shape(client: TestClient) -> None:
    response = client.get("/information")
    assert response.status_code == 200
    assert response.json()["data"]["recommendation_schema"] == "message"


@pytest.mark.parametrize(
    "payload",
    [
        {
            "link": "https://go.dev/tour",
            "type": "course",
            "title": "A Tour of Go",
            "message": "Interactive introduction",
        },
        {
            "link": "https://go.dev/doc/effective_go",
            "type": "documentation",
            "title": "Effective Go",
        },
    ],
)
def test_create_recommendation(payload, client: TestClient) -> None:
    response = client.post("/rec", json=payload)
    assert response.status_code == 201
    assert response.json() == {"status": "success", "data": 1}

    response = client.get(response.headers["Location"])
    recommendation = response.json()["data"]
    assert recommendation["title"] == payload["title"]
    assert recommendation["message"] == payload.get("message")


@pytest.mark.parametrize(
    "payload",
    [
        # A payload of the `likes` record shape
        {
            "link": "https://example.com/likes-shape",
            "type": "article",
            "description": "Not a message",
            "likes": 5,
        },
        {
            "link": "https://example.com/numeric-title",
            "type": "article",
            "title": 5,
        },
        {
            "link": "https://example.com/numeric-message",
            "type": "article",
            "title": "A title",
            "message": 5,
        },
    ],
)
def test_create_recommendation_with_invalid_payload(
    payload,
    client: TestClient,
) -> None:
    response = client.post("/rec", json=payload)
    assert response.status_code == 400
    assert response.json() == {"status": "failure", "data": "invalid input"}


def test_create_recommendation_with_taken_link(client: TestClient) -> None:
    response = client.post(
        "/rec",
        json={"link": rust_book.link, "type": "book", "title": "Another title"},
    )
    assert response.status_code == 400
    assert response.json() == {
        "status": "failure",
        "data": "that link is already taken in the database",
    }


def test_update_recommendation_removing_its_message(client: TestClient) -> None:
    response = client.put(
        f"/rec/{python_talk.id}",
        json={
            "link": python_talk.link,
            "type": "video",
            "title": "Beyond PEP 8, best practices for beautiful code",
        },
    )
    assert response.status_code == 200
    assert response.json() == {"status": "success", "data": 1}

    recommendation = client.get(f"/rec/{python_talk.id}").json()["data"]
    assert recommendation["title"] == "Beyond PEP 8, best practices for beautiful code"
    assert recommendation["message"] is None


def test_delete_recommendation(client: TestClient) -> None:
    response = client.delete(f"/rec/{rust_book.id}")
    assert response.status_code == 200

    response = client.get(f"/rec/{rust_book.id}")
    assert response.status_code == 404
