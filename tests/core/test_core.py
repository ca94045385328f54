from fastapi.testclient import TestClient

from tests.commons import settings


def test_get_information(client: TestClient) -> None:
    response = client.get(
        "/information",
    )
    assert response.status_code == 200
    assert response.json() == {
        "status": "success",
        "data": {
            "ready": True,
            "version": settings.APP_VERSION,
            "recommendation_schema": "likes",
        },
    }


def test_cors_authorized_origin(client: TestClient) -> None:
    origin = "https://test-authorized-origin.com"
    headers = {
        "Access-Control-Request-Method": "GET",
        "origin": origin,
    }
    response = client.get("/information", headers=headers)
    assert response.headers["access-control-allow-origin"] == origin


def test_cors_unauthorized_origin(client: TestClient) -> None:
    origin = "https://test-UNauthorized-origin.com"
    headers = {
        "Access-Control-Request-Method": "GET",
        "origin": origin,
    }
    response = client.get("/information", headers=headers)
    # The origin should not be in the response as it is not authorized. We will check `None != origin`
    assert response.headers.get("access-control-allow-origin", None) != origin


def test_unknown_path_returns_a_failure_envelope(client: TestClient) -> None:
    response = client.get("/unknown")
    assert response.status_code == 404
    assert response.json() == {"status": "failure", "data": "Not Found"}


def test_unknown_method_returns_a_failure_envelope(client: TestClient) -> None:
    response = client.patch("/rec", json={})
    assert response.status_code == 405
    assert response.json() == {"status": "failure", "data": "Method Not Allowed"}
