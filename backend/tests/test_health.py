from fastapi.testclient import TestClient


def _get_client() -> TestClient:
    from app.main import app

    return TestClient(app)


def test_health_endpoint_returns_ok() -> None:
    client = _get_client()
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_id_generated_and_returned() -> None:
    client = _get_client()
    first = client.get("/health")
    second = client.get("/health")

    assert first.headers.get("X-Request-Id")
    assert first.headers["X-Request-Id"] != second.headers["X-Request-Id"]


def test_request_id_echoed_from_header() -> None:
    client = _get_client()
    req_id = "device-foreground-42"
    response = client.get("/health", headers={"X-Request-Id": req_id})

    assert response.headers.get("X-Request-Id") == req_id


def test_routes_registered() -> None:
    from app.main import app

    paths = set(app.openapi()["paths"])
    assert {
        "/preferences",
        "/projects",
        "/tasks",
        "/tasks/{task_id}",
        "/assignments/today/ensure",
        "/assignments/today",
        "/assignments/swap-candidates",
        "/assignments/{assignment_id}/swap",
        "/blocking/status",
        "/jobs/run-now",
    }.issubset(paths)
