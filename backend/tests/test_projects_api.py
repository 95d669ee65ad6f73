from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base
from app.db.deps import get_db
from app.db.models.action_log import ActionLog
from app.main import app

TODAY = "2025-01-06"  # a Monday


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _project(client: TestClient, user_id, **overrides):
    body = {"user_id": str(user_id), "title": "Thesis", "project_type": "study", "priority": 4}
    body.update(overrides)
    return client.post("/projects", json=body)


def _task(client: TestClient, user_id, project_id, title, **overrides):
    body = {"user_id": str(user_id), "project_id": project_id, "title": title}
    body.update(overrides)
    return client.post("/tasks", json=body)


def test_create_project_and_tasks_in_order(client):
    test_client, _ = client
    user_id = uuid4()

    project = _project(test_client, user_id, due_date="2025-02-01")
    assert project.status_code == 201
    project_id = project.json()["id"]
    assert project.json()["due_date"] == "2025-02-01"

    first = _task(test_client, user_id, project_id, "Outline")
    second = _task(test_client, user_id, project_id, "Draft chapter 1")
    pinned = _task(test_client, user_id, project_id, "Cover page", order_index=10)

    assert first.status_code == 201
    assert first.json()["status"] == "pending"
    assert first.json()["order_index"] == 0
    assert second.json()["order_index"] == 1
    assert pinned.json()["order_index"] == 10


def test_project_validation(client):
    test_client, _ = client

    assert _project(test_client, uuid4(), project_type="hobby").status_code == 422
    assert _project(test_client, uuid4(), priority=6).status_code == 422
    assert _project(test_client, uuid4(), title="").status_code == 422


def test_task_requires_own_project(client):
    test_client, _ = client
    owner = uuid4()
    project_id = _project(test_client, owner).json()["id"]

    foreign = _task(test_client, uuid4(), project_id, "Sneaky")
    missing = _task(test_client, owner, str(uuid4()), "Orphan")

    assert foreign.status_code == 404
    assert missing.status_code == 404


def test_status_update_stamps_completion(client):
    test_client, session_factory = client
    user_id = uuid4()
    project_id = _project(test_client, user_id).json()["id"]
    task_id = _task(test_client, user_id, project_id, "Outline").json()["id"]

    done = test_client.patch(f"/tasks/{task_id}", json={"user_id": str(user_id), "status": "completed"})
    assert done.status_code == 200
    assert done.json()["status"] == "completed"
    assert done.json()["completed_at"] is not None

    reopened = test_client.patch(f"/tasks/{task_id}", json={"user_id": str(user_id), "status": "in_progress"})
    assert reopened.json()["status"] == "in_progress"
    assert reopened.json()["completed_at"] is None

    invalid = test_client.patch(f"/tasks/{task_id}", json={"user_id": str(user_id), "status": "archived"})
    stranger = test_client.patch(f"/tasks/{task_id}", json={"user_id": str(uuid4()), "status": "completed"})
    assert invalid.status_code == 422
    assert stranger.status_code == 404

    with session_factory() as db:
        actions = [row.action_type for row in db.query(ActionLog).order_by(ActionLog.created_at)]
    assert actions.count("task_completed") == 1
    assert actions.count("task_status_changed") == 1


def test_ingested_tasks_flow_through_planner_and_blocking(client):
    test_client, _ = client
    user_id = uuid4()
    test_client.put(
        "/preferences",
        json={"user_id": str(user_id), "tasks_per_day": 1, "active_days": ["Mon"], "blocking_enabled": True},
    )
    project_id = _project(test_client, user_id).json()["id"]
    task_id = _task(test_client, user_id, project_id, "Outline").json()["id"]

    ensured = test_client.post("/assignments/today/ensure", json={"user_id": str(user_id), "today": TODAY})
    assert ensured.json()["created_task_ids"] == [task_id]

    params = {"user_id": str(user_id), "today": TODAY, "now": "10:00"}
    assert test_client.get("/blocking/status", params=params).json()["should_block"] is True

    test_client.patch(f"/tasks/{task_id}", json={"user_id": str(user_id), "status": "completed"})

    assert test_client.get("/blocking/status", params=params).json()["should_block"] is False
