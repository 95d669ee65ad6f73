from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.db import Base
from app.db.deps import get_db
from app.db.models.project import Project
from app.db.models.task import Task
from app.main import app


@pytest.fixture()
def client(monkeypatch):
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
    monkeypatch.setattr(settings, "debug", True)
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _seed_task(session_factory, user_id):
    session = session_factory()
    try:
        project = Project(user_id=user_id, title="Garden", priority=2, project_type="life")
        session.add(project)
        session.flush()
        session.add(Task(user_id=user_id, project_id=project.id, title="Plant bulbs"))
        session.commit()
    finally:
        session.close()


def test_jobs_config_endpoint(client):
    test_client, _ = client

    resp = test_client.get("/jobs")

    assert resp.status_code == 200
    data = resp.json()
    assert "scheduler_enabled" in data
    assert data["schedule"]["daily_time"] == f"{settings.daily_job_hour:02d}:{settings.daily_job_minute:02d}"


def test_run_now_daily_assignments(client):
    test_client, session_factory = client
    user_id = uuid4()
    test_client.put(
        "/preferences",
        json={"user_id": str(user_id), "tasks_per_day": 1, "active_days": ["Sat"]},
    )
    _seed_task(session_factory, user_id)

    resp = test_client.post("/jobs/run-now", json={"job": "daily_assignments", "today": "2025-01-11"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["users_processed"] == 1
    assert body["assignments_created"] == 1

    single = test_client.post(
        "/jobs/run-now",
        json={"job": "daily_assignments", "user_id": str(user_id), "today": "2025-01-11"},
    )
    assert single.json()["assignments_created"] == 0


def test_run_now_requires_debug(client, monkeypatch):
    test_client, _ = client
    monkeypatch.setattr(settings, "debug", False)

    resp = test_client.post("/jobs/run-now", json={"job": "daily_assignments"})

    assert resp.status_code == 403
