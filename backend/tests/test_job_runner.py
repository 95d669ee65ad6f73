from __future__ import annotations

from datetime import date
from uuid import uuid4

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base
from app.db.models.assignment import DailyTaskAssignment
from app.db.models.project import Project
from app.db.models.task import Task
from app.db.models.user import User
from app.db.models.user_preferences import UserPreferences
from app.services import job_runner
from app.services.job_runner import run_daily_assignments_for_all_users

TODAY = date(2025, 1, 6)


def _session():
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

    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _seed_user(db_session, *, tasks=2, onboarded=True):
    session = db_session()
    try:
        user_id = uuid4()
        session.add(User(id=user_id))
        session.flush()
        if onboarded:
            session.add(
                UserPreferences(
                    user_id=user_id,
                    tasks_per_day=2,
                    active_days=["Mon"],
                    type_priority_order=["work", "study", "life"],
                )
            )
        project = Project(user_id=user_id, title="Thesis", priority=4, project_type="study")
        session.add(project)
        session.flush()
        for idx in range(tasks):
            session.add(Task(user_id=user_id, project_id=project.id, title=f"T{idx}", order_index=idx))
        session.commit()
        return user_id
    finally:
        session.close()


def test_daily_job_covers_onboarded_users_only():
    Session = _session()
    first = _seed_user(Session, tasks=3)
    second = _seed_user(Session, tasks=1)
    _seed_user(Session, onboarded=False)

    session = Session()
    result = run_daily_assignments_for_all_users(session, today=TODAY)
    assert result.users_processed == 2
    assert result.assignments_created == 3
    assert result.users_failed == 0

    rerun = run_daily_assignments_for_all_users(session, today=TODAY)
    assert rerun.assignments_created == 0

    counts = {
        uid: session.query(DailyTaskAssignment).filter(DailyTaskAssignment.user_id == uid).count()
        for uid in (first, second)
    }
    assert counts == {first: 2, second: 1}
    session.close()


def test_daily_job_continues_after_user_failure(monkeypatch):
    Session = _session()
    broken = _seed_user(Session)
    healthy = _seed_user(Session)
    real_run = job_runner.run_daily_assignments_for_user

    def flaky(db, user_id, *, today):
        if user_id == broken:
            raise RuntimeError("boom")
        return real_run(db, user_id, today=today)

    monkeypatch.setattr(job_runner, "run_daily_assignments_for_user", flaky)

    session = Session()
    result = run_daily_assignments_for_all_users(session, today=TODAY, user_ids=[broken, healthy, healthy])
    assert result.users_processed == 1
    assert result.users_failed == 1
    assert result.assignments_created == 2
    session.close()
