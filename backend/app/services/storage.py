"""Storage access for the daily planner.

The planner and the blocking predicate only talk to storage through
``AssignmentStore``. Reads return frozen snapshots so a computation never
observes rows changing underneath it; a later read is always a new snapshot.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models.action_log import ActionLog
from app.db.models.assignment import DailyTaskAssignment
from app.db.models.project import Project
from app.db.models.task import Task
from app.db.models.user_preferences import UserPreferences
from app.services.errors import AssignmentConflictError, StorageReadError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"


@dataclass(frozen=True)
class PreferenceSnapshot:
    user_id: UUID
    tasks_per_day: int
    active_days: frozenset[str]
    type_priority_order: Tuple[str, ...]
    sleep_time: str
    blocking_enabled: bool


@dataclass(frozen=True)
class CandidateTask:
    """A task joined with the project fields the planner sorts on."""

    task_id: UUID
    project_id: UUID
    order_index: int
    status: str
    due_date: Optional[date]
    priority: int
    project_type: str
    title: str = ""


@dataclass(frozen=True)
class AssignmentRecord:
    id: UUID
    user_id: UUID
    date: date
    task_id: UUID
    task_status: Optional[str] = None


@dataclass(frozen=True)
class NewAssignment:
    user_id: UUID
    date: date
    task_id: UUID


class AssignmentStore(Protocol):
    def get_preferences(self, user_id: UUID) -> Optional[PreferenceSnapshot]:
        ...

    def get_candidate_tasks(self, user_id: UUID, statuses: Sequence[str]) -> List[CandidateTask]:
        ...

    def get_assignments(
        self,
        user_id: UUID,
        *,
        on: Optional[date] = None,
        task_ids: Optional[Iterable[UUID]] = None,
    ) -> List[AssignmentRecord]:
        ...

    def insert_assignments(self, rows: Sequence[NewAssignment]) -> List[AssignmentRecord]:
        ...


class SqlAssignmentStore:
    """``AssignmentStore`` backed by a SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_preferences(self, user_id: UUID) -> Optional[PreferenceSnapshot]:
        try:
            row = self.db.get(UserPreferences, user_id)
        except SQLAlchemyError as exc:
            raise StorageReadError(f"Unable to load preferences for user {user_id}") from exc
        if row is None:
            return None
        return PreferenceSnapshot(
            user_id=row.user_id,
            tasks_per_day=int(row.tasks_per_day),
            active_days=frozenset(row.active_days or []),
            type_priority_order=tuple(row.type_priority_order or []),
            sleep_time=row.sleep_time,
            blocking_enabled=bool(row.blocking_enabled),
        )

    def get_candidate_tasks(self, user_id: UUID, statuses: Sequence[str]) -> List[CandidateTask]:
        try:
            rows = (
                self.db.query(Task, Project)
                .join(Project, Task.project_id == Project.id)
                .filter(Task.user_id == user_id, Task.status.in_(list(statuses)))
                .order_by(Task.created_at, Task.id)
                .all()
            )
        except SQLAlchemyError as exc:
            raise StorageReadError(f"Unable to load tasks for user {user_id}") from exc
        return [_candidate_from_row(task, project) for task, project in rows]

    def get_assignments(
        self,
        user_id: UUID,
        *,
        on: Optional[date] = None,
        task_ids: Optional[Iterable[UUID]] = None,
    ) -> List[AssignmentRecord]:
        query = (
            self.db.query(DailyTaskAssignment, Task.status)
            .outerjoin(Task, DailyTaskAssignment.task_id == Task.id)
            .filter(DailyTaskAssignment.user_id == user_id)
        )
        if on is not None:
            query = query.filter(DailyTaskAssignment.date == on)
        if task_ids is not None:
            ids = list(task_ids)
            if not ids:
                return []
            query = query.filter(DailyTaskAssignment.task_id.in_(ids))
        try:
            rows = query.order_by(DailyTaskAssignment.created_at, DailyTaskAssignment.id).all()
        except SQLAlchemyError as exc:
            raise StorageReadError(f"Unable to load assignments for user {user_id}") from exc
        return [
            AssignmentRecord(
                id=assignment.id,
                user_id=assignment.user_id,
                date=assignment.date,
                task_id=assignment.task_id,
                task_status=status,
            )
            for assignment, status in rows
        ]

    def insert_assignments(self, rows: Sequence[NewAssignment]) -> List[AssignmentRecord]:
        """Insert all rows in one transaction, or none of them.

        Raises ``AssignmentConflictError`` when a task already has an assignment.
        """
        if not rows:
            return []
        created = [
            DailyTaskAssignment(user_id=row.user_id, date=row.date, task_id=row.task_id)
            for row in rows
        ]
        self.db.add_all(created)
        for user_id, day, task_ids in _group_by_user_and_day(rows):
            self.db.add(
                ActionLog(
                    user_id=user_id,
                    action_type="daily_assignments_created",
                    action_payload={
                        "date": day.isoformat(),
                        "task_ids": [str(task_id) for task_id in task_ids],
                    },
                    reason="Daily assignments topped up",
                )
            )
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if is_unique_violation(exc):
                raise AssignmentConflictError("Task already has an assignment") from exc
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return [
            AssignmentRecord(
                id=assignment.id,
                user_id=assignment.user_id,
                date=assignment.date,
                task_id=assignment.task_id,
            )
            for assignment in created
        ]


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for duplicate-key errors; False for other integrity failures (e.g. FKs)."""
    original = exc.orig
    code = getattr(original, "pgcode", None) or getattr(original, "sqlstate", None)
    if code:
        return code == UNIQUE_VIOLATION_SQLSTATE
    message = str(original).lower()
    return "unique" in message or "duplicate" in message


def _candidate_from_row(task: Task, project: Project) -> CandidateTask:
    return CandidateTask(
        task_id=task.id,
        project_id=project.id,
        order_index=int(task.order_index or 0),
        status=task.status,
        due_date=project.due_date,
        priority=int(project.priority),
        project_type=project.project_type,
        title=task.title,
    )


def _group_by_user_and_day(rows: Sequence[NewAssignment]) -> List[Tuple[UUID, date, List[UUID]]]:
    grouped: dict[Tuple[UUID, date], List[UUID]] = {}
    for row in rows:
        grouped.setdefault((row.user_id, row.date), []).append(row.task_id)
    return [(user_id, day, task_ids) for (user_id, day), task_ids in grouped.items()]
