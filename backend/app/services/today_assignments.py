"""Listing and hand-editing of a user's daily assignments."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.action_log import ActionLog
from app.db.models.assignment import DailyTaskAssignment
from app.db.models.project import PROJECT_TYPES, Project
from app.db.models.task import OPEN_TASK_STATUSES, Task
from app.db.models.user_preferences import UserPreferences
from app.services.daily_assignments import select_candidates
from app.services.errors import (
    AssignmentConflictError,
    AssignmentNotFoundError,
    QuotaExceededError,
    TaskNotFoundError,
)
from app.services.storage import CandidateTask, SqlAssignmentStore, is_unique_violation

logger = logging.getLogger(__name__)


@dataclass
class TodayAssignment:
    assignment: DailyTaskAssignment
    task: Task
    project: Project


def list_today_assignments(db: Session, user_id: UUID, today: date) -> List[TodayAssignment]:
    """Return today's assignments with their task and project, oldest first."""
    rows = (
        db.query(DailyTaskAssignment, Task, Project)
        .join(Task, DailyTaskAssignment.task_id == Task.id)
        .join(Project, Task.project_id == Project.id)
        .filter(DailyTaskAssignment.user_id == user_id, DailyTaskAssignment.date == today)
        .order_by(DailyTaskAssignment.created_at, DailyTaskAssignment.id)
        .all()
    )
    return [TodayAssignment(assignment=a, task=t, project=p) for a, t, p in rows]


def list_swap_candidates(db: Session, user_id: UUID) -> List[CandidateTask]:
    """Open tasks with no assignment on any day, in planner order."""
    store = SqlAssignmentStore(db)
    preferences = store.get_preferences(user_id)
    type_order = preferences.type_priority_order if preferences else PROJECT_TYPES
    candidates = store.get_candidate_tasks(user_id, OPEN_TASK_STATUSES)
    assigned = {record.task_id for record in store.get_assignments(user_id)}
    return select_candidates(
        candidates,
        assigned_task_ids=assigned,
        type_priority_order=type_order,
        needed=len(candidates),
    )


def add_task_to_today(db: Session, user_id: UUID, task_id: UUID, today: date) -> DailyTaskAssignment:
    """Manually schedule ``task_id`` for ``today`` without exceeding the daily quota."""
    task = _load_assignable_task(db, user_id, task_id)

    preferences = db.get(UserPreferences, user_id)
    if preferences is not None:
        existing_count = (
            db.query(DailyTaskAssignment)
            .filter(DailyTaskAssignment.user_id == user_id, DailyTaskAssignment.date == today)
            .count()
        )
        if existing_count >= preferences.tasks_per_day:
            raise QuotaExceededError(
                f"Already {existing_count} task(s) planned for {today.isoformat()}"
            )

    assignment = DailyTaskAssignment(user_id=user_id, date=today, task_id=task.id)
    db.add(assignment)
    db.add(
        ActionLog(
            user_id=user_id,
            action_type="assignment_added",
            action_payload={"task_id": str(task.id), "date": today.isoformat()},
            reason="Task added to today manually",
        )
    )
    _commit_or_conflict(db)
    db.refresh(assignment)
    logger.info("Task %s added to %s", task.id, today.isoformat())
    return assignment


def swap_assignment(db: Session, user_id: UUID, assignment_id: UUID, task_id: UUID) -> DailyTaskAssignment:
    """Replace an assignment's task: the old row is deleted and a new one inserted on the same day."""
    current = db.get(DailyTaskAssignment, assignment_id)
    if current is None or current.user_id != user_id:
        raise AssignmentNotFoundError("Assignment not found")

    task = _load_assignable_task(db, user_id, task_id)
    previous_task_id = current.task_id
    day = current.date

    db.delete(current)
    db.flush()
    replacement = DailyTaskAssignment(user_id=user_id, date=day, task_id=task.id)
    db.add(replacement)
    db.add(
        ActionLog(
            user_id=user_id,
            action_type="assignment_swapped",
            action_payload={
                "date": day.isoformat(),
                "previous_task_id": str(previous_task_id),
                "task_id": str(task.id),
            },
            reason="Assignment swapped",
        )
    )
    _commit_or_conflict(db)
    db.refresh(replacement)
    logger.info("Swapped task %s for %s on %s", previous_task_id, task.id, day.isoformat())
    return replacement


def _load_assignable_task(db: Session, user_id: UUID, task_id: UUID) -> Task:
    task = db.get(Task, task_id)
    if task is None or task.user_id != user_id:
        raise TaskNotFoundError("Task not found")
    if task.status not in OPEN_TASK_STATUSES:
        raise AssignmentConflictError("Task is already completed")
    already = db.query(DailyTaskAssignment.id).filter(DailyTaskAssignment.task_id == task.id).first()
    if already is not None:
        raise AssignmentConflictError("This task is already assigned to a day")
    return task


def _commit_or_conflict(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc):
            raise AssignmentConflictError("This task is already assigned to a day") from exc
        raise
