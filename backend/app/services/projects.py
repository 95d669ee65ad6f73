"""Create projects and tasks, and move tasks through their statuses."""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.models.action_log import ActionLog
from app.db.models.project import Project
from app.db.models.task import Task
from app.services.errors import ProjectNotFoundError, TaskNotFoundError
from app.services.preferences import ensure_user

logger = logging.getLogger(__name__)

COMPLETED = "completed"


def create_project(
    db: Session,
    user_id: UUID,
    *,
    title: str,
    project_type: str,
    priority: int = 3,
    due_date: Optional[date] = None,
) -> Project:
    ensure_user(db, user_id)
    project = Project(
        user_id=user_id,
        title=title.strip(),
        project_type=project_type,
        priority=priority,
        due_date=due_date,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Project created (type=%s, priority=%s)", project.project_type, project.priority)
    return project


def create_task(
    db: Session,
    user_id: UUID,
    project_id: UUID,
    *,
    title: str,
    subtasks_text: Optional[str] = None,
    order_index: Optional[int] = None,
) -> Task:
    """Append a task to one of the user's projects.

    Without an explicit ``order_index`` the task goes after the project's last task.
    """
    project = db.get(Project, project_id)
    if project is None or project.user_id != user_id:
        raise ProjectNotFoundError(f"Project {project_id} not found")

    if order_index is None:
        last_index = (
            db.query(func.max(Task.order_index)).filter(Task.project_id == project_id).scalar()
        )
        order_index = 0 if last_index is None else last_index + 1

    task = Task(
        user_id=user_id,
        project_id=project_id,
        title=title.strip(),
        subtasks_text=subtasks_text,
        order_index=order_index,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def set_task_status(db: Session, user_id: UUID, task_id: UUID, status: str) -> Task:
    """Change a task's status, stamping ``completed_at`` when it becomes completed."""
    task = db.get(Task, task_id)
    if task is None or task.user_id != user_id:
        raise TaskNotFoundError(f"Task {task_id} not found")

    previous = task.status
    if previous == status:
        return task

    task.status = status
    task.completed_at = datetime.now(timezone.utc) if status == COMPLETED else None
    db.add(
        ActionLog(
            user_id=user_id,
            action_type="task_completed" if status == COMPLETED else "task_status_changed",
            action_payload={"task_id": str(task_id), "from": previous, "to": status},
            reason="Task status updated",
        )
    )
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(task)
    logger.info("Task status changed %s -> %s", previous, status)
    return task
