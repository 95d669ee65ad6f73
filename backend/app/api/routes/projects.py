"""Project and task ingest routes feeding the daily planner."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.projects import (
    ProjectCreateRequest,
    ProjectResponse,
    TaskCreateRequest,
    TaskResponse,
    TaskStatusUpdateRequest,
)
from app.db.deps import get_db
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.errors import ProjectNotFoundError, TaskNotFoundError
from app.services.projects import create_project, create_task, set_task_status

router = APIRouter()


@router.post(
    "/projects",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["projects"],
)
def add_project(
    payload: ProjectCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> ProjectResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "projects.create",
        metadata={"project_type": payload.project_type, "priority": payload.priority},
        user_id=str(payload.user_id),
        request_id=request_id,
    ):
        project = create_project(
            db,
            payload.user_id,
            title=payload.title,
            project_type=payload.project_type,
            priority=payload.priority,
            due_date=payload.due_date,
        )
    log_metric("projects.create.success", 1, metadata={"user_id": str(payload.user_id)})
    return ProjectResponse.model_validate(project)


@router.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED, tags=["tasks"])
def add_task(
    payload: TaskCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> TaskResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "tasks.create",
        metadata={"project_id": str(payload.project_id)},
        user_id=str(payload.user_id),
        request_id=request_id,
    ):
        try:
            task = create_task(
                db,
                payload.user_id,
                payload.project_id,
                title=payload.title,
                subtasks_text=payload.subtasks_text,
                order_index=payload.order_index,
            )
        except ProjectNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    log_metric("tasks.create.success", 1, metadata={"user_id": str(payload.user_id)})
    return TaskResponse.model_validate(task)


@router.patch("/tasks/{task_id}", response_model=TaskResponse, tags=["tasks"])
def update_task_status(
    task_id: UUID,
    payload: TaskStatusUpdateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> TaskResponse:
    """Move a task between pending, in progress and completed."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "tasks.status",
        metadata={"task_id": str(task_id), "status": payload.status},
        user_id=str(payload.user_id),
        request_id=request_id,
    ):
        try:
            task = set_task_status(db, payload.user_id, task_id, payload.status)
        except TaskNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    log_metric("tasks.status.success", 1, metadata={"status": payload.status})
    return TaskResponse.model_validate(task)
