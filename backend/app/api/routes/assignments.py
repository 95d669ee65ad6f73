"""Daily assignment API routes."""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.assignments import (
    AddToTodayRequest,
    AssignedProject,
    AssignedTask,
    AssignmentResponse,
    EnsureTodayRequest,
    EnsureTodayResponse,
    SwapCandidate,
    SwapRequest,
    TodayAssignmentItem,
    TodayAssignmentsResponse,
)
from app.core.clock import local_today
from app.db.deps import get_db
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.daily_assignments import ensure_today_assignments
from app.services.errors import (
    AssignmentConflictError,
    AssignmentNotFoundError,
    QuotaExceededError,
    StorageReadError,
    TaskNotFoundError,
)
from app.services.storage import SqlAssignmentStore
from app.services.today_assignments import (
    TodayAssignment,
    add_task_to_today,
    list_swap_candidates,
    list_today_assignments,
    swap_assignment,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/assignments/today/ensure", response_model=EnsureTodayResponse, tags=["assignments"])
def ensure_today(
    payload: EnsureTodayRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> EnsureTodayResponse:
    """Top up today's assignments; called by the app whenever it comes to the foreground."""
    request_id = getattr(http_request.state, "request_id", None)
    today = payload.today or local_today()
    try:
        result = ensure_today_assignments(SqlAssignmentStore(db), payload.user_id, today)
    except StorageReadError:
        logger.warning("Daily assignment skipped for user %s: storage unavailable", payload.user_id)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Storage unavailable")

    return EnsureTodayResponse(
        date=result.date,
        reason=result.reason,
        existing_count=result.existing_count,
        created_task_ids=list(result.created_task_ids),
        request_id=request_id or "",
    )


@router.get("/assignments/today", response_model=TodayAssignmentsResponse, tags=["assignments"])
def get_today_assignments(
    http_request: Request,
    user_id: UUID = Query(..., description="User ID owning the assignments"),
    today: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
) -> TodayAssignmentsResponse:
    request_id = getattr(http_request.state, "request_id", None)
    day = today or local_today()
    with trace(
        "assignments.today",
        metadata={"route": "/assignments/today", "date": day.isoformat()},
        user_id=str(user_id),
        request_id=request_id,
    ):
        rows = list_today_assignments(db, user_id, day)

    log_metric("assignments.today.count", len(rows), metadata={"user_id": str(user_id)})
    return TodayAssignmentsResponse(
        date=day,
        assignments=[_serialize_assignment(row) for row in rows],
        request_id=request_id or "",
    )


@router.post(
    "/assignments/today",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["assignments"],
)
def add_to_today(
    payload: AddToTodayRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> AssignmentResponse:
    """Manually put a task on today's list."""
    request_id = getattr(http_request.state, "request_id", None)
    day = payload.today or local_today()
    with trace(
        "assignments.add",
        metadata={"task_id": str(payload.task_id), "date": day.isoformat()},
        user_id=str(payload.user_id),
        request_id=request_id,
    ):
        try:
            assignment = add_task_to_today(db, payload.user_id, payload.task_id, day)
        except TaskNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
        except (AssignmentConflictError, QuotaExceededError) as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    log_metric("assignments.add.success", 1, metadata={"user_id": str(payload.user_id)})
    return AssignmentResponse(
        id=assignment.id,
        date=assignment.date,
        task_id=assignment.task_id,
        request_id=request_id or "",
    )


@router.get("/assignments/swap-candidates", response_model=List[SwapCandidate], tags=["assignments"])
def get_swap_candidates(
    user_id: UUID = Query(..., description="User ID owning the tasks"),
    db: Session = Depends(get_db),
) -> List[SwapCandidate]:
    """Open tasks that are not scheduled on any day."""
    try:
        candidates = list_swap_candidates(db, user_id)
    except StorageReadError:
        logger.warning("Swap candidates unavailable for user %s", user_id)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Storage unavailable")
    return [
        SwapCandidate(
            task_id=candidate.task_id,
            project_id=candidate.project_id,
            title=candidate.title,
            status=candidate.status,
            order_index=candidate.order_index,
            due_date=candidate.due_date,
            priority=candidate.priority,
            project_type=candidate.project_type,
        )
        for candidate in candidates
    ]


@router.post("/assignments/{assignment_id}/swap", response_model=AssignmentResponse, tags=["assignments"])
def swap(
    assignment_id: UUID,
    payload: SwapRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> AssignmentResponse:
    """Swap the task of an assignment for another unscheduled task."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "assignments.swap",
        metadata={"assignment_id": str(assignment_id), "task_id": str(payload.task_id)},
        user_id=str(payload.user_id),
        request_id=request_id,
    ):
        try:
            replacement = swap_assignment(db, payload.user_id, assignment_id, payload.task_id)
        except (AssignmentNotFoundError, TaskNotFoundError) as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
        except AssignmentConflictError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    log_metric("assignments.swap.success", 1, metadata={"user_id": str(payload.user_id)})
    return AssignmentResponse(
        id=replacement.id,
        date=replacement.date,
        task_id=replacement.task_id,
        request_id=request_id or "",
    )


def _serialize_assignment(row: TodayAssignment) -> TodayAssignmentItem:
    task, project = row.task, row.project
    return TodayAssignmentItem(
        id=row.assignment.id,
        date=row.assignment.date,
        created_at=row.assignment.created_at,
        task=AssignedTask(
            id=task.id,
            project_id=task.project_id,
            title=task.title,
            status=task.status,
            order_index=task.order_index,
            total_minutes=task.total_minutes or 0,
        ),
        project=AssignedProject(
            id=project.id,
            title=project.title,
            due_date=project.due_date,
            priority=project.priority,
            project_type=project.project_type,
        ),
    )
