"""Blocking status endpoint polled by the device-level app blocker."""
from __future__ import annotations

from datetime import date, time
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.schemas.blocking import BlockingStatusResponse
from app.core.clock import local_time, local_today
from app.core.config import settings
from app.db.deps import get_db
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.blocking import get_blocking_status
from app.services.storage import SqlAssignmentStore

router = APIRouter()


@router.get("/blocking/status", response_model=BlockingStatusResponse, tags=["blocking"])
def blocking_status(
    http_request: Request,
    user_id: UUID = Query(..., description="User ID"),
    today: Optional[date] = Query(default=None),
    now: Optional[time] = Query(default=None, description="Local wall-clock time, HH:MM"),
    db: Session = Depends(get_db),
) -> BlockingStatusResponse:
    """Evaluate whether distracting apps should be blocked right now."""
    request_id = getattr(http_request.state, "request_id", None)
    day = today or local_today()
    current = now or local_time()
    with trace(
        "blocking.status",
        metadata={"date": day.isoformat(), "now": current.strftime("%H:%M")},
        user_id=str(user_id),
        request_id=request_id,
    ):
        result = get_blocking_status(
            SqlAssignmentStore(db),
            user_id,
            day,
            current,
            blocked_packages=settings.blocked_packages,
        )

    log_metric(
        "blocking.status.should_block",
        1 if result.should_block else 0,
        metadata={"user_id": str(user_id), "reason": result.reason},
    )
    return BlockingStatusResponse(
        enabled=result.enabled,
        sleep_time=result.sleep_time,
        has_incomplete_tasks=result.has_incomplete_tasks,
        should_block=result.should_block,
        reason=result.reason,
        blocked_packages=result.blocked_packages,
        request_id=request_id or "",
    )
