"""User preference endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.preferences import PreferencesResponse, PreferencesUpdateRequest
from app.db.deps import get_db
from app.observability.tracing import trace
from app.services.preferences import get_preferences, upsert_preferences

router = APIRouter()


@router.get("/preferences", response_model=PreferencesResponse, tags=["preferences"])
def read_preferences(
    user_id: UUID = Query(..., description="User ID"),
    db: Session = Depends(get_db),
) -> PreferencesResponse:
    row = get_preferences(db, user_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preferences not found")
    return PreferencesResponse.model_validate(row)


@router.put("/preferences", response_model=PreferencesResponse, tags=["preferences"])
def write_preferences(
    payload: PreferencesUpdateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> PreferencesResponse:
    """Create or replace preferences; validation mirrors the settings screen."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "preferences.update",
        metadata={"tasks_per_day": payload.tasks_per_day, "blocking_enabled": payload.blocking_enabled},
        user_id=str(payload.user_id),
        request_id=request_id,
    ):
        try:
            row = upsert_preferences(db, payload.user_id, payload)
        except Exception:
            db.rollback()
            raise
    return PreferencesResponse.model_validate(row)
