"""Schemas for job operations endpoints."""
from __future__ import annotations

from datetime import date
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel


class JobRunRequest(BaseModel):
    job: Literal["daily_assignments"] = "daily_assignments"
    user_id: Optional[UUID] = None
    today: Optional[date] = None


class JobRunResponse(BaseModel):
    job: str
    users_processed: int
    assignments_created: int
    users_failed: int
    request_id: str
