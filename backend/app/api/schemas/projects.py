"""Schemas for project and task ingest."""
from datetime import date, datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ProjectType = Literal["work", "study", "life"]
TaskStatus = Literal["pending", "in_progress", "completed"]


class ProjectCreateRequest(BaseModel):
    user_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    project_type: ProjectType
    priority: int = Field(3, ge=1, le=5)
    due_date: Optional[date] = None


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    project_type: str
    priority: int
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None


class TaskCreateRequest(BaseModel):
    user_id: UUID
    project_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    subtasks_text: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=0)


class TaskStatusUpdateRequest(BaseModel):
    user_id: UUID
    status: TaskStatus


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    title: str
    subtasks_text: Optional[str] = None
    status: str
    order_index: int
    completed_at: Optional[datetime] = None
