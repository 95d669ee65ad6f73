"""Schemas for daily assignment endpoints."""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class EnsureTodayRequest(BaseModel):
    user_id: UUID
    today: Optional[date] = None


class EnsureTodayResponse(BaseModel):
    date: date
    reason: str
    existing_count: int
    created_task_ids: List[UUID]
    request_id: str


class AssignedTask(BaseModel):
    id: UUID
    project_id: UUID
    title: str
    status: str
    order_index: int
    total_minutes: int


class AssignedProject(BaseModel):
    id: UUID
    title: str
    due_date: Optional[date]
    priority: int
    project_type: str


class TodayAssignmentItem(BaseModel):
    id: UUID
    date: date
    task: AssignedTask
    project: AssignedProject
    created_at: datetime


class TodayAssignmentsResponse(BaseModel):
    date: date
    assignments: List[TodayAssignmentItem]
    request_id: str


class SwapCandidate(BaseModel):
    task_id: UUID
    project_id: UUID
    title: str
    status: str
    order_index: int
    due_date: Optional[date]
    priority: int
    project_type: str


class AddToTodayRequest(BaseModel):
    user_id: UUID
    task_id: UUID
    today: Optional[date] = None


class SwapRequest(BaseModel):
    user_id: UUID
    task_id: UUID


class AssignmentResponse(BaseModel):
    id: UUID
    date: date
    task_id: UUID
    request_id: str
