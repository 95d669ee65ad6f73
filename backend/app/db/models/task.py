"""Task ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base

TASK_STATUSES = ("pending", "in_progress", "completed")
OPEN_TASK_STATUSES = ("pending", "in_progress")

_STATUS_CHECK = "status IN (" + ", ".join(f"'{status}'" for status in TASK_STATUSES) + ")"


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_id", "user_id"),
        Index("ix_tasks_project_id", "project_id"),
        Index("ix_tasks_status", "status"),
        CheckConstraint(_STATUS_CHECK, name="ck_tasks_status"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    project_id = Column(
        UUID(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    order_index = Column(Integer, nullable=False, server_default=sa_text("0"))
    title = Column(Text, nullable=False)
    subtasks_text = Column(Text, nullable=True)
    status = Column(String(length=20), nullable=False, server_default=sa_text("'pending'"))
    total_minutes = Column(Integer, nullable=False, server_default=sa_text("0"))
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
