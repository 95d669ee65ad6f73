"""Daily task assignment ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class DailyTaskAssignment(Base):
    __tablename__ = "daily_task_assignments"
    __table_args__ = (
        # A task is scheduled on at most one day, whatever the date.
        UniqueConstraint("task_id", name="uq_daily_task_assignments_task_id"),
        Index("ix_daily_task_assignments_user_date", "user_id", "date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    task_id = Column(UUID(as_uuid=True), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
