"""Project ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base

PROJECT_TYPES = ("work", "study", "life")


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        Index("ix_projects_user_id", "user_id"),
        CheckConstraint("priority BETWEEN 1 AND 5", name="ck_projects_priority"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    due_date = Column(Date, nullable=True)
    # 5 is the most urgent.
    priority = Column(Integer, nullable=False, server_default=sa_text("3"))
    project_type = Column(String(length=20), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
