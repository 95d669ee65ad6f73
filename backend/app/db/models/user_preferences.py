"""Per-user scheduling and blocking preferences."""
from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base
from app.db.types import StringList


class UserPreferences(Base):
    __tablename__ = "user_preferences"
    __table_args__ = (
        CheckConstraint("tasks_per_day BETWEEN 1 AND 20", name="ck_user_preferences_tasks_per_day"),
    )

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    tasks_per_day = Column(Integer, nullable=False, server_default=sa_text("3"))
    # Weekday codes as rendered by strftime("%a") in the C locale: Mon..Sun.
    active_days = Column(StringList, nullable=False)
    type_priority_order = Column(StringList, nullable=False)
    # Zero-padded HH:MM so string comparison is chronological.
    wake_time = Column(String(5), nullable=False, server_default=sa_text("'07:00'"))
    sleep_time = Column(String(5), nullable=False, server_default=sa_text("'23:00'"))
    blocking_enabled = Column(Boolean, nullable=False, server_default=sa_text("false"))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
