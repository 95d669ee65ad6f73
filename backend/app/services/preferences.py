"""Read and write a user's planner preferences."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.schemas.preferences import PreferencesPayload
from app.db.models.user import User
from app.db.models.user_preferences import UserPreferences

logger = logging.getLogger(__name__)


def get_preferences(db: Session, user_id: UUID) -> UserPreferences | None:
    return db.get(UserPreferences, user_id)


def upsert_preferences(db: Session, user_id: UUID, payload: PreferencesPayload) -> UserPreferences:
    """Create or replace the user's preferences; the user row is created on first save."""
    ensure_user(db, user_id)
    row = db.get(UserPreferences, user_id)
    if row is None:
        row = UserPreferences(user_id=user_id)
        db.add(row)

    row.tasks_per_day = payload.tasks_per_day
    row.active_days = list(payload.active_days)
    row.type_priority_order = list(payload.type_priority_order)
    row.wake_time = payload.wake_time
    row.sleep_time = payload.sleep_time
    row.blocking_enabled = payload.blocking_enabled

    db.commit()
    db.refresh(row)
    logger.info("Preferences saved (tasks_per_day=%s, active_days=%s)", row.tasks_per_day, ",".join(row.active_days))
    return row


def ensure_user(db: Session, user_id: UUID) -> User:
    """Fetch the user or insert it, tolerating a concurrent insert of the same id."""
    user = db.get(User, user_id)
    if user:
        return user

    user = User(id=user_id)
    db.add(user)
    try:
        db.flush()
        return user
    except IntegrityError:
        db.rollback()
        existing = db.get(User, user_id)
        if existing:
            return existing
        raise
