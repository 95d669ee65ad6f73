"""Batch runner that tops up today's assignments for every onboarded user."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.db.models.user_preferences import UserPreferences
from app.services.daily_assignments import AssignmentRunResult, ensure_today_assignments
from app.services.storage import SqlAssignmentStore

logger = logging.getLogger(__name__)


@dataclass
class JobRunResult:
    users_processed: int
    assignments_created: int
    users_failed: int = 0


def _onboarded_user_ids(db: Session) -> List[UUID]:
    rows = db.query(UserPreferences.user_id).order_by(UserPreferences.user_id).all()
    return [row[0] for row in rows]


def run_daily_assignments_for_user(db: Session, user_id: UUID, *, today: date) -> AssignmentRunResult:
    return ensure_today_assignments(SqlAssignmentStore(db), user_id, today)


def run_daily_assignments_for_all_users(
    db: Session,
    *,
    today: date,
    user_ids: Optional[Iterable[UUID]] = None,
) -> JobRunResult:
    """Run the planner per user; one user's failure is logged and the batch continues."""
    ids = _normalize_user_ids(user_ids, db)
    users_processed = 0
    assignments_created = 0
    failed = 0
    for uid in ids:
        try:
            result = run_daily_assignments_for_user(db, uid, today=today)
        except Exception:
            db.rollback()
            failed += 1
            logger.exception("Daily assignment job failed for user %s", uid)
            continue
        users_processed += 1
        assignments_created += len(result.created_task_ids)
    return JobRunResult(
        users_processed=users_processed,
        assignments_created=assignments_created,
        users_failed=failed,
    )


def _normalize_user_ids(user_ids: Optional[Iterable[UUID]], db: Session) -> List[UUID]:
    if user_ids is None:
        return _onboarded_user_ids(db)
    return list(dict.fromkeys(user_ids))
