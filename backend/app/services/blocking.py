"""Decide whether distracting apps should be blocked for a user right now."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import List, Optional, Sequence
from uuid import UUID

from app.core.context import bind_user
from app.observability.metrics import log_metric
from app.services.storage import AssignmentRecord, AssignmentStore, PreferenceSnapshot

logger = logging.getLogger(__name__)

COMPLETED = "completed"


@dataclass(frozen=True)
class BlockingStatus:
    """Payload the device-level blocker consumes."""

    enabled: bool
    sleep_time: Optional[str]
    has_incomplete_tasks: bool
    should_block: bool
    reason: str
    blocked_packages: List[str] = field(default_factory=list)


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def is_after_sleep_time(now_hhmm: str, sleep_time: str) -> bool:
    # Both sides are zero-padded 24h strings, so string order is time order.
    return now_hhmm >= sleep_time


def has_incomplete_assignments(assignments: Sequence[AssignmentRecord]) -> bool:
    return any(record.task_status != COMPLETED for record in assignments)


def evaluate_blocking(
    preferences: Optional[PreferenceSnapshot],
    now: time,
    assignments: Sequence[AssignmentRecord],
) -> tuple[bool, str]:
    """Pure blocking rule; returns ``(should_block, reason)``."""
    if preferences is None:
        return False, "no_preferences"
    if not preferences.blocking_enabled:
        return False, "disabled"
    if is_after_sleep_time(format_hhmm(now), preferences.sleep_time):
        return True, "after_sleep_time"
    if not assignments:
        return False, "no_assignments"
    if has_incomplete_assignments(assignments):
        return True, "incomplete_tasks"
    return False, "all_completed"


def should_block_apps(store: AssignmentStore, user_id: UUID, today: date, now: time) -> bool:
    """
    Return True when the user's distracting apps should be blocked.

    Any storage failure resolves to False so a broken read never traps the user.
    """
    with bind_user(user_id):
        try:
            preferences = store.get_preferences(user_id)
            assignments: Sequence[AssignmentRecord] = []
            if _needs_assignments(preferences, now):
                assignments = store.get_assignments(user_id, on=today)
        except Exception:
            logger.exception("Blocking evaluation failed; failing open")
            return False
        should_block, _ = evaluate_blocking(preferences, now, assignments)
        return should_block


def _needs_assignments(preferences: Optional[PreferenceSnapshot], now: time) -> bool:
    # Only the task rule reads today's assignments.
    return bool(
        preferences
        and preferences.blocking_enabled
        and not is_after_sleep_time(format_hhmm(now), preferences.sleep_time)
    )


def get_blocking_status(
    store: AssignmentStore,
    user_id: UUID,
    today: date,
    now: time,
    *,
    blocked_packages: Sequence[str] = (),
) -> BlockingStatus:
    """Evaluate the blocking rule and describe it for the device blocker."""
    with bind_user(user_id):
        try:
            preferences = store.get_preferences(user_id)
            assignments = store.get_assignments(user_id, on=today) if preferences else []
        except Exception:
            logger.exception("Blocking status lookup failed; failing open")
            log_metric("blocking.status.error", 1, metadata={"user_id": str(user_id)})
            return BlockingStatus(
                enabled=False,
                sleep_time=None,
                has_incomplete_tasks=False,
                should_block=False,
                reason="error",
            )

        should_block, reason = evaluate_blocking(preferences, now, assignments)
        logger.debug("Blocking evaluated: should_block=%s reason=%s", should_block, reason)
        return BlockingStatus(
            enabled=bool(preferences and preferences.blocking_enabled),
            sleep_time=preferences.sleep_time if preferences else None,
            has_incomplete_tasks=has_incomplete_assignments(assignments),
            should_block=should_block,
            reason=reason,
            blocked_packages=list(blocked_packages),
        )
