"""Daily task assignment: decide which pending tasks a user works on today."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Sequence, Tuple
from uuid import UUID

from app.core.context import bind_user
from app.db.models.task import OPEN_TASK_STATUSES
from app.observability.metrics import log_metric, timed
from app.observability.tracing import trace
from app.services.errors import AssignmentConflictError, StorageReadError
from app.services.storage import AssignmentStore, CandidateTask, NewAssignment

logger = logging.getLogger(__name__)

WEEKDAY_CODES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

REASON_NO_PREFERENCES = "no_preferences"
REASON_INACTIVE_DAY = "inactive_day"
REASON_QUOTA_MET = "quota_met"
REASON_NO_CANDIDATES = "no_candidates"
REASON_ALREADY_ASSIGNED = "already_assigned"
REASON_LOST_RACE = "lost_race"
REASON_ASSIGNED = "assigned"


@dataclass(frozen=True)
class AssignmentRunResult:
    user_id: UUID
    date: date
    reason: str
    existing_count: int = 0
    needed: int = 0
    created_task_ids: Tuple[UUID, ...] = ()

    @property
    def created(self) -> bool:
        return bool(self.created_task_ids)


def weekday_code(day: date) -> str:
    """Return the three-letter weekday code (``Mon``..``Sun``) for ``day``."""
    return WEEKDAY_CODES[day.weekday()]


def candidate_sort_key(candidate: CandidateTask, type_priority_order: Sequence[str]) -> tuple:
    """
    Sort key for planner candidates, ascending.

    Dated projects come first (earliest due date first), then higher priority,
    then the project type's rank in ``type_priority_order``, then the task's
    manual ``order_index``. A type missing from the order ranks as -1, ahead of
    every listed type.
    """
    if candidate.project_type in type_priority_order:
        type_rank = list(type_priority_order).index(candidate.project_type)
    else:
        type_rank = -1
    return (
        candidate.due_date is None,
        candidate.due_date or date.min,
        -candidate.priority,
        type_rank,
        candidate.order_index,
    )


def order_candidates(
    candidates: Iterable[CandidateTask],
    type_priority_order: Sequence[str],
) -> List[CandidateTask]:
    """Return candidates in planner order; full ties keep their read order."""
    return sorted(candidates, key=lambda candidate: candidate_sort_key(candidate, type_priority_order))


def select_candidates(
    candidates: Iterable[CandidateTask],
    *,
    assigned_task_ids: Iterable[UUID],
    type_priority_order: Sequence[str],
    needed: int,
) -> List[CandidateTask]:
    """Drop already-assigned tasks, order the rest and keep the first ``needed``."""
    if needed <= 0:
        return []
    taken = set(assigned_task_ids)
    eligible = [candidate for candidate in candidates if candidate.task_id not in taken]
    return order_candidates(eligible, type_priority_order)[:needed]


def ensure_today_assignments(store: AssignmentStore, user_id: UUID, today: date) -> AssignmentRunResult:
    """
    Top up ``today``'s assignments for ``user_id`` to the tasks-per-day quota.

    Safe to call repeatedly and from several devices at once. Existing rows are
    never removed; a task is never assigned twice. Read failures raise
    ``StorageReadError`` before anything is written.
    """
    with bind_user(user_id), trace(
        "daily_assignments.ensure",
        metadata={"date": today.isoformat()},
        user_id=str(user_id),
    ) as planner_trace, timed("daily_assignments.ensure", metadata={"user_id": str(user_id)}):
        result = _ensure_today_assignments(store, user_id, today)
        if planner_trace:
            planner_trace.update(
                metadata={
                    "reason": result.reason,
                    "existing_count": result.existing_count,
                    "created_count": len(result.created_task_ids),
                }
            )

    log_metric(
        "daily_assignments.created",
        len(result.created_task_ids),
        metadata={"user_id": str(user_id), "reason": result.reason},
    )
    return result


def _ensure_today_assignments(store: AssignmentStore, user_id: UUID, today: date) -> AssignmentRunResult:
    try:
        preferences = store.get_preferences(user_id)
    except StorageReadError as exc:
        logger.error("Failed to load preferences, aborting daily assignment: %s", exc)
        raise
    if preferences is None:
        logger.debug("No preferences yet; skipping daily assignment")
        return AssignmentRunResult(user_id=user_id, date=today, reason=REASON_NO_PREFERENCES)

    if weekday_code(today) not in preferences.active_days:
        logger.debug("%s is not an active day; skipping daily assignment", weekday_code(today))
        return AssignmentRunResult(user_id=user_id, date=today, reason=REASON_INACTIVE_DAY)

    existing_count = len(store.get_assignments(user_id, on=today))
    if existing_count >= preferences.tasks_per_day:
        return AssignmentRunResult(
            user_id=user_id,
            date=today,
            reason=REASON_QUOTA_MET,
            existing_count=existing_count,
        )
    needed = preferences.tasks_per_day - existing_count

    try:
        candidates = store.get_candidate_tasks(user_id, OPEN_TASK_STATUSES)
    except StorageReadError as exc:
        logger.error("Failed to load candidate tasks, aborting daily assignment: %s", exc)
        raise
    assigned_anywhere = {record.task_id for record in store.get_assignments(user_id)}
    selected = select_candidates(
        candidates,
        assigned_task_ids=assigned_anywhere,
        type_priority_order=preferences.type_priority_order,
        needed=needed,
    )
    if not selected:
        return AssignmentRunResult(
            user_id=user_id,
            date=today,
            reason=REASON_NO_CANDIDATES,
            existing_count=existing_count,
            needed=needed,
        )

    # Second snapshot, taken just before writing: another device may have
    # assigned some of these tasks since the candidate read.
    selected_ids = [candidate.task_id for candidate in selected]
    now_assigned = {record.task_id for record in store.get_assignments(user_id, task_ids=selected_ids)}
    to_insert = [task_id for task_id in selected_ids if task_id not in now_assigned]
    current_count = len(store.get_assignments(user_id, on=today))
    room = preferences.tasks_per_day - current_count
    if room <= 0:
        logger.info("Quota for %s filled concurrently; nothing to insert", today.isoformat())
        return AssignmentRunResult(
            user_id=user_id,
            date=today,
            reason=REASON_QUOTA_MET,
            existing_count=current_count,
            needed=needed,
        )
    to_insert = to_insert[:room]
    if not to_insert:
        logger.info("All %d selected tasks were assigned concurrently; nothing to insert", len(selected_ids))
        return AssignmentRunResult(
            user_id=user_id,
            date=today,
            reason=REASON_ALREADY_ASSIGNED,
            existing_count=existing_count,
            needed=needed,
        )

    try:
        store.insert_assignments(
            [NewAssignment(user_id=user_id, date=today, task_id=task_id) for task_id in to_insert]
        )
    except AssignmentConflictError:
        logger.info("Some assignments already exist, skipping duplicates")
        return AssignmentRunResult(
            user_id=user_id,
            date=today,
            reason=REASON_LOST_RACE,
            existing_count=existing_count,
            needed=needed,
        )

    logger.info("Assigned %d task(s) for %s", len(to_insert), today.isoformat())
    return AssignmentRunResult(
        user_id=user_id,
        date=today,
        reason=REASON_ASSIGNED,
        existing_count=existing_count,
        needed=needed,
        created_task_ids=tuple(to_insert),
    )
