from __future__ import annotations

from datetime import date, time
from uuid import uuid4

from app.services.blocking import get_blocking_status, should_block_apps
from app.services.storage import AssignmentRecord, PreferenceSnapshot

TODAY = date(2025, 1, 6)


class _MemoryStore:
    def __init__(self, preferences=None, statuses=()):
        self.preferences = preferences
        self.assignment_reads = 0
        self.records = [
            AssignmentRecord(id=uuid4(), user_id=uuid4(), date=TODAY, task_id=uuid4(), task_status=status)
            for status in statuses
        ]

    def get_preferences(self, user_id):
        return self.preferences

    def get_assignments(self, user_id, *, on=None, task_ids=None):
        self.assignment_reads += 1
        return [record for record in self.records if on is None or record.date == on]


class _BrokenStore(_MemoryStore):
    def get_assignments(self, user_id, *, on=None, task_ids=None):
        raise RuntimeError("storage offline")


def _prefs(*, sleep_time="23:00", blocking_enabled=True):
    return PreferenceSnapshot(
        user_id=uuid4(),
        tasks_per_day=3,
        active_days=frozenset({"Mon"}),
        type_priority_order=("work", "study", "life"),
        sleep_time=sleep_time,
        blocking_enabled=blocking_enabled,
    )


def test_blocks_after_sleep_time_regardless_of_tasks() -> None:
    store = _MemoryStore(_prefs(sleep_time="23:00"), statuses=["completed"])

    assert should_block_apps(store, uuid4(), TODAY, time(23, 1)) is True
    assert store.assignment_reads == 0


def test_sleep_time_boundary_is_inclusive() -> None:
    store = _MemoryStore(_prefs(sleep_time="22:30"), statuses=[])

    assert should_block_apps(store, uuid4(), TODAY, time(22, 30)) is True
    assert should_block_apps(store, uuid4(), TODAY, time(22, 29)) is False


def test_all_completed_does_not_block() -> None:
    store = _MemoryStore(_prefs(), statuses=["completed", "completed"])

    assert should_block_apps(store, uuid4(), TODAY, time(14, 0)) is False


def test_no_assignments_does_not_block() -> None:
    store = _MemoryStore(_prefs(), statuses=[])

    assert should_block_apps(store, uuid4(), TODAY, time(14, 0)) is False


def test_incomplete_task_blocks() -> None:
    store = _MemoryStore(_prefs(), statuses=["completed", "in_progress"])

    assert should_block_apps(store, uuid4(), TODAY, time(9, 5)) is True


def test_disabled_or_missing_preferences_never_block() -> None:
    disabled = _MemoryStore(_prefs(blocking_enabled=False), statuses=["pending"])
    missing = _MemoryStore(None, statuses=["pending"])

    assert should_block_apps(disabled, uuid4(), TODAY, time(23, 59)) is False
    assert should_block_apps(missing, uuid4(), TODAY, time(23, 59)) is False


def test_storage_failure_fails_open() -> None:
    store = _BrokenStore(_prefs(), statuses=["pending"])

    assert should_block_apps(store, uuid4(), TODAY, time(12, 0)) is False


def test_status_payload_for_device() -> None:
    store = _MemoryStore(_prefs(sleep_time="23:00"), statuses=["pending"])

    status = get_blocking_status(
        store,
        uuid4(),
        TODAY,
        time(10, 0),
        blocked_packages=["com.instagram.android"],
    )

    assert status.enabled is True
    assert status.should_block is True
    assert status.reason == "incomplete_tasks"
    assert status.has_incomplete_tasks is True
    assert status.sleep_time == "23:00"
    assert status.blocked_packages == ["com.instagram.android"]


def test_status_payload_fails_open() -> None:
    status = get_blocking_status(_BrokenStore(_prefs()), uuid4(), TODAY, time(23, 30))

    assert status.should_block is False
    assert status.reason == "error"


def test_predicate_agrees_with_status_payload() -> None:
    cases = [
        (None, ["pending"], time(9, 0)),
        (_prefs(blocking_enabled=False), ["pending"], time(23, 30)),
        (_prefs(sleep_time="21:00"), [], time(21, 0)),
        (_prefs(), [], time(9, 0)),
        (_prefs(), ["completed"], time(9, 0)),
        (_prefs(), ["completed", "pending"], time(9, 0)),
    ]
    for preferences, statuses, now in cases:
        store = _MemoryStore(preferences, statuses=statuses)
        expected = get_blocking_status(store, uuid4(), TODAY, now).should_block

        assert should_block_apps(store, uuid4(), TODAY, now) is expected


def test_disabled_blocking_skips_assignment_read() -> None:
    store = _MemoryStore(_prefs(blocking_enabled=False), statuses=["pending"])

    assert should_block_apps(store, uuid4(), TODAY, time(9, 0)) is False
    assert store.assignment_reads == 0
