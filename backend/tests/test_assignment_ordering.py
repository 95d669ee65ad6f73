from __future__ import annotations

from datetime import date
from uuid import uuid4

from app.services.daily_assignments import (
    order_candidates,
    select_candidates,
    weekday_code,
)
from app.services.storage import CandidateTask


def _candidate(title, *, due=None, priority=3, project_type="work", order_index=0, project_id=None):
    return CandidateTask(
        task_id=uuid4(),
        project_id=project_id or uuid4(),
        order_index=order_index,
        status="pending",
        due_date=due,
        priority=priority,
        project_type=project_type,
        title=title,
    )


def _titles(candidates):
    return [candidate.title for candidate in candidates]


def test_dated_before_undated_then_priority_desc() -> None:
    a = _candidate("A", due=date(2025, 1, 1), priority=3, project_type="work")
    b = _candidate("B", due=None, priority=5, project_type="life")
    c = _candidate("C", due=date(2025, 1, 1), priority=5, project_type="study")

    ordered = order_candidates([a, b, c], ["study", "work", "life"])

    assert _titles(ordered) == ["C", "A", "B"]


def test_earlier_due_date_wins_over_priority() -> None:
    later = _candidate("later", due=date(2025, 3, 1), priority=5)
    sooner = _candidate("sooner", due=date(2025, 2, 1), priority=1)

    assert _titles(order_candidates([later, sooner], ["work", "study", "life"])) == ["sooner", "later"]


def test_type_priority_order_breaks_priority_ties() -> None:
    work = _candidate("work", project_type="work")
    life = _candidate("life", project_type="life")
    study = _candidate("study", project_type="study")

    ordered = order_candidates([work, life, study], ["life", "study", "work"])

    assert _titles(ordered) == ["life", "study", "work"]


def test_order_index_is_last_tie_break() -> None:
    project_id = uuid4()
    third = _candidate("third", order_index=2, project_id=project_id)
    first = _candidate("first", order_index=0, project_id=project_id)
    second = _candidate("second", order_index=1, project_id=project_id)

    assert _titles(order_candidates([third, first, second], ["work"])) == ["first", "second", "third"]


def test_full_ties_keep_read_order() -> None:
    candidates = [_candidate(f"t{idx}", order_index=0) for idx in range(5)]

    assert _titles(order_candidates(candidates, ["work", "study", "life"])) == ["t0", "t1", "t2", "t3", "t4"]


def test_unlisted_project_type_ranks_ahead_of_listed_types() -> None:
    listed = _candidate("listed", project_type="work")
    unlisted = _candidate("unlisted", project_type="hobby")

    assert _titles(order_candidates([listed, unlisted], ["work", "study", "life"])) == ["unlisted", "listed"]


def test_select_candidates_skips_assigned_and_caps_at_needed() -> None:
    a = _candidate("A", due=date(2025, 1, 1), priority=3)
    b = _candidate("B", priority=5)
    c = _candidate("C", due=date(2025, 1, 1), priority=5)

    selected = select_candidates(
        [a, b, c],
        assigned_task_ids={c.task_id},
        type_priority_order=["study", "work", "life"],
        needed=1,
    )

    assert _titles(selected) == ["A"]


def test_select_candidates_with_nothing_needed() -> None:
    a = _candidate("A")

    assert select_candidates([a], assigned_task_ids=set(), type_priority_order=["work"], needed=0) == []


def test_weekday_codes() -> None:
    assert weekday_code(date(2025, 1, 6)) == "Mon"
    assert weekday_code(date(2025, 1, 11)) == "Sat"
    assert weekday_code(date(2025, 1, 12)) == "Sun"
