# tests/test_task_query.py

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from taskboard.tasks.task_models import DueDateStatus, FilterMode, Priority, SortKey, Task
from taskboard.tasks.task_query import compute_stats, due_date_status, filter_and_sort, matches_query

from .conftest import TODAY

BASE = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


def make_task(
    task_id: int,
    title: str,
    *,
    description: str = "",
    completed: bool = False,
    due: date | None = None,
    priority: Priority = Priority.MEDIUM,
    created_offset_min: int = 0,
) -> Task:
    created = BASE + timedelta(minutes=created_offset_min)
    return Task(
        id=task_id,
        title=title,
        description=description,
        completed=completed,
        due_date=due,
        priority=priority,
        created_at=created,
        updated_at=created,
    )


@pytest.fixture()
def scenario() -> list[Task]:
    return [
        make_task(1, "Buy milk", due=TODAY - timedelta(days=1)),
        make_task(2, "Pay rent", due=TODAY),
        make_task(3, "Read book", completed=True),
    ]


def test_overdue_and_today_filters(scenario) -> None:
    overdue = filter_and_sort(scenario, "", FilterMode.OVERDUE, SortKey.CREATED, today=TODAY)
    assert [t.title for t in overdue] == ["Buy milk"]

    due_today = filter_and_sort(scenario, "", FilterMode.TODAY, SortKey.CREATED, today=TODAY)
    assert [t.title for t in due_today] == ["Pay rent"]


def test_stats_for_scenario(scenario) -> None:
    s = compute_stats(scenario, today=TODAY)
    assert (s.total, s.completed, s.pending, s.overdue) == (3, 1, 2, 1)


def test_completed_and_pending_filters(scenario) -> None:
    done = filter_and_sort(scenario, "", FilterMode.COMPLETED, today=TODAY)
    pending = filter_and_sort(scenario, "", FilterMode.PENDING, today=TODAY)
    assert [t.id for t in done] == [3]
    assert {t.id for t in pending} == {1, 2}


def test_today_filter_ignores_completion() -> None:
    tasks = [make_task(1, "Done today", completed=True, due=TODAY)]
    assert len(filter_and_sort(tasks, "", FilterMode.TODAY, today=TODAY)) == 1
    assert filter_and_sort(tasks, "", FilterMode.OVERDUE, today=TODAY) == []


def test_search_matches_title_or_description_case_insensitive() -> None:
    tasks = [
        make_task(1, "Groceries", description="Buy MILK and eggs"),
        make_task(2, "Milkshake recipe"),
        make_task(3, "Taxes"),
    ]
    hits = filter_and_sort(tasks, "milk", FilterMode.ALL, SortKey.TITLE, today=TODAY)
    assert [t.id for t in hits] == [1, 2]
    assert matches_query(tasks[2], "")


def test_whitespace_query_is_not_trimmed() -> None:
    tasks = [make_task(1, "a b"), make_task(2, "ab")]
    hits = filter_and_sort(tasks, " ", FilterMode.ALL, today=TODAY)
    assert [t.id for t in hits] == [1]


def test_due_date_sort_puts_undated_last_and_is_stable() -> None:
    tasks = [
        make_task(1, "no date A"),
        make_task(2, "later", due=TODAY + timedelta(days=3)),
        make_task(3, "no date B"),
        make_task(4, "sooner", due=TODAY - timedelta(days=2)),
        make_task(5, "sooner twin", due=TODAY - timedelta(days=2)),
    ]
    ordered = filter_and_sort(tasks, "", FilterMode.ALL, SortKey.DUE_DATE, today=TODAY)
    assert [t.id for t in ordered] == [4, 5, 2, 1, 3]


def test_priority_sort_descending_by_weight() -> None:
    tasks = [
        make_task(1, "l1", priority=Priority.LOW),
        make_task(2, "h1", priority=Priority.HIGH),
        make_task(3, "m1", priority=Priority.MEDIUM),
        make_task(4, "h2", priority=Priority.HIGH),
    ]
    ordered = filter_and_sort(tasks, "", FilterMode.ALL, SortKey.PRIORITY, today=TODAY)
    assert [t.id for t in ordered] == [2, 4, 3, 1]


def test_title_sort_ignores_case_and_accents() -> None:
    tasks = [make_task(1, "banana"), make_task(2, "Éclair"), make_task(3, "Apple"), make_task(4, "cherry")]
    ordered = filter_and_sort(tasks, "", FilterMode.ALL, SortKey.TITLE, today=TODAY)
    assert [t.title for t in ordered] == ["Apple", "banana", "cherry", "Éclair"]


def test_created_sort_is_newest_first_and_default_for_unknown_keys() -> None:
    tasks = [
        make_task(1, "old", created_offset_min=0),
        make_task(2, "new", created_offset_min=10),
        make_task(3, "mid", created_offset_min=5),
    ]
    assert [t.id for t in filter_and_sort(tasks, "", FilterMode.ALL, SortKey.CREATED, today=TODAY)] == [2, 3, 1]
    assert [t.id for t in filter_and_sort(tasks, "", FilterMode.ALL, "bogus", today=TODAY)] == [2, 3, 1]


def test_filter_and_sort_returns_subset_without_mutating_input(scenario) -> None:
    before = list(scenario)
    for mode in FilterMode:
        for key in SortKey:
            out = filter_and_sort(scenario, "", mode, key, today=TODAY)
            assert len({id(t) for t in out}) == len(out)
            assert all(any(t is s for s in scenario) for t in out)
    assert scenario == before
    assert [t.id for t in scenario] == [1, 2, 3]


def test_empty_input() -> None:
    assert filter_and_sort([], "x", FilterMode.OVERDUE, SortKey.DUE_DATE, today=TODAY) == []
    s = compute_stats([], today=TODAY)
    assert (s.total, s.completed, s.pending, s.overdue) == (0, 0, 0, 0)


def test_due_date_status() -> None:
    assert due_date_status(None, today=TODAY) == DueDateStatus.NONE
    assert due_date_status(TODAY, today=TODAY) == DueDateStatus.TODAY
    assert due_date_status(TODAY - timedelta(days=1), today=TODAY) == DueDateStatus.OVERDUE
    assert due_date_status(TODAY + timedelta(days=1), today=TODAY) == DueDateStatus.UPCOMING
