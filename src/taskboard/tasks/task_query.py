# src/taskboard/tasks/task_query.py

from __future__ import annotations

"""
In-memory query engine for the visible task list.

Everything here is pure: inputs are never mutated and the current date is an
explicit argument, so results only change when the inputs (or `today`) do.
"""

import unicodedata
from collections.abc import Iterable
from datetime import date

from .task_models import DueDateStatus, FilterMode, SortKey, Task, TaskStats


def _today(today: date | None) -> date:
    return date.today() if today is None else today


def matches_query(task: Task, query: str) -> bool:
    """
    Case-insensitive substring match on title or description.

    The query is used verbatim (no trimming): "  " only matches tasks that
    contain two spaces.
    """
    if not query:
        return True
    q = query.lower()
    return q in (task.title or "").lower() or q in (task.description or "").lower()


def is_overdue(task: Task, *, today: date | None = None) -> bool:
    return (not task.completed) and task.due_date is not None and task.due_date < _today(today)


def is_due_today(task: Task, *, today: date | None = None) -> bool:
    return task.due_date is not None and task.due_date == _today(today)


def _passes_filter(task: Task, mode: FilterMode, today: date) -> bool:
    if mode == FilterMode.COMPLETED:
        return task.completed
    if mode == FilterMode.PENDING:
        return not task.completed
    if mode == FilterMode.OVERDUE:
        return is_overdue(task, today=today)
    if mode == FilterMode.TODAY:
        return is_due_today(task, today=today)
    return True


def _title_key(title: str) -> tuple[str, str]:
    # Accent- and case-insensitive first, then the raw title to keep ties deterministic.
    folded = unicodedata.normalize("NFKD", title or "")
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch)).casefold()
    return folded, title or ""


def _sort(tasks: list[Task], sort_key: SortKey | str) -> list[Task]:
    # sorted() is stable, so equal keys keep their input order.
    if sort_key == SortKey.DUE_DATE:
        return sorted(tasks, key=lambda t: (t.due_date is None, t.due_date or date.min))
    if sort_key == SortKey.PRIORITY:
        return sorted(tasks, key=lambda t: t.priority.weight, reverse=True)
    if sort_key == SortKey.TITLE:
        return sorted(tasks, key=lambda t: _title_key(t.title))
    # created (also the fallback for unknown keys): newest first
    return sorted(tasks, key=lambda t: t.created_at.timestamp(), reverse=True)


def filter_and_sort(
    tasks: Iterable[Task],
    query: str = "",
    mode: FilterMode | str = FilterMode.ALL,
    sort_key: SortKey | str = SortKey.CREATED,
    *,
    today: date | None = None,
) -> list[Task]:
    """
    Return the ordered subset of `tasks` to display.

    Search is applied first, then the filter mode, then the sort.
    """
    day = _today(today)
    try:
        mode = FilterMode(mode)
    except ValueError:
        mode = FilterMode.ALL

    selected = [t for t in tasks if matches_query(t, query) and _passes_filter(t, mode, day)]
    return _sort(selected, sort_key)


def compute_stats(tasks: Iterable[Task], *, today: date | None = None) -> TaskStats:
    day = _today(today)
    items = list(tasks)
    total = len(items)
    completed = sum(1 for t in items if t.completed)
    overdue = sum(1 for t in items if is_overdue(t, today=day))
    return TaskStats(total=total, completed=completed, pending=total - completed, overdue=overdue)


def due_date_status(due_date: date | None, *, today: date | None = None) -> DueDateStatus:
    if due_date is None:
        return DueDateStatus.NONE
    day = _today(today)
    if due_date == day:
        return DueDateStatus.TODAY
    if due_date < day:
        return DueDateStatus.OVERDUE
    return DueDateStatus.UPCOMING
