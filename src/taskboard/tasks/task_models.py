# src/taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]

    @classmethod
    def from_db(cls, raw: Any) -> Priority:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


_PRIORITY_WEIGHTS = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


class Category(StrEnum):
    PERSONAL = "personal"
    WORK = "work"
    HEALTH = "health"
    FINANCE = "finance"
    LEARNING = "learning"

    @classmethod
    def from_db(cls, raw: Any) -> Category:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.PERSONAL


class FilterMode(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"
    OVERDUE = "overdue"
    TODAY = "today"


class SortKey(StrEnum):
    """
    Ordering for the visible list.

    Values match the keys the web client used, so settings and commands can
    pass them straight through ("dueDate", not "due_date").
    """

    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    TITLE = "title"
    CREATED = "created"


class DueDateStatus(StrEnum):
    NONE = "none"
    TODAY = "today"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"


@dataclass(slots=True)
class Task:
    id: int | str | None
    title: str
    created_at: datetime
    updated_at: datetime

    description: str = ""
    priority: Priority = Priority.MEDIUM
    category: Category = Category.PERSONAL
    due_date: date | None = None
    completed: bool = False

    tags: list[str] = field(default_factory=list)
    name: str | None = None
    owner: Any = None

    def to_payload(self) -> dict[str, Any]:
        """UI-shaped payload (camel-case keys) understood by the adapter."""
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "category": self.category,
            "dueDate": self.due_date,
            "completed": self.completed,
            "createdAt": self.created_at,
            "tags": list(self.tags),
            "Name": self.name,
            "Owner": self.owner,
        }


@dataclass(slots=True)
class TaskDraft:
    """
    Form state for creating or editing a task.

    Defaults mirror an empty "new task" form.
    """

    title: str = ""
    description: str = ""
    priority: Priority = Priority.MEDIUM
    category: Category = Category.PERSONAL
    due_date: date | None = None
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_task(cls, task: Task) -> TaskDraft:
        return cls(
            title=task.title,
            description=task.description,
            priority=task.priority,
            category=task.category,
            due_date=task.due_date,
            tags=list(task.tags),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title.strip(),
            "description": self.description,
            "priority": self.priority,
            "category": self.category,
            "dueDate": self.due_date,
            "tags": list(self.tags),
        }


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0
