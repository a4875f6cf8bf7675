# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..tasks.task_adapter import TaskDataAdapter
from ..tasks.task_models import TaskDraft
from .board import TaskBoard
from .ports import RecordStore


@dataclass
class AppState:
    # Settings (or a SimpleNamespace in tests) for easy access in other modules.
    settings: object

    store: RecordStore
    adapter: TaskDataAdapter
    board: TaskBoard

    # Edit form contents for the console (/edit fills it, /save submits it).
    draft: TaskDraft = field(default_factory=TaskDraft)
    offline: bool = False
