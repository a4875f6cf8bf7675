# src/taskboard/core/board.py

from __future__ import annotations

"""
Task board: the owned task list plus the view state around it.

The board holds the single task list for the session and the three view
parameters (search text, filter mode, sort key). Reads go through the pure
query engine; writes go through the data adapter and the returned record is
reconciled into the list.

Known limitation: a refresh (load) and a mutation are not linked. If a
toggle/delete finishes while a refresh is still running, the refresh result
wins when it lands.
"""

import logging
from datetime import date
from typing import Any

from ..errors import RequestError, SubmissionInProgress, TaskServiceError, ValidationError
from ..tasks.task_adapter import TaskDataAdapter, from_backend_record
from ..tasks.task_models import FilterMode, SortKey, Task, TaskDraft, TaskStats
from ..tasks.task_query import compute_stats, filter_and_sort

logger = logging.getLogger(__name__)


class TaskBoard:
    def __init__(
        self,
        adapter: TaskDataAdapter,
        *,
        filter_mode: FilterMode | str = FilterMode.ALL,
        sort_key: SortKey | str = SortKey.DUE_DATE,
    ) -> None:
        self._adapter = adapter
        self.tasks: list[Task] = []

        self.query: str = ""
        self.filter_mode = FilterMode(filter_mode)
        self.sort_key = SortKey(sort_key)

        self.editing: Task | None = None
        self.loading = False
        self.load_error: str | None = None
        self._submitting = False

    @property
    def submitting(self) -> bool:
        return self._submitting

    # ---- view state ----

    def set_query(self, query: str) -> None:
        self.query = query

    def set_filter(self, mode: FilterMode | str) -> None:
        self.filter_mode = FilterMode(mode)

    def set_sort(self, sort_key: SortKey | str) -> None:
        self.sort_key = SortKey(sort_key)

    def visible(self, today: date | None = None) -> list[Task]:
        return filter_and_sort(self.tasks, self.query, self.filter_mode, self.sort_key, today=today)

    def stats(self, today: date | None = None) -> TaskStats:
        return compute_stats(self.tasks, today=today)

    def find(self, task_id: Any) -> Task | None:
        key = str(task_id)
        for t in self.tasks:
            if str(t.id) == key:
                return t
        return None

    def _require(self, task_id: Any) -> Task:
        task = self.find(task_id)
        if task is None:
            raise RequestError(f"Task {task_id} not found.")
        return task

    def _replace(self, task: Task) -> None:
        key = str(task.id)
        self.tasks = [task if str(t.id) == key else t for t in self.tasks]

    # ---- store-backed actions ----

    async def load(self) -> list[Task]:
        """
        Replace the list with the store's current contents.

        On failure the list is emptied (stale data is not kept) and the error
        message is kept in `load_error` so the UI can offer a retry.
        """
        self.loading = True
        try:
            records = await self._adapter.fetch()
        except TaskServiceError as e:
            self.tasks = []
            self.load_error = e.message
            logger.warning("Task list load failed: %s", e.message)
            raise
        finally:
            self.loading = False

        self.tasks = [from_backend_record(r) for r in records]
        self.load_error = None
        logger.info("Task list loaded: %d tasks", len(self.tasks))
        return self.tasks

    async def submit(self, draft: TaskDraft) -> Task:
        """
        Create a task, or update the one being edited.

        Rejects an empty title before any store call, and rejects a second
        submit while one is still in flight.
        """
        if not draft.title.strip():
            raise ValidationError("Task title is required!", field_errors=[("Title", "is required")])
        if self._submitting:
            raise SubmissionInProgress()

        self._submitting = True
        try:
            payload = draft.to_payload()
            editing = self.editing
            if editing is not None:
                payload["completed"] = editing.completed
                payload["createdAt"] = editing.created_at
                record = await self._adapter.update(editing.id, payload)
                task = from_backend_record(record)
                self._replace(task)
                self.editing = None
            else:
                payload["completed"] = False
                record = await self._adapter.create(payload)
                task = from_backend_record(record)
                self.tasks = [*self.tasks, task]
            return task
        finally:
            self._submitting = False

    async def toggle(self, task_id: Any) -> Task:
        current = self._require(task_id)
        record = await self._adapter.update(
            current.id,
            {"completed": not current.completed, "createdAt": current.created_at},
        )
        task = from_backend_record(record)
        self._replace(task)
        return task

    async def delete(self, task_id: Any) -> None:
        await self.delete_many([task_id])

    async def delete_many(self, task_ids: list[Any]) -> list[Task]:
        """
        Delete several tasks in one store call.

        Every id is resolved against the local list first, so an unknown id
        fails the whole command before anything is deleted.
        """
        doomed: list[Task] = []
        for task_id in task_ids:
            task = self._require(task_id)
            if all(str(t.id) != str(task.id) for t in doomed):
                doomed.append(task)
        await self._adapter.remove([t.id for t in doomed])
        keys = {str(t.id) for t in doomed}
        self.tasks = [t for t in self.tasks if str(t.id) not in keys]
        if self.editing is not None and str(self.editing.id) in keys:
            self.editing = None
        return doomed

    async def search_remote(self, query: str, filters: dict[str, Any] | None = None) -> list[Task]:
        """Server-side search; does not touch the local list."""
        return [from_backend_record(r) for r in await self._adapter.search(query, filters)]

    # ---- edit form ----

    def start_edit(self, task_id: Any) -> TaskDraft:
        task = self._require(task_id)
        self.editing = task
        return TaskDraft.from_task(task)

    def cancel_edit(self) -> None:
        self.editing = None
