# src/taskboard/tasks/task_adapter.py

from __future__ import annotations

"""
Task data adapter.

Translates between the UI task shape (camel-case keys, date/datetime values)
and the record store shape (snake-case fields, date strings, picklist
strings), and performs CRUD + search calls against an injected RecordStore.

Every public coroutine either returns data or raises exactly one
TaskServiceError subclass. No retries: callers decide whether to offer one.
"""

import logging
from collections.abc import Awaitable, Iterable, Mapping
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Literal

from ..core.ports import Envelope, QueryParams, RecordStore
from ..errors import (
    NetworkError,
    ProtocolError,
    RequestError,
    TaskServiceError,
    ValidationError,
)
from .task_models import Category, FilterMode, Priority, Task

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "task1"

ALL_FIELDS: list[str] = [
    "Id",
    "Name",
    "Tags",
    "Owner",
    "CreatedOn",
    "CreatedBy",
    "ModifiedOn",
    "ModifiedBy",
    "title",
    "description",
    "priority",
    "due_date",
    "category",
    "completed",
    "created_at",
    "updated_at",
]

UPDATEABLE_FIELDS: list[str] = [
    "Name",
    "Tags",
    "Owner",
    "title",
    "description",
    "priority",
    "due_date",
    "category",
    "completed",
    "created_at",
    "updated_at",
]

# backend field -> UI keys to read it from (first present wins)
_UI_KEYS: dict[str, tuple[str, ...]] = {
    "Name": ("name", "Name"),
    "Tags": ("tags", "Tags"),
    "Owner": ("owner", "Owner"),
    "title": ("title",),
    "description": ("description",),
    "priority": ("priority",),
    "due_date": ("dueDate", "due_date"),
    "category": ("category",),
    "completed": ("completed",),
    "created_at": ("createdAt", "created_at"),
}

Operation = Literal["create", "update"]


# ---- value formatting ----


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_datetime(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return _as_utc(raw)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day, tzinfo=timezone.utc)
    if isinstance(raw, (int, float)):
        # epoch milliseconds
        return datetime.fromtimestamp(float(raw) / 1000.0, tz=timezone.utc)
    try:
        return _as_utc(datetime.fromisoformat(str(raw).strip()))
    except ValueError:
        return None


def _parse_date(raw: Any) -> date | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return _as_utc(raw).date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    dt = _parse_datetime(s)
    return dt.date() if dt is not None else None


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(raw)


def format_date(value: Any) -> str:
    """Date-only string (YYYY-MM-DD); time of day is dropped."""
    d = _parse_date(value)
    if d is None:
        raise ValidationError(field_errors=[("Due Date", f"invalid date {value!r}")])
    return d.isoformat()


def format_timestamp(value: Any) -> str:
    dt = _parse_datetime(value)
    if dt is None:
        raise ValidationError(field_errors=[("Timestamp", f"invalid timestamp {value!r}")])
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _format_field_value(field_name: str, value: Any) -> Any:
    if field_name == "due_date":
        return format_date(value)
    if field_name in ("created_at", "updated_at"):
        return format_timestamp(value)
    if field_name == "completed":
        return _parse_bool(value)
    if field_name in ("priority", "category"):
        return value.value if isinstance(value, Enum) else str(value)
    if field_name == "Tags":
        if isinstance(value, (list, tuple, set, frozenset)):
            return ",".join(str(v) for v in value)
        return str(value)
    if field_name == "Owner" and isinstance(value, Mapping):
        # lookup fields come back as {"Id": ..., "Name": ...}; write the id
        return value.get("Id")
    return str(value)


def _pick(ui_task: Mapping[str, Any], field_name: str) -> Any:
    for key in _UI_KEYS.get(field_name, (field_name,)):
        if key in ui_task:
            return ui_task[key]
    return None


def to_backend_record(
    ui_task: Mapping[str, Any],
    *,
    operation: Operation = "create",
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Shape a UI task payload into a writable backend record.

    Only writable fields are emitted. Fields whose source value is missing,
    None or "" are left out, so a partial payload produces a partial record.
    `updated_at` is always `now`; `created_at` falls back to `now` only on
    create, never on update (the stored creation time must not move).
    """
    stamp = _utcnow() if now is None else now
    record: dict[str, Any] = {}

    for field_name in UPDATEABLE_FIELDS:
        if field_name == "updated_at":
            record[field_name] = format_timestamp(stamp)
            continue

        value = _pick(ui_task, field_name)
        if field_name == "created_at" and _is_blank(value) and operation == "create":
            value = stamp

        if _is_blank(value):
            continue
        record[field_name] = _format_field_value(field_name, value)

    return record


def _split_tags(raw: Any) -> list[str]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, (list, tuple)):
        return [str(t).strip() for t in raw if str(t).strip()]
    return [t.strip() for t in str(raw).split(",") if t.strip()]


def from_backend_record(record: Mapping[str, Any]) -> Task:
    """Inverse of to_backend_record: backend record -> Task."""
    created_at = _parse_datetime(record.get("created_at")) or _parse_datetime(record.get("CreatedOn"))
    if created_at is None:
        created_at = _utcnow()
    updated_at = (
        _parse_datetime(record.get("updated_at"))
        or _parse_datetime(record.get("ModifiedOn"))
        or created_at
    )

    title = record.get("title")
    if title is None or title == "":
        title = record.get("Name") or ""

    return Task(
        id=record.get("Id"),
        title=str(title),
        description=str(record.get("description") or ""),
        priority=Priority.from_db(record.get("priority")),
        category=Category.from_db(record.get("category")),
        due_date=_parse_date(record.get("due_date")),
        completed=_parse_bool(record.get("completed")),
        created_at=created_at,
        updated_at=updated_at,
        tags=_split_tags(record.get("Tags")),
        name=record.get("Name"),
        owner=record.get("Owner"),
    )


def _condition(field_name: str, operator: str, values: list[Any]) -> dict[str, Any]:
    return {"fieldName": field_name, "operator": operator, "values": values}


def _require_title(ui_task: Mapping[str, Any], *, required: bool) -> None:
    if not required and "title" not in ui_task:
        return
    title = ui_task.get("title")
    if title is None or not str(title).strip():
        raise ValidationError("Task title is required!", field_errors=[("Title", "is required")])


class TaskDataAdapter:
    """
    CRUD + search for tasks on a hosted record store.

    The store client is injected, so tests can pass a fake and the CLI can
    pass either the HTTP client or the in-memory store.
    """

    def __init__(self, store: RecordStore, *, table_name: str = DEFAULT_TABLE) -> None:
        self._store = store
        self._table = table_name

    @property
    def table_name(self) -> str:
        return self._table

    # ---- envelope helpers ----

    async def _send(self, action: str, call: Awaitable[Envelope]) -> Any:
        try:
            return await call
        except TaskServiceError:
            raise
        except Exception as e:
            logger.exception("Record store call failed action=%s table=%s", action, self._table)
            raise NetworkError(f"Failed to {action}. Please try again.") from e

    @staticmethod
    def _message(obj: Mapping[str, Any]) -> str | None:
        msg = obj.get("message")
        return str(msg) if msg else None

    def _single_result(self, response: Any, *, action: str) -> dict[str, Any]:
        if not isinstance(response, Mapping) or "success" not in response:
            raise ProtocolError()
        if not response.get("success"):
            raise RequestError(self._message(response) or f"Failed to {action}")

        results = response.get("results")
        if not isinstance(results, list) or not results or not isinstance(results[0], Mapping):
            raise ProtocolError()

        result = results[0]
        if result.get("success"):
            data = result.get("data")
            if not isinstance(data, Mapping):
                raise ProtocolError()
            return dict(data)

        errors = result.get("errors") or []
        if isinstance(errors, list) and errors:
            field_errors = [
                (
                    str(err.get("fieldLabel") or err.get("fieldName") or "Field"),
                    str(err.get("message") or "is invalid"),
                )
                for err in errors
                if isinstance(err, Mapping)
            ]
            raise ValidationError(field_errors=field_errors)

        raise RequestError(self._message(result) or f"Failed to {action}")

    # ---- public API ----

    def to_backend_record(
        self, ui_task: Mapping[str, Any], *, operation: Operation = "create", now: datetime | None = None
    ) -> dict[str, Any]:
        return to_backend_record(ui_task, operation=operation, now=now)

    async def fetch(self, params: QueryParams | None = None) -> list[dict[str, Any]]:
        """
        Fetch records. `params` may carry where / whereGroups / orderBy / pagingInfo.

        A missing or empty data set is an empty list, not an error.
        """
        params = params or {}
        query: QueryParams = {"fields": list(ALL_FIELDS)}
        for key in ("where", "whereGroups", "orderBy", "pagingInfo"):
            if params.get(key):
                query[key] = params[key]

        try:
            response = await self._send("fetch tasks", self._store.fetch_records(self._table, query))

            if response is None:
                return []
            if not isinstance(response, Mapping):
                raise ProtocolError()
            if response.get("success") is False:
                raise RequestError(self._message(response) or "Failed to fetch tasks. Please try again.")

            data = response.get("data")
            if not data:
                return []
            if not isinstance(data, list):
                raise ProtocolError()
            return [dict(r) for r in data if isinstance(r, Mapping)]
        except TaskServiceError as e:
            logger.warning("Error fetching tasks: %s", e)
            raise

    async def get(self, task_id: Any) -> dict[str, Any] | None:
        try:
            response = await self._send(
                "fetch task",
                self._store.get_record_by_id(self._table, task_id, {"fields": list(ALL_FIELDS)}),
            )
            if response is None:
                return None
            if not isinstance(response, Mapping):
                raise ProtocolError()
            data = response.get("data")
            if not data:
                return None
            if not isinstance(data, Mapping):
                raise ProtocolError()
            return dict(data)
        except TaskServiceError as e:
            logger.warning("Error fetching task id=%s: %s", task_id, e)
            raise

    async def create(self, ui_task: Mapping[str, Any]) -> dict[str, Any]:
        try:
            _require_title(ui_task, required=True)
            record = to_backend_record(ui_task, operation="create")
            response = await self._send(
                "create task", self._store.create_record(self._table, {"records": [record]})
            )
            data = self._single_result(response, action="create task")
            logger.info("Task created id=%s", data.get("Id"))
            return data
        except TaskServiceError as e:
            logger.warning("Error creating task: %s", e)
            raise

    async def update(self, task_id: Any, ui_task: Mapping[str, Any]) -> dict[str, Any]:
        try:
            _require_title(ui_task, required=False)
            record = to_backend_record(ui_task, operation="update")
            record["Id"] = task_id
            response = await self._send(
                "update task", self._store.update_record(self._table, {"records": [record]})
            )
            data = self._single_result(response, action="update task")
            logger.info("Task updated id=%s", task_id)
            return data
        except TaskServiceError as e:
            logger.warning("Error updating task id=%s: %s", task_id, e)
            raise

    async def remove(self, ids: Any) -> bool:
        """Delete one id or a collection of ids in a single store call."""
        record_ids = normalize_ids(ids)

        try:
            if not record_ids:
                raise RequestError("No tasks selected for deletion.")

            response = await self._send(
                "delete tasks", self._store.delete_record(self._table, {"RecordIds": record_ids})
            )
            if not isinstance(response, Mapping):
                raise ProtocolError()
            if not response.get("success"):
                raise RequestError(self._message(response) or "Failed to delete tasks")

            results = response.get("results")
            if isinstance(results, list):
                failed = [r for r in results if isinstance(r, Mapping) and not r.get("success")]
                if failed:
                    msgs = [self._message(r) or "Failed to delete task" for r in failed]
                    raise RequestError(", ".join(msgs))

            logger.info("Tasks deleted ids=%s", record_ids)
            return True
        except TaskServiceError as e:
            logger.warning("Error deleting tasks ids=%s: %s", record_ids, e)
            raise

    async def search(self, query: str | None, filters: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """
        Server-side search: title OR description contains the (trimmed) query,
        AND any of priority / category / completed given in `filters`.

        The OR group is only used when there is a query and at least one
        filter; otherwise every condition goes into one flat `where` list.
        """
        filters = filters or {}
        text = (query or "").strip()
        conditions: list[dict[str, Any]] = []

        if text:
            conditions.append(_condition("title", "Contains", [text]))
            conditions.append(_condition("description", "Contains", [text]))

        priority = filters.get("priority")
        if priority:
            conditions.append(_condition("priority", "ExactMatch", [_format_field_value("priority", priority)]))

        category = filters.get("category")
        if category:
            conditions.append(_condition("category", "ExactMatch", [_format_field_value("category", category)]))

        completed = filters.get("completed")
        if completed is not None:
            conditions.append(_condition("completed", "ExactMatch", ["true" if completed else "false"]))

        params: QueryParams = {"orderBy": [{"fieldName": "created_at", "SortType": "DESC"}]}

        if conditions:
            if text and len(conditions) > 2:
                params["whereGroups"] = [
                    {
                        "operator": "OR",
                        "subGroups": [
                            {"conditions": [conditions[0]], "operator": ""},
                            {"conditions": [conditions[1]], "operator": ""},
                        ],
                    }
                ]
                params["where"] = conditions[2:]
            else:
                params["where"] = conditions

        return await self.fetch(params)

    async def fetch_by_filter(
        self,
        mode: FilterMode | str,
        *,
        today: date | None = None,
        extra: QueryParams | None = None,
    ) -> list[dict[str, Any]]:
        """Server-side counterpart of the list filter modes, ordered by due date."""
        day = (today or date.today()).isoformat()
        conditions: list[dict[str, Any]] = []

        if mode == FilterMode.COMPLETED:
            conditions.append(_condition("completed", "ExactMatch", [True]))
        elif mode == FilterMode.PENDING:
            conditions.append(_condition("completed", "ExactMatch", [False]))
        elif mode == FilterMode.OVERDUE:
            conditions.append(_condition("completed", "ExactMatch", [False]))
            conditions.append(_condition("due_date", "LessThan", [day]))
        elif mode == FilterMode.TODAY:
            conditions.append(_condition("due_date", "ExactMatch", [day]))

        params: QueryParams = {
            "where": conditions,
            "orderBy": [{"fieldName": "due_date", "SortType": "ASC"}],
        }
        params.update(extra or {})
        return await self.fetch(params)


def normalize_ids(ids: Any) -> list[Any]:
    if isinstance(ids, (str, int)):
        return [ids]
    if isinstance(ids, Iterable):
        return list(ids)
    return [ids]
