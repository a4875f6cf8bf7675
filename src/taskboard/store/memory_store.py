# src/taskboard/store/memory_store.py

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from ..core.ports import Envelope, QueryParams

logger = logging.getLogger(__name__)

# field name -> label used in field-level validation errors
FIELD_LABELS: dict[str, str] = {
    "title": "Title",
    "description": "Description",
    "priority": "Priority",
    "category": "Category",
    "due_date": "Due Date",
    "completed": "Completed",
}

PICKLISTS: dict[str, set[str]] = {
    "priority": {"high", "medium", "low"},
    "category": {"personal", "work", "health", "finance", "learning"},
}


def _norm(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value).strip().lower()


def _match_condition(record: Mapping[str, Any], cond: Mapping[str, Any]) -> bool:
    field_name = str(cond.get("fieldName") or "")
    operator = str(cond.get("operator") or "ExactMatch")
    values = list(cond.get("values") or [])
    current = record.get(field_name)

    if operator == "ExactMatch":
        return any(_norm(current) == _norm(v) for v in values)
    if operator == "Contains":
        hay = _norm(current)
        return any(_norm(v) in hay for v in values)
    if operator in ("LessThan", "GreaterThan"):
        if current is None or current == "":
            return False
        cur = str(current)
        if operator == "LessThan":
            return any(cur < str(v) for v in values)
        return any(cur > str(v) for v in values)

    logger.warning("Unsupported operator %s on field %s; condition ignored", operator, field_name)
    return True


def _match_group(record: Mapping[str, Any], group: Mapping[str, Any]) -> bool:
    op = str(group.get("operator") or "AND").upper()
    subgroups = group.get("subGroups") or []
    results = []
    for sub in subgroups:
        conds = sub.get("conditions") or []
        sub_op = str(sub.get("operator") or "AND").upper()
        hits = [_match_condition(record, c) for c in conds]
        results.append(any(hits) if sub_op == "OR" else all(hits))
    if not results:
        return True
    return any(results) if op == "OR" else all(results)


class InMemoryRecordStore:
    """
    Deterministic in-process record store.

    Used for the offline demo (no store URL configured) and in tests.
    Speaks the same envelope format as the hosted store:
    - where: list of conditions, all must match
    - whereGroups: list of groups; each group ORs/ANDs its subgroups
    - orderBy: [{"fieldName": ..., "SortType": "ASC"|"DESC"}]
    - pagingInfo: {"limit": n, "offset": k}
    Records without a title are rejected with a field-level error.
    """

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self._tables: dict[str, dict[int, dict[str, Any]]] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        for rec in records or []:
            self._insert("task1", dict(rec))

    async def aclose(self) -> None:
        return

    # ---- helpers ----

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def _table(self, name: str) -> dict[int, dict[str, Any]]:
        return self._tables.setdefault(name, {})

    def _insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        rec_id = record.get("Id")
        if rec_id is None:
            rec_id = self._next_id
        self._next_id = max(self._next_id, int(rec_id)) + 1
        now = self._now()
        stored = {**record, "Id": int(rec_id)}
        stored.setdefault("CreatedOn", now)
        stored.setdefault("ModifiedOn", now)
        self._table(table)[int(rec_id)] = stored
        return stored

    @staticmethod
    def _validate(record: Mapping[str, Any], *, partial: bool) -> list[dict[str, str]]:
        errors: list[dict[str, str]] = []
        if (not partial or "title" in record) and not str(record.get("title") or "").strip():
            errors.append({"fieldLabel": FIELD_LABELS["title"], "message": "is required"})
        for field_name, allowed in PICKLISTS.items():
            if field_name in record and str(record[field_name]) not in allowed:
                errors.append(
                    {"fieldLabel": FIELD_LABELS[field_name], "message": f"invalid value {record[field_name]!r}"}
                )
        return errors

    @staticmethod
    def _project(record: Mapping[str, Any], fields: list[str] | None) -> dict[str, Any]:
        if not fields:
            return copy.deepcopy(dict(record))
        return {f: copy.deepcopy(record.get(f)) for f in fields}

    # ---- RecordStore ----

    async def fetch_records(self, table: str, params: QueryParams) -> Envelope:
        with self._lock:
            rows = list(self._table(table).values())

        where = params.get("where") or []
        groups = params.get("whereGroups") or []
        rows = [
            r for r in rows
            if all(_match_condition(r, c) for c in where) and all(_match_group(r, g) for g in groups)
        ]

        # Apply sort keys in reverse so the first orderBy entry wins; empty values go last.
        for order in reversed(params.get("orderBy") or []):
            field_name = order.get("fieldName")
            desc = str(order.get("SortType") or "ASC").upper() == "DESC"
            present = [r for r in rows if r.get(field_name) not in (None, "")]
            missing = [r for r in rows if r.get(field_name) in (None, "")]
            present.sort(key=lambda r: str(r.get(field_name)), reverse=desc)
            rows = present + missing

        paging = params.get("pagingInfo") or {}
        offset = int(paging.get("offset") or 0)
        limit = paging.get("limit")
        rows = rows[offset:] if limit is None else rows[offset : offset + int(limit)]

        fields = params.get("fields")
        return {"success": True, "data": [self._project(r, fields) for r in rows]}

    async def get_record_by_id(self, table: str, record_id: Any, params: QueryParams) -> Envelope:
        try:
            rec_id = int(record_id)
        except (TypeError, ValueError):
            return {"success": True, "data": None}
        with self._lock:
            rec = self._table(table).get(rec_id)
        if rec is None:
            return {"success": True, "data": None}
        return {"success": True, "data": self._project(rec, params.get("fields"))}

    async def create_record(self, table: str, params: QueryParams) -> Envelope:
        results = []
        for record in params.get("records") or []:
            errors = self._validate(record, partial=False)
            if errors:
                results.append({"success": False, "errors": errors})
                continue
            with self._lock:
                stored = self._insert(table, {k: v for k, v in record.items() if k != "Id"})
            results.append({"success": True, "data": copy.deepcopy(stored)})
        return {"success": True, "results": results}

    async def update_record(self, table: str, params: QueryParams) -> Envelope:
        results = []
        for record in params.get("records") or []:
            errors = self._validate(record, partial=True)
            if errors:
                results.append({"success": False, "errors": errors})
                continue
            try:
                rec_id = int(record.get("Id"))
            except (TypeError, ValueError):
                results.append({"success": False, "message": "Record Id is required"})
                continue
            with self._lock:
                current = self._table(table).get(rec_id)
                if current is None:
                    results.append({"success": False, "message": f"Record {rec_id} does not exist"})
                    continue
                current.update(record)
                current["Id"] = rec_id
                current["ModifiedOn"] = self._now()
                results.append({"success": True, "data": copy.deepcopy(current)})
        return {"success": True, "results": results}

    async def delete_record(self, table: str, params: QueryParams) -> Envelope:
        results = []
        with self._lock:
            rows = self._table(table)
            for raw in params.get("RecordIds") or []:
                try:
                    rec_id = int(raw)
                except (TypeError, ValueError):
                    results.append({"success": False, "message": f"Invalid record id {raw!r}"})
                    continue
                if rows.pop(rec_id, None) is None:
                    results.append({"success": False, "message": f"Record {rec_id} does not exist"})
                else:
                    results.append({"success": True})
        return {"success": True, "results": results}
