# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The adapter depends on a Protocol instead of a concrete store client.
This keeps the HTTP client swappable (in-memory store, test doubles).
"""

from typing import Any, Protocol

Envelope = dict[str, Any]
# Store response: {"success": bool, "data"?: ..., "message"?: str, "results"?: [...]}.

QueryParams = dict[str, Any]
# Store query/payload: {"fields": [...], "where": [...], "whereGroups": [...], "orderBy": [...], ...}.


class RecordStore(Protocol):
    """Hosted record store (one table per entity, envelope responses)."""

    async def fetch_records(self, table: str, params: QueryParams) -> Envelope: ...

    async def get_record_by_id(self, table: str, record_id: Any, params: QueryParams) -> Envelope: ...

    async def create_record(self, table: str, params: QueryParams) -> Envelope: ...

    async def update_record(self, table: str, params: QueryParams) -> Envelope: ...

    async def delete_record(self, table: str, params: QueryParams) -> Envelope: ...

    async def aclose(self) -> None: ...
