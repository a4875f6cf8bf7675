# tests/fakes.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class StoreCall:
    method: str
    table: str
    params: dict[str, Any]
    record_id: Any = None


class FakeRecordStore:
    """
    Scripted RecordStore used by adapter/board tests.

    - Captures calls for assertions
    - Returns the canned envelope for each method (or calls it, if callable)
    - Raises `error` instead, when set
    """

    def __init__(self, responses: dict[str, Any] | None = None, *, error: Exception | None = None) -> None:
        self.responses = dict(responses or {})
        self.error = error
        self.calls: list[StoreCall] = []
        self.closed = False

    async def _reply(self, method: str, table: str, params: dict[str, Any], record_id: Any = None) -> Any:
        self.calls.append(StoreCall(method=method, table=table, params=params, record_id=record_id))
        if self.error is not None:
            raise self.error
        resp = self.responses.get(method)
        if callable(resp):
            return resp(params)
        return resp

    async def fetch_records(self, table, params):
        return await self._reply("fetch_records", table, params)

    async def get_record_by_id(self, table, record_id, params):
        return await self._reply("get_record_by_id", table, params, record_id)

    async def create_record(self, table, params):
        return await self._reply("create_record", table, params)

    async def update_record(self, table, params):
        return await self._reply("update_record", table, params)

    async def delete_record(self, table, params):
        return await self._reply("delete_record", table, params)

    async def aclose(self) -> None:
        self.closed = True


class GatedRecordStore(FakeRecordStore):
    """Fake store whose create_record waits until `release` is set."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        super().__init__(responses)
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def create_record(self, table, params):
        self.entered.set()
        await self.release.wait()
        return await self._reply("create_record", table, params)


def ok_result(data: dict[str, Any]) -> dict[str, Any]:
    return {"success": True, "results": [{"success": True, "data": data}]}
