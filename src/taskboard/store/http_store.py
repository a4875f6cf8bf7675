# src/taskboard/store/http_store.py

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..core.ports import Envelope, QueryParams
from ..errors import NetworkError, ProtocolError

logger = logging.getLogger(__name__)


def make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


class HttpRecordStore:
    """
    Record store client over HTTP.

    Each operation is a JSON POST to {base_url}/tables/{table}/{operation};
    the response body is the store envelope and is returned unchanged.
    Error statuses that still carry a JSON envelope are returned as-is so the
    adapter can categorize them; transport failures raise NetworkError.

    No retries here: the adapter and the UI decide what to do with failures.
    """

    def __init__(
        self,
        base_url: str,
        *,
        project_id: str | None = None,
        public_key: str | None = None,
        timeout: httpx.Timeout | float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise RuntimeError("Record store base URL is not set. Set TASKBOARD_STORE_URL in your .env.")

        headers = {"Accept": "application/json"}
        if project_id:
            headers["X-Project-Id"] = project_id
        if public_key:
            headers["Authorization"] = f"Bearer {public_key}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout if timeout is not None else make_timeout(5.0, 25.0),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, table: str, operation: str, payload: dict[str, Any]) -> Envelope:
        path = f"/tables/{table}/{operation}"
        try:
            response = await self._client.post(path, json=payload)
        except httpx.TimeoutException as e:
            logger.info("Record store timeout op=%s table=%s", operation, table)
            raise NetworkError("The task service did not respond in time. Please try again.") from e
        except httpx.RequestError as e:
            logger.info("Record store network error op=%s table=%s: %s", operation, table, e)
            raise NetworkError() from e

        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(
                "Record store returned non-JSON op=%s status=%s", operation, response.status_code
            )
            raise ProtocolError() from e

        if response.is_error:
            logger.info("Record store HTTP %s op=%s table=%s", response.status_code, operation, table)
            if not isinstance(body, dict):
                raise ProtocolError()
            body.setdefault("success", False)

        return body

    async def fetch_records(self, table: str, params: QueryParams) -> Envelope:
        return await self._post(table, "fetchRecords", params)

    async def get_record_by_id(self, table: str, record_id: Any, params: QueryParams) -> Envelope:
        return await self._post(table, "getRecordById", {"recordId": record_id, **params})

    async def create_record(self, table: str, params: QueryParams) -> Envelope:
        return await self._post(table, "createRecord", params)

    async def update_record(self, table: str, params: QueryParams) -> Envelope:
        return await self._post(table, "updateRecord", params)

    async def delete_record(self, table: str, params: QueryParams) -> Envelope:
        return await self._post(table, "deleteRecord", params)
