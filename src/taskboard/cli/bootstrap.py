# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- picks the record store (HTTP when configured, in-memory otherwise),
- wires store -> adapter -> board into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.board import TaskBoard
from ..core.ports import RecordStore
from ..core.state import AppState
from ..store.http_store import HttpRecordStore, make_timeout
from ..store.memory_store import InMemoryRecordStore
from ..tasks.task_adapter import DEFAULT_TABLE, TaskDataAdapter
from ..tasks.task_models import FilterMode, SortKey

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def build_store(settings) -> tuple[RecordStore, bool]:
    """Return (store, offline)."""
    try:
        store = HttpRecordStore(
            getattr(settings, "store_url", None) or "",
            project_id=getattr(settings, "project_id", None),
            public_key=getattr(settings, "public_key", None),
            timeout=make_timeout(
                float(getattr(settings, "connect_timeout_seconds", 5.0)),
                float(getattr(settings, "read_timeout_seconds", 25.0)),
            ),
        )
        logger.info("Using record store at %s", settings.store_url)
        return store, False
    except RuntimeError as e:
        # Demo / local runs without the hosted store.
        logger.info("%s Falling back to the in-memory store.", e)
        return InMemoryRecordStore(), True


def _view_defaults(settings) -> tuple[FilterMode, SortKey]:
    try:
        mode = FilterMode(getattr(settings, "default_filter", "all"))
    except ValueError:
        logger.warning("Unknown default filter %r; using 'all'.", settings.default_filter)
        mode = FilterMode.ALL
    try:
        sort_key = SortKey(getattr(settings, "default_sort", "dueDate"))
    except ValueError:
        logger.warning("Unknown default sort %r; using 'dueDate'.", settings.default_sort)
        sort_key = SortKey.DUE_DATE
    return mode, sort_key


def create_initial_state(*, settings=None, store: RecordStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Both settings and store are injectable so tests can avoid env reads and
    network access. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    offline = False
    if store is None:
        store, offline = build_store(settings)

    adapter = TaskDataAdapter(store, table_name=getattr(settings, "table_name", DEFAULT_TABLE))
    mode, sort_key = _view_defaults(settings)

    return AppState(
        settings=settings,
        store=store,
        adapter=adapter,
        board=TaskBoard(adapter, filter_mode=mode, sort_key=sort_key),
        offline=offline,
    )


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.store.aclose()
    except Exception:
        logger.debug("Record store close failed.", exc_info=True)
