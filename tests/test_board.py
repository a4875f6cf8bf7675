# tests/test_board.py

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from taskboard.core.board import TaskBoard
from taskboard.errors import RequestError, SubmissionInProgress, ValidationError
from taskboard.store.memory_store import InMemoryRecordStore
from taskboard.tasks.task_adapter import TaskDataAdapter
from taskboard.tasks.task_models import FilterMode, Priority, SortKey, TaskDraft

from .conftest import TODAY
from .fakes import FakeRecordStore, GatedRecordStore, ok_result


@pytest.fixture()
def board(memory_store: InMemoryRecordStore) -> TaskBoard:
    return TaskBoard(TaskDataAdapter(memory_store))


@pytest.mark.asyncio
async def test_submit_creates_and_load_reads_back(board: TaskBoard, memory_store) -> None:
    task = await board.submit(TaskDraft(title="  Buy milk ", priority=Priority.HIGH, due_date=TODAY))

    assert task.id == 1
    assert task.title == "Buy milk"
    assert task.completed is False
    assert [t.id for t in board.tasks] == [1]

    fresh = TaskBoard(TaskDataAdapter(memory_store))
    loaded = await fresh.load()
    assert [(t.title, t.priority, t.due_date) for t in loaded] == [("Buy milk", Priority.HIGH, TODAY)]


@pytest.mark.asyncio
async def test_blank_title_is_rejected_before_store_call() -> None:
    store = FakeRecordStore()
    board = TaskBoard(TaskDataAdapter(store))

    with pytest.raises(ValidationError):
        await board.submit(TaskDraft(title="   "))

    assert store.calls == []
    assert board.submitting is False


@pytest.mark.asyncio
async def test_edit_preserves_completed_and_created_at(board: TaskBoard) -> None:
    created = await board.submit(TaskDraft(title="Pay rent"))
    toggled = await board.toggle(created.id)
    assert toggled.completed is True

    draft = board.start_edit(created.id)
    draft.title = "Pay rent (October)"
    edited = await board.submit(draft)

    assert edited.title == "Pay rent (October)"
    assert edited.completed is True
    assert edited.created_at == created.created_at
    assert board.editing is None
    assert len(board.tasks) == 1


@pytest.mark.asyncio
async def test_toggle_twice_and_delete(board: TaskBoard) -> None:
    t = await board.submit(TaskDraft(title="Read book"))

    assert (await board.toggle(t.id)).completed is True
    assert (await board.toggle(str(t.id))).completed is False

    await board.delete(t.id)
    assert board.tasks == []

    with pytest.raises(RequestError):
        await board.delete(t.id)


@pytest.mark.asyncio
async def test_load_failure_clears_list_and_keeps_message() -> None:
    store = FakeRecordStore({"fetch_records": {"success": False, "message": "Service unavailable"}})
    board = TaskBoard(TaskDataAdapter(store))
    board.tasks = [object()]  # type: ignore[list-item]

    with pytest.raises(RequestError):
        await board.load()

    assert board.tasks == []
    assert board.load_error == "Service unavailable"
    assert board.loading is False

    store.responses["fetch_records"] = {"success": True, "data": [{"Id": 1, "title": "back"}]}
    await board.load()
    assert board.load_error is None
    assert [t.title for t in board.tasks] == ["back"]


@pytest.mark.asyncio
async def test_overlapping_submit_is_rejected() -> None:
    store = GatedRecordStore({"create_record": ok_result({"Id": 1, "title": "first"})})
    board = TaskBoard(TaskDataAdapter(store))

    first = asyncio.create_task(board.submit(TaskDraft(title="first")))
    await store.entered.wait()

    with pytest.raises(SubmissionInProgress):
        await board.submit(TaskDraft(title="second"))

    store.release.set()
    task = await first
    assert task.title == "first"
    assert board.submitting is False
    assert len(store.calls) == 1


@pytest.mark.asyncio
async def test_view_state_feeds_query_engine(board: TaskBoard) -> None:
    await board.submit(TaskDraft(title="Buy milk", due_date=TODAY - timedelta(days=1)))
    await board.submit(TaskDraft(title="Pay rent", due_date=TODAY))
    done = await board.submit(TaskDraft(title="Read book"))
    await board.toggle(done.id)

    board.set_filter(FilterMode.OVERDUE)
    assert [t.title for t in board.visible(today=TODAY)] == ["Buy milk"]

    board.set_filter("all")
    board.set_sort(SortKey.DUE_DATE)
    board.set_query("r")
    assert [t.title for t in board.visible(today=TODAY)] == ["Pay rent", "Read book"]

    s = board.stats(today=TODAY)
    assert (s.total, s.completed, s.pending, s.overdue) == (3, 1, 2, 1)

    with pytest.raises(ValueError):
        board.set_filter("bogus")


@pytest.mark.asyncio
async def test_delete_many_is_one_call_and_all_or_nothing() -> None:
    store = FakeRecordStore()
    store.responses["fetch_records"] = {
        "success": True,
        "data": [{"Id": 1, "title": "A"}, {"Id": 2, "title": "B"}, {"Id": 3, "title": "C"}],
    }
    store.responses["delete_record"] = {"success": True}
    board = TaskBoard(TaskDataAdapter(store))
    await board.load()
    board.start_edit(3)

    with pytest.raises(RequestError) as exc:
        await board.delete_many([1, 99])
    assert exc.value.message == "Task 99 not found."
    assert [c.method for c in store.calls] == ["fetch_records"]
    assert [t.id for t in board.tasks] == [1, 2, 3]

    deleted = await board.delete_many(["1", 3, 1])
    assert [t.id for t in deleted] == [1, 3]
    assert store.calls[-1].params == {"RecordIds": [1, 3]}
    assert [t.id for t in board.tasks] == [2]
    assert board.editing is None
