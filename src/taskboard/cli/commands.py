# src/taskboard/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Awaitable, Callable
from datetime import date, timedelta

from ..core.state import AppState
from ..errors import TaskServiceError
from ..tasks.task_models import Category, FilterMode, Priority, SortKey, Task, TaskDraft
from ..tasks.task_query import due_date_status

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]

logger = logging.getLogger(__name__)

DRAFT_FIELDS = ("priority", "category", "due", "desc", "tags", "title")


class CommandRegistry:
    """Slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Task errors are turned into a reply; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return await handler(state, args, emit)
        except TaskServiceError as e:
            return f"Error: {e.message}"
        except ValueError as e:
            return f"Invalid input: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing / rendering helpers ----


def parse_due(raw: str, *, today: date | None = None) -> date | None:
    day = today or date.today()
    s = raw.strip().lower()
    if s in ("", "none", "-"):
        return None
    if s == "today":
        return day
    if s == "tomorrow":
        return day + timedelta(days=1)
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise ValueError(f"due date must be YYYY-MM-DD, 'today' or 'tomorrow' (got {raw!r})") from None


def _parse_enum(enum_cls, raw: str, label: str):
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValueError(f"unknown {label} {raw!r} (expected one of: {allowed})") from None


def split_fields(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Separate free words from key=value pairs (only known keys count as pairs)."""
    words: list[str] = []
    fields: dict[str, str] = {}
    for tok in args:
        key, sep, value = tok.partition("=")
        if sep and key.lower() in DRAFT_FIELDS:
            fields[key.lower()] = value
        else:
            words.append(tok)
    return words, fields


def apply_fields(draft: TaskDraft, fields: dict[str, str]) -> TaskDraft:
    if "title" in fields:
        draft.title = fields["title"]
    if "desc" in fields:
        draft.description = fields["desc"]
    if "priority" in fields:
        draft.priority = _parse_enum(Priority, fields["priority"], "priority")
    if "category" in fields:
        draft.category = _parse_enum(Category, fields["category"], "category")
    if "due" in fields:
        draft.due_date = parse_due(fields["due"])
    if "tags" in fields:
        draft.tags = [t.strip() for t in fields["tags"].split(",") if t.strip()]
    return draft


def render_task(task: Task, *, today: date | None = None) -> str:
    mark = "x" if task.completed else " "
    line = f"[{mark}] #{task.id}  {task.title}  ({task.priority.value}, {task.category.value})"
    if task.due_date is not None:
        status = due_date_status(task.due_date, today=today)
        line += f"  due {task.due_date.strftime('%b %d')}"
        if status.value in ("today", "overdue"):
            line += f" [{status.value}]"
    if task.tags:
        line += f"  #{' #'.join(task.tags)}"
    if task.description:
        line += f"\n      {task.description}"
    return line


def render_draft(draft: TaskDraft) -> str:
    due = draft.due_date.isoformat() if draft.due_date else "-"
    tags = ",".join(draft.tags) or "-"
    return (
        f"  title={draft.title!r}\n"
        f"  desc={draft.description!r}\n"
        f"  priority={draft.priority.value} category={draft.category.value} due={due} tags={tags}"
    )


# ---- commands ----


async def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    board = state.board
    mode = "OFFLINE (in-memory)" if state.offline else "ONLINE"
    editing = f"#{board.editing.id}" if board.editing is not None else "-"
    return (
        "Status:\n"
        f"  Store: {mode}, table={state.adapter.table_name}\n"
        f"  Filter: {board.filter_mode.value}  Sort: {board.sort_key.value}  Search: {board.query!r}\n"
        f"  Editing: {editing}"
    )


async def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    board = state.board
    if board.load_error:
        return f"Tasks could not be loaded: {board.load_error} Use /reload to retry."

    tasks = board.visible()
    if not tasks:
        if board.query or board.filter_mode != FilterMode.ALL:
            return "No tasks found. Try adjusting your search or filter criteria."
        return "No tasks yet. Use /add <title> to create your first task."
    return "\n".join(render_task(t) for t in tasks)


async def cmd_stats(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    s = state.board.stats()
    return f"Total: {s.total}  Completed: {s.completed}  Pending: {s.pending}  Overdue: {s.overdue}"


async def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add Buy milk priority=high category=personal due=today desc="2 litres" tags=shop,food
    """
    words, fields = split_fields(args)
    draft = apply_fields(TaskDraft(title=" ".join(words)), fields)

    # A new task never goes through an open edit form.
    state.board.cancel_edit()
    state.draft = TaskDraft()
    task = await state.board.submit(draft)
    return f"Task created successfully! #{task.id}"


async def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /edit <id>                 -> open the task in the edit form
    /edit <id> field=value ... -> change fields and save right away
    """
    if not args:
        return "Usage: /edit <id> [title=... desc=... priority=... category=... due=... tags=...]"

    words, fields = split_fields(args[1:])
    if words and "title" not in fields:
        fields["title"] = " ".join(words)

    # The form and the draft switch together or not at all.
    try:
        draft = apply_fields(state.board.start_edit(args[0]), fields)
    except (TaskServiceError, ValueError):
        state.board.cancel_edit()
        state.draft = TaskDraft()
        raise
    state.draft = draft

    if not fields:
        return f"Editing #{args[0]}:\n{render_draft(draft)}\nUse /save field=value ... or /cancel."

    task = await state.board.submit(draft)
    state.draft = TaskDraft()
    return f"Task updated successfully! #{task.id}"


async def cmd_save(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if state.board.editing is None:
        return "Nothing to save. Use /edit <id> first."
    _, fields = split_fields(args)
    task = await state.board.submit(apply_fields(state.draft, fields))
    state.draft = TaskDraft()
    return f"Task updated successfully! #{task.id}"


async def cmd_cancel(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    state.board.cancel_edit()
    state.draft = TaskDraft()
    return "Edit cancelled."


async def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /done <id>"
    task = await state.board.toggle(args[0])
    return "Task completed!" if task.completed else "Task marked as incomplete"


async def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /rm <id> [<id> ...]"
    deleted = await state.board.delete_many(args)
    if state.board.editing is None:
        state.draft = TaskDraft()
    return "Task deleted successfully" if len(deleted) == 1 else f"{len(deleted)} tasks deleted successfully"


async def cmd_filter(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return f"Filter is {state.board.filter_mode.value}. Use /filter all|completed|pending|overdue|today."
    state.board.set_filter(_parse_enum(FilterMode, args[0], "filter"))
    return f"Filter set to {state.board.filter_mode.value}."


async def cmd_sort(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return f"Sort is {state.board.sort_key.value}. Use /sort dueDate|priority|title|created."
    raw = args[0]
    # accept "duedate" as well as "dueDate"
    match = next((k for k in SortKey if k.value.lower() == raw.lower()), None)
    if match is None:
        raise ValueError(f"unknown sort key {raw!r}")
    state.board.set_sort(match)
    return f"Sort set to {match.value}."


async def cmd_search(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    query = " ".join(args)
    state.board.set_query(query)
    if not query:
        return "Search cleared."
    return f"Searching for {query!r}. Use /list to see matches."


async def cmd_find(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/find <text> [priority=...] [category=...] [completed=true|false] - search on the server."""
    filters: dict[str, object] = {}
    words: list[str] = []
    for tok in args:
        key, sep, value = tok.partition("=")
        key = key.lower()
        if sep and key == "priority":
            filters["priority"] = _parse_enum(Priority, value, "priority")
        elif sep and key == "category":
            filters["category"] = _parse_enum(Category, value, "category")
        elif sep and key == "completed":
            filters["completed"] = value.strip().lower() in ("1", "true", "yes", "y")
        else:
            words.append(tok)

    tasks = await state.board.search_remote(" ".join(words), filters)
    if not tasks:
        return "No tasks found."
    return "\n".join(render_task(t) for t in tasks)


async def cmd_reload(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        emit("Loading tasks...")
    tasks = await state.board.load()
    return f"Loaded {len(tasks)} tasks."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show store mode and current view settings.")
registry.register("list", cmd_list, help_text="Show tasks (search + filter + sort applied).", aliases=["ls"])
registry.register("stats", cmd_stats, help_text="Show total/completed/pending/overdue counts.")
registry.register(
    "add",
    cmd_add,
    help_text="Create a task: /add <title> [priority=] [category=] [due=] [desc=] [tags=].",
    aliases=["new"],
)
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> [field=value ...].")
registry.register("save", cmd_save, help_text="Save the task being edited: /save [field=value ...].")
registry.register("cancel", cmd_cancel, help_text="Cancel the current edit.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("rm", cmd_rm, help_text="Delete tasks: /rm <id> [<id> ...].", aliases=["delete"])
registry.register("filter", cmd_filter, help_text="Filter: /filter all|completed|pending|overdue|today.")
registry.register("sort", cmd_sort, help_text="Sort: /sort dueDate|priority|title|created.")
registry.register("search", cmd_search, help_text="Search title/description: /search <text> (empty clears).")
registry.register("find", cmd_find, help_text="Server-side search: /find <text> [priority=] [category=] [completed=].")
registry.register("reload", cmd_reload, help_text="Reload tasks from the store (retry after an error).")
