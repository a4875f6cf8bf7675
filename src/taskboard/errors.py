# src/taskboard/errors.py

"""
Error taxonomy for task operations.

Every adapter operation either returns data or raises exactly one of these.
Messages are meant to be shown to the user as-is.
"""

from __future__ import annotations

from typing import Any


class TaskServiceError(Exception):
    """Base class for categorized task errors."""

    default_message = "Task operation failed."

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        self.message = (message or "").strip() or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(TaskServiceError):
    """Field-level rejection (from the store, or a local pre-check)."""

    default_message = "Validation failed."

    def __init__(
        self,
        message: str | None = None,
        *,
        field_errors: list[tuple[str, str]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.field_errors = list(field_errors or [])
        if not message and self.field_errors:
            message = format_field_errors(self.field_errors)
        super().__init__(message, details=details)


class RequestError(TaskServiceError):
    """Operation-level failure reported by the store."""

    default_message = "Request failed. Please try again."


class SubmissionInProgress(RequestError):
    """A create/update for the same form is still outstanding."""

    default_message = "A task is already being saved. Please wait."


class ProtocolError(TaskServiceError):
    """Malformed or unexpected response envelope."""

    default_message = "Invalid response from server"


class NetworkError(TaskServiceError):
    """Transport failure talking to the store."""

    default_message = "Network error. Please check your connection and try again."


def format_field_errors(errors: list[tuple[str, str]]) -> str:
    return ", ".join(f"{label}: {reason}" for label, reason in errors)
