"""Rule lists evaluated against request bodies before any service call."""

from __future__ import annotations

from .core.validation import (
    Rule,
    is_email,
    is_non_blank,
    is_string_or_null,
    min_length,
    one_of,
)
from .models import TaskPriority, TaskStatus

PRIORITY_MESSAGE = "Priority must be Low, Medium, or High"
STATUS_MESSAGE = "Status must be Pending, In Progress, or Done"

_priorities = one_of([priority.value for priority in TaskPriority])
_statuses = one_of([status.value for status in TaskStatus])

REGISTER_RULES: tuple[Rule, ...] = (
    Rule("name", is_non_blank, "Name is required"),
    Rule("email", is_email, "Please provide a valid email"),
    Rule(
        "password",
        min_length(6),
        "Password must be at least 6 characters long",
        sensitive=True,
    ),
)

LOGIN_RULES: tuple[Rule, ...] = (
    Rule("email", is_email, "Please provide a valid email"),
    Rule("password", min_length(1), "Password is required", sensitive=True),
)

CREATE_TASK_RULES: tuple[Rule, ...] = (
    Rule("title", is_non_blank, "Title is required"),
    Rule("description", is_string_or_null, "Description must be a string", optional=True),
    Rule("priority", _priorities, PRIORITY_MESSAGE, optional=True),
    Rule("status", _statuses, STATUS_MESSAGE, optional=True),
)

UPDATE_TASK_RULES: tuple[Rule, ...] = (
    Rule("title", is_non_blank, "Title cannot be empty", optional=True),
    Rule("description", is_string_or_null, "Description must be a string", optional=True),
    Rule("priority", _priorities, PRIORITY_MESSAGE, optional=True),
    Rule("status", _statuses, STATUS_MESSAGE, optional=True),
)

__all__ = [
    "CREATE_TASK_RULES",
    "LOGIN_RULES",
    "PRIORITY_MESSAGE",
    "REGISTER_RULES",
    "STATUS_MESSAGE",
    "UPDATE_TASK_RULES",
]
