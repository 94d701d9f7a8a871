"""Evaluation context management using contextvars.

Write-path calls bind the learner and track they operate on, so every log
entry emitted further down the call stack carries them without passing
parameters explicitly.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any
from uuid import uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)
track_id_var: ContextVar[str | None] = ContextVar("track_id", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context.

    Args:
        request_id: Optional request ID. If not provided, generates a new one.

    Returns:
        The request ID that was set.
    """
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_user_id() -> str | None:
    """Get the current user ID."""
    return user_id_var.get()


def get_track_id() -> str | None:
    """Get the current track ID."""
    return track_id_var.get()


@contextmanager
def evaluation_context(
    user_id: str | None = None,
    track_id: str | None = None,
) -> Iterator[None]:
    """Bind user and track for the duration of a block.

    Previous values are restored on exit, including when the block raises.
    """
    user_token = user_id_var.set(user_id)
    track_token = track_id_var.set(track_id)
    try:
        yield
    finally:
        track_id_var.reset(track_token)
        user_id_var.reset(user_token)


def get_context() -> dict[str, Any]:
    """Get all non-empty context values as a dictionary."""
    context: dict[str, Any] = {}

    if request_id := request_id_var.get():
        context["request_id"] = request_id
    if user_id := user_id_var.get():
        context["user_id"] = user_id
    if track_id := track_id_var.get():
        context["track_id"] = track_id

    return context


def clear_context() -> None:
    """Clear all context variables."""
    request_id_var.set("")
    user_id_var.set(None)
    track_id_var.set(None)
