"""Per-call sanitize ID helpers."""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4

import structlog


sanitize_id_ctx: ContextVar[str] = ContextVar("sanitize_id", default="")


def new_sanitize_id() -> str:
    return f"san-{uuid4().hex[:20]}"


def set_sanitize_id(value: str) -> None:
    sanitize_id_ctx.set(value or "")


def get_sanitize_id() -> str:
    return sanitize_id_ctx.get("")


def bind_sanitize_id(value: str | None = None) -> str:
    """Set a sanitize ID and expose it to every structlog event of this context."""
    sanitize_id = value or new_sanitize_id()
    set_sanitize_id(sanitize_id)
    structlog.contextvars.bind_contextvars(sanitize_id=sanitize_id)
    return sanitize_id


def clear_sanitize_id() -> None:
    set_sanitize_id("")
    structlog.contextvars.unbind_contextvars("sanitize_id")
