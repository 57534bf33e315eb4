"""Per-request identifiers shared by logging and response envelopes."""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4

import structlog

_request_id: ContextVar[str] = ContextVar("shoot_request_id", default="")
_correlation_id: ContextVar[str] = ContextVar("shoot_correlation_id", default="")


def generate_id(kind: str) -> str:
    return f"{kind}-{uuid4().hex[:20]}"


def bind_request_context(*, request_id: str | None, correlation_id: str | None) -> tuple[str, str]:
    """Store ids for the current task and bind them into structlog. Missing ids are generated."""
    request_id = request_id or generate_id("req")
    correlation_id = correlation_id or generate_id("corr")
    _request_id.set(request_id)
    _correlation_id.set(correlation_id)
    structlog.contextvars.bind_contextvars(request_id=request_id, correlation_id=correlation_id)
    return request_id, correlation_id


def clear_request_context() -> None:
    _request_id.set("")
    _correlation_id.set("")
    structlog.contextvars.clear_contextvars()


def current_request_id() -> str | None:
    return _request_id.get() or None


def current_correlation_id() -> str | None:
    return _correlation_id.get() or None
