"""Trace correlation carried implicitly through the active context."""

from __future__ import annotations

import secrets
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from typing import Iterator


def _new_trace_id() -> str:
    return secrets.token_hex(16)


def _new_span_id() -> str:
    return secrets.token_hex(8)


@dataclass(frozen=True)
class Correlation:
    """Identifiers that tie log records and responses to one request."""

    trace_id: str = ""
    span_id: str = ""
    parent_span_id: str = ""
    request_id: str = ""
    identity_attributes: tuple[tuple[str, str], ...] = ()

    def child(self) -> "Correlation":
        """Return a new span in the same trace, keeping identity attributes."""
        return replace(self, span_id=_new_span_id(), parent_span_id=self.span_id)

    def with_identity_attributes(self, **kwargs: str) -> "Correlation":
        """Return a copy with the given identity attributes added or replaced."""
        merged = dict(self.identity_attributes)
        merged.update({key: str(value) for key, value in kwargs.items()})
        return replace(self, identity_attributes=tuple(merged.items()))

    def identity_attribute_value(self, key: str) -> str:
        """Return the value of an identity attribute, or "" when absent."""
        return dict(self.identity_attributes).get(key, "")


_EMPTY = Correlation()
_current: ContextVar[Correlation] = ContextVar("ctxdaemon_correlation", default=_EMPTY)


def new_correlation(request_id: str) -> Correlation:
    """Start a fresh trace with a root span."""
    return Correlation(
        trace_id=_new_trace_id(),
        span_id=_new_span_id(),
        request_id=request_id,
    )


def current() -> Correlation:
    """Return the active correlation; an empty one when none is installed."""
    return _current.get()


@contextmanager
def use_correlation(correlation: Correlation) -> Iterator[Correlation]:
    """Install ``correlation`` as the active one for the enclosed block."""
    token = _current.set(correlation)
    try:
        yield correlation
    finally:
        _current.reset(token)