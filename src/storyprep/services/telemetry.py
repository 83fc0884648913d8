"""Telemetry primitives — Span, @traced, trace_span.

Span collection is off unless :func:`enable_telemetry` was called in the
current context; when off, each instrumented call costs one ContextVar read.

When on, a ``@traced`` call opens a root span, ``trace_span`` blocks inside
it (play steps, loader joins) become children, and the finished tree is
emitted as one ``span.complete`` structlog event. Spans follow the
ContextVar, so they nest correctly across ``await``.
"""

from __future__ import annotations

import functools
import inspect
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

log = structlog.get_logger("storyprep.telemetry")

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)

_P = ParamSpec("_P")
_R = TypeVar("_R")


@dataclass
class Span:
    """One timed region; children are the regions opened while it was current."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        """Nested summary; empty ``annotations`` and ``children`` are omitted."""
        summary: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            summary["annotations"] = self.annotations
        if self.children:
            summary["children"] = [child.to_dict() for child in self.children]
        return summary


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Open a child of the current span.

    Yields None when telemetry is off or no ``@traced`` call is active.
    """
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    child = Span(name=name, parent=parent)
    parent.children.append(child)
    with _activate(child):
        yield child


@contextmanager
def _root_span(name: str) -> Iterator[Span]:
    span = Span(name=name)
    ok = False
    try:
        with _activate(span):
            yield span
        ok = True
    finally:
        log.debug(
            "span.complete",
            span_name=span.name,
            duration_ms=round(span.duration_ms, 2),
            ok=ok,
            tree=span.to_dict(),
        )


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Time each call of *func* as a root span (plain or ``async`` functions)."""
    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: _P.args, **kwargs: _P.kwargs) -> Any:
            if not _enabled.get():
                return await func(*args, **kwargs)
            with _root_span(func.__qualname__):
                return await func(*args, **kwargs)

        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)
        with _root_span(func.__qualname__):
            return func(*args, **kwargs)

    return wrapper


def enable_telemetry() -> None:
    """Turn on span collection for the current context."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The innermost open span, for manual annotation; None when telemetry is off."""
    if not _enabled.get():
        return None
    return _current_span.get()
