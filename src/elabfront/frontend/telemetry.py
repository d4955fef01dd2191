"""Timing spans for a frontend run.

A :class:`Tracer` lives in a ContextVar and is only installed by
:func:`enable_telemetry` (``--verbose``). Without one, ``@traced`` and
:func:`trace_span` cost a single ContextVar lookup.

The tree for ``run`` looks like::

    run
      process_commands (commands=N)
        command def (kind, position, ok)
        command #check ...
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from elabfront.frontend.result import FrontendResult

_log = structlog.get_logger("elabfront.telemetry")


@dataclass
class Span:
    """One timed region with optional key/value annotations."""

    name: str
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    started_ns: int = field(default_factory=time.perf_counter_ns)
    finished_ns: int | None = None

    @property
    def duration_ms(self) -> float:
        if self.finished_ns is None:
            return 0.0
        return (self.finished_ns - self.started_ns) / 1_000_000

    def child(self, name: str) -> Span:
        span = Span(name=name)
        self.children.append(span)
        return span

    def finish(self) -> None:
        if self.finished_ns is None:
            self.finished_ns = time.perf_counter_ns()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data


class Tracer:
    """Stack of open spans for the current context."""

    def __init__(self) -> None:
        self._stack: list[Span] = []

    @property
    def active(self) -> Span | None:
        return self._stack[-1] if self._stack else None

    def push(self, span: Span) -> None:
        self._stack.append(span)

    def pop(self) -> Span:
        span = self._stack.pop()
        span.finish()
        return span


_tracer: ContextVar[Tracer | None] = ContextVar("elabfront_tracer", default=None)


def enable_telemetry() -> None:
    """Install a fresh tracer (called by AppContext for ``--verbose``)."""
    _tracer.set(Tracer())


def disable_telemetry() -> None:
    _tracer.set(None)


def get_current_span() -> Span | None:
    tracer = _tracer.get()
    return tracer.active if tracer is not None else None


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Open a child of the active span.

    Yields None when telemetry is off or when no ``@traced`` call is running.
    """
    tracer = _tracer.get()
    parent = tracer.active if tracer is not None else None
    if tracer is None or parent is None:
        yield None
        return

    tracer.push(parent.child(name))
    try:
        yield tracer.active
    finally:
        tracer.pop()


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Root a span tree at *func* and attach it to the returned FrontendResult.

    The tree lands in ``result.meta["telemetry"]``; other return values pass
    through untouched.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        tracer = _tracer.get()
        if tracer is None:
            return func(*args, **kwargs)

        tracer.push(Span(name=func.__qualname__))
        try:
            result = func(*args, **kwargs)
        except Exception:
            _log.debug("span.complete", span=func.__qualname__, ok=False, ms=round(tracer.pop().duration_ms, 2))
            raise
        span = tracer.pop()

        if not isinstance(result, FrontendResult):
            _log.debug("span.complete", span=span.name, ok=True, ms=round(span.duration_ms, 2))
            return result

        _log.debug(
            "span.complete",
            span=span.name,
            ok=result.ok,
            ms=round(span.duration_ms, 2),
            commands=result.data.get("commands"),
        )
        meta = {**(result.meta or {}), "telemetry": span.to_dict()}
        return result.model_copy(update={"meta": meta})  # type: ignore[return-value]

    return wrapper
