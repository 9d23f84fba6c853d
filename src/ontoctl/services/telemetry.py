"""Pipeline telemetry for ``--verbose`` runs.

A service operation decorated with ``@traced("generate")`` owns a root
span. Each pipeline stage inside it (``with stage("load")``) adds a child
span timing that stage, and :func:`record` attaches what the stage
handled (triples loaded, rows matched, lines rendered). While a stage is
open its name is bound into structlog's context, so any log line emitted
during it carries ``stage=...``.

The finished tree lands in ``ServiceResult.meta["telemetry"]`` with the
slowest stage called out on the root. When telemetry is off every helper
costs a single ContextVar read.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog

from ontoctl.services.result import ServiceResult

STAGES = frozenset({"load", "extract", "render", "write", "execute", "serialize", "verify"})

_verbose_enabled: ContextVar[bool] = ContextVar("_verbose_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)

log = structlog.get_logger("ontoctl.telemetry")


@dataclass
class Span:
    """One operation or stage: its timing and what it handled."""

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

    def slowest(self) -> Span | None:
        return max(self.children, key=lambda child: child.duration_ms, default=None)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            result["annotations"] = self.annotations
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


# ── Stages ───────────────────────────────────────────────────────────


@contextmanager
def stage(name: str) -> Generator[Span | None]:
    """Time pipeline stage *name* as a child of the running operation.

    Yields None when telemetry is off or no ``@traced`` operation is open.
    """
    if name not in STAGES:
        msg = f"unknown pipeline stage {name!r}"
        raise ValueError(msg)
    parent = _current_span.get() if _verbose_enabled.get() else None
    if parent is None:
        yield None
        return

    child = Span(name=name, parent=parent)
    parent.children.append(child)
    token = _current_span.set(child)
    try:
        with structlog.contextvars.bound_contextvars(stage=name):
            yield child
    finally:
        child.end()
        _current_span.reset(token)
        log.debug("stage.complete", stage=name, duration_ms=round(child.duration_ms, 2), **child.annotations)


def record(**values: Any) -> None:
    """Attach *values* (``triples=26``, ``rows=3``) to the innermost open span."""
    span = get_current_span()
    if span is not None:
        span.annotations.update(values)


# ── Operations ───────────────────────────────────────────────────────


def _finish(span: Span, result: ServiceResult) -> ServiceResult:
    slowest = span.slowest()
    if slowest is not None:
        span.annotate("slowest_stage", slowest.name)
    meta = {**(result.meta or {}), "telemetry": span.to_dict()}
    return result.model_copy(update={"meta": meta})


def traced[**P, R](op: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator: trace service operation *op* and put its span tree in ``meta``."""

    def decorate(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            if not _verbose_enabled.get():
                return func(*args, **kwargs)

            span = Span(name=op)
            token = _current_span.set(span)
            try:
                with structlog.contextvars.bound_contextvars(op=op):
                    result = func(*args, **kwargs)
            except Exception:
                log.debug("op.failed", op=op, stages=[child.name for child in span.children])
                raise
            finally:
                span.end()
                _current_span.reset(token)

            ok = getattr(result, "ok", True)
            log.debug("op.complete", op=op, ok=ok, duration_ms=round(span.duration_ms, 2))
            if isinstance(result, ServiceResult):
                return _finish(span, result)  # type: ignore[return-value]
            return result

        return wrapper

    return decorate


# ── Switches ─────────────────────────────────────────────────────────


def enable_telemetry() -> None:
    """Turn telemetry on (AppContext does this for ``--verbose``)."""
    _verbose_enabled.set(True)


def disable_telemetry() -> None:
    _verbose_enabled.set(False)


def get_current_span() -> Span | None:
    if not _verbose_enabled.get():
        return None
    return _current_span.get()
