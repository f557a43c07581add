"""Stage timing for the generation pipeline.

``@timed_stage`` wraps a stage function (sync or async) and appends a
``StageMetrics`` entry to the list opened by ``collect_metrics()``.  A
stage that raises is recorded with ``succeeded=False`` before the
exception propagates, so the orchestrator can report how far a degraded
run got::

    with collect_metrics() as metrics:
        insights = await insight_analysis.analyze_topic(...)
        ...
    completed = completed_stages(metrics)
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
import logging
import time

from .models import StageMetrics

log = logging.getLogger(__name__)

_active: contextvars.ContextVar[list[StageMetrics] | None] = (
    contextvars.ContextVar("_active_stage_metrics", default=None)
)


class collect_metrics:
    """Context manager that turns on recording for ``@timed_stage``."""

    def __enter__(self) -> list[StageMetrics]:
        self._metrics: list[StageMetrics] = []
        self._token = _active.set(self._metrics)
        return self._metrics

    def __exit__(self, *exc) -> None:
        _active.reset(self._token)


def completed_stages(metrics: list[StageMetrics], stage_type: str = "ai") -> int:
    """Number of successfully finished stages of *stage_type*."""
    return sum(1 for m in metrics if m.succeeded and m.stage_type == stage_type)


def timed_stage(name: str, stage_type: str):
    """Record the wall-clock duration and outcome of a stage function."""

    def decorator(fn):
        if asyncio.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args, **kwargs):
                started = time.monotonic_ns()
                try:
                    result = await fn(*args, **kwargs)
                except Exception:
                    _finish(name, stage_type, started, succeeded=False)
                    raise
                _finish(name, stage_type, started, succeeded=True)
                return result

            return async_wrapper

        @functools.wraps(fn)
        def sync_wrapper(*args, **kwargs):
            started = time.monotonic_ns()
            try:
                result = fn(*args, **kwargs)
            except Exception:
                _finish(name, stage_type, started, succeeded=False)
                raise
            _finish(name, stage_type, started, succeeded=True)
            return result

        return sync_wrapper

    return decorator


def _finish(name: str, stage_type: str, started: int, *, succeeded: bool) -> None:
    duration_ms = (time.monotonic_ns() - started) // 1_000_000
    if succeeded:
        log.info("Stage %s finished in %d ms", name, duration_ms)
    else:
        log.warning("Stage %s failed after %d ms", name, duration_ms)
    metrics = _active.get()
    if metrics is not None:
        metrics.append(StageMetrics(name, stage_type, duration_ms, succeeded))
