"""Telemetry context and reporter interfaces.

Scopes used by the pipeline:
- ``orchestrator.execute`` wraps one feature call
- ``gateway.call`` wraps one model attempt
- ``media.resolve`` wraps one media query

Counters: ``orchestrator.fallback``, ``orchestrator.model``,
``orchestrator.quota_exhausted``, ``media.failure``.

Disabled telemetry returns a shared, stateless no-op so the hot path pays
nothing for it.
"""

from collections import deque
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
import logging
import os
import time
from types import TracebackType
from typing import Any, Protocol, Self, runtime_checkable

log = logging.getLogger(__name__)

_scope_stack_var: ContextVar[tuple[str, ...]] = ContextVar(
    "oracle_scope_stack",
    default=(),
)

_ENV_ENABLED = os.getenv("ORACLE_TELEMETRY") == "1"


@runtime_checkable
class TelemetryReporter(Protocol):
    """Duck-typed protocol for telemetry reporters."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    """Stateless stand-in used whenever telemetry is off."""

    @property
    def enabled(self) -> bool:
        return False

    def __call__(self, name: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        return None

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


def _placement(name: str, stack: tuple[str, ...]) -> tuple[str, dict[str, Any]]:
    """Dotted path for ``name`` under ``stack`` plus the nesting metadata."""
    parent = ".".join(stack) or None
    return ".".join((*stack, name)), {"depth": len(stack), "parent_scope": parent}


class _EnabledTelemetryContext:
    """Forwards scope timings and pipeline counters to every reporter."""

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    @property
    def enabled(self) -> bool:
        return True

    def __call__(
        self, name: str, **metadata: Any
    ) -> AbstractContextManager["_EnabledTelemetryContext"]:
        if not name or not isinstance(name, str):
            raise ValueError("Scope name must be a non-empty string")
        return self._scope(name, metadata)

    @contextmanager
    def _scope(
        self, name: str, metadata: dict[str, Any]
    ) -> Iterator["_EnabledTelemetryContext"]:
        stack = _scope_stack_var.get()
        path, placement = _placement(name, stack)
        token = _scope_stack_var.set((*stack, name))
        started = time.perf_counter()
        try:
            yield self
        finally:
            elapsed = time.perf_counter() - started
            _scope_stack_var.reset(token)
            self._notify("record_timing", path, elapsed, {**placement, **metadata})

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        """Add ``increment`` to the counter ``name`` within the current scope."""
        path, placement = _placement(name, _scope_stack_var.get())
        self._notify(
            "record_metric",
            path,
            increment,
            {**placement, "metric_type": "counter", **metadata},
        )

    def _notify(self, hook: str, path: str, value: Any, metadata: dict[str, Any]) -> None:
        # Reporter failures are logged, never raised
        for reporter in self.reporters:
            try:
                getattr(reporter, hook)(path, value, **metadata)
            except Exception as e:
                log.error(
                    "Telemetry reporter '%s' failed in %s: %s",
                    type(reporter).__name__,
                    hook,
                    e,
                    exc_info=True,
                )


_NO_OP_SINGLETON = _NoOpTelemetryContext()

type TelemetryContextProtocol = _EnabledTelemetryContext | _NoOpTelemetryContext


def TelemetryContext(  # noqa: N802
    *reporters: TelemetryReporter, enabled: bool | None = None
) -> TelemetryContextProtocol:
    """Return a telemetry context.

    Args:
        *reporters: Destinations for timings and metrics.
        enabled: Explicit switch, usually ``FrozenConfig.telemetry_enabled``.
            When ``None`` the ``ORACLE_TELEMETRY=1`` environment flag decides.

    Returns the shared no-op instance when disabled or when no reporters are
    given.
    """
    active = _ENV_ENABLED if enabled is None else enabled
    if active and reporters:
        return _EnabledTelemetryContext(*reporters)
    return _NO_OP_SINGLETON


class SimpleReporter:
    """In-memory reporter for development and tests.

    Call `get_report()` to render what was collected.
    """

    def __init__(self, max_entries_per_scope: int = 1000):
        self.max_entries = max_entries_per_scope
        self.timings: dict[str, deque[tuple[float, dict[str, Any]]]] = {}
        self.metrics: dict[str, deque[tuple[Any, dict[str, Any]]]] = {}

    def _bucket(self, table: dict[str, deque], scope: str) -> deque:
        return table.setdefault(scope, deque(maxlen=self.max_entries))

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self._bucket(self.timings, scope).append((duration, metadata))

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self._bucket(self.metrics, scope).append((value, metadata))

    def total(self, scope: str) -> float:
        """Sum of numeric values recorded for a metric scope."""
        return sum(
            v for v, _ in self.metrics.get(scope, ()) if isinstance(v, int | float)
        )

    def get_report(self) -> str:
        lines = ["=== Telemetry Report ===", "", "--- Timings ---"]
        for scope, values in sorted(self.timings.items()):
            durations = [v[0] for v in values]
            lines.append(
                f"{scope:<40} | Calls: {len(durations):<4} | "
                f"Avg: {sum(durations) / len(durations):.4f}s | "
                f"Total: {sum(durations):.4f}s"
            )
        if self.metrics:
            lines.append("")
            lines.append("--- Metrics ---")
            for scope in sorted(self.metrics):
                lines.append(
                    f"{scope:<40} | Count: {len(self.metrics[scope]):<4} | "
                    f"Total: {self.total(scope):,.0f}"
                )
        return "\n".join(lines)
