"""Usage gating for free-tier limits.

The pipeline never stores counters itself. It reads and writes through an
injected `UsageStore`; atomicity of the read-modify-write belongs to the
store. The orchestrator only sees the `UsageGate` capability pair.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import dataclasses
from datetime import UTC, datetime
import logging
from typing import Protocol, runtime_checkable

from oracle_pipeline.core.types import _require

log = logging.getLogger(__name__)

type Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclasses.dataclass(frozen=True, slots=True)
class UsageRecord:
    """Per-user, per-feature counter."""

    count: int = 0
    last_used: datetime | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.count, int) and self.count >= 0,
            message="must be a non-negative int",
            field_name="count",
        )


@runtime_checkable
class UsageStore(Protocol):
    """External key-value store holding usage counters."""

    async def read(self, user_id: str, feature: str) -> UsageRecord: ...

    async def write(self, user_id: str, feature: str, record: UsageRecord) -> None: ...

    async def increment(self, user_id: str, feature: str, at: datetime) -> UsageRecord:
        """Atomically add one use and return the stored record."""
        ...


class InMemoryUsageStore:
    """Process-local store for development and tests."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], UsageRecord] = {}
        self._lock = asyncio.Lock()

    async def read(self, user_id: str, feature: str) -> UsageRecord:
        return self._records.get((user_id, feature), UsageRecord())

    async def write(self, user_id: str, feature: str, record: UsageRecord) -> None:
        async with self._lock:
            self._records[(user_id, feature)] = record

    async def increment(self, user_id: str, feature: str, at: datetime) -> UsageRecord:
        async with self._lock:
            current = self._records.get((user_id, feature), UsageRecord())
            updated = UsageRecord(count=current.count + 1, last_used=at)
            self._records[(user_id, feature)] = updated
            return updated


@runtime_checkable
class UsageGate(Protocol):
    """Capability pair injected into one orchestrator call."""

    def can_proceed(self) -> bool: ...

    async def record_usage(self) -> None: ...


class AllowAll:
    """Gate for unmetered callers."""

    def can_proceed(self) -> bool:
        return True

    async def record_usage(self) -> None:
        return None


class StoreUsageGate:
    """Gate that decides from a load-time snapshot and counts through the store."""

    def __init__(
        self,
        store: UsageStore,
        user_id: str,
        feature: str,
        record: UsageRecord,
        limit: int,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self.user_id = user_id
        self.feature = feature
        self.record = record
        self.limit = limit
        self._clock = clock

    @classmethod
    async def load(
        cls,
        store: UsageStore,
        user_id: str,
        feature: str,
        limit: int,
        clock: Clock = utc_now,
    ) -> StoreUsageGate:
        record = await store.read(user_id, feature)
        return cls(store, user_id, feature, record, limit, clock)

    @property
    def used(self) -> int:
        return self.record.count

    def can_proceed(self) -> bool:
        return self.record.count < self.limit

    async def record_usage(self) -> None:
        # Concurrent calls share the store, not this snapshot
        updated = await self._store.increment(self.user_id, self.feature, self._clock())
        self.record = updated
        log.debug(
            "Recorded usage %d/%d for %s on '%s'",
            updated.count,
            self.limit,
            self.user_id,
            self.feature,
        )
