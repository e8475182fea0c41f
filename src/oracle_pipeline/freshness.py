"""Calendar-day freshness for reusable results."""

from __future__ import annotations

import copy
import dataclasses
from datetime import datetime
import logging
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

if TYPE_CHECKING:
    from oracle_pipeline.core.types import RecommendationResult

log = logging.getLogger(__name__)


def _local_date(moment: datetime, zone: ZoneInfo):
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=zone)
    return moment.astimezone(zone).date()


def is_stale(last_fetched_at: datetime, now: datetime, tz: str = "UTC") -> bool:
    """Return True when the two instants fall on different days in ``tz``.

    Naive datetimes are interpreted in ``tz``.
    """
    zone = ZoneInfo(tz)
    return _local_date(last_fetched_at, zone) != _local_date(now, zone)


def _detached(result: RecommendationResult) -> RecommendationResult:
    return dataclasses.replace(result, value=copy.deepcopy(result.value))


@dataclasses.dataclass(frozen=True, slots=True)
class _Entry:
    result: RecommendationResult
    fetched_at: datetime


class DailyResultCache:
    """Results reusable until the calendar day changes.

    Payloads are copied on the way in and out, so callers may mutate what
    they receive without affecting other readers.
    """

    def __init__(self, tz: str = "UTC") -> None:
        ZoneInfo(tz)
        self.tz = tz
        self._entries: dict[tuple[str, Any], _Entry] = {}

    def get(self, feature: str, key: Any, now: datetime) -> RecommendationResult | None:
        entry = self._entries.get((feature, key))
        if entry is None:
            return None
        if is_stale(entry.fetched_at, now, self.tz):
            log.debug("Evicting stale '%s' result for %r", feature, key)
            del self._entries[(feature, key)]
            return None
        return _detached(entry.result)

    def put(
        self, feature: str, key: Any, result: RecommendationResult, now: datetime
    ) -> None:
        self._entries[(feature, key)] = _Entry(_detached(result), now)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
