"""Resolve textual media descriptions into verified, embeddable video ids.

Resolution is two-tier: the specific query first, then one broadened query
that keeps the category and duration descriptor but drops the title. A hit is
only accepted after a second call confirms it is currently embeddable, so a
`MediaCandidate` never carries an id that was not verified.

Media is enrichment: every failure is logged by kind and becomes a candidate
with ``resolved_id=None``. Nothing here raises to the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from oracle_pipeline.core.exceptions import (
    MediaAuthError,
    MediaError,
    MediaQuotaExceededError,
)
from oracle_pipeline.core.types import MediaCandidate, MediaQuery
from oracle_pipeline.telemetry import TelemetryContext

if TYPE_CHECKING:
    from oracle_pipeline.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

T_MEDIA_RESOLVE = "media.resolve"
T_MEDIA_FAILURE = "media.failure"

type BroadenFn = Callable[[MediaQuery], str | None]

# After these the backend will keep refusing, so further calls are pointless
_TERMINAL_ERRORS = (MediaQuotaExceededError, MediaAuthError)


@runtime_checkable
class MediaSearchClient(Protocol):
    """Video search backend used by the resolver.

    Both methods raise `MediaError` subclasses on failure.
    """

    async def search(self, query: str) -> str | None:
        """Return the top embeddable video id for the query, or None."""
        ...

    async def is_embeddable(self, video_id: str) -> bool:
        """Return True when the video is currently public and embeddable."""
        ...


class NullSearchClient:
    """Search client used when no search API key is configured."""

    async def search(self, query: str) -> str | None:  # noqa: ARG002
        return None

    async def is_embeddable(self, video_id: str) -> bool:  # noqa: ARG002
        return False


def default_broaden(query: MediaQuery) -> str | None:
    """Keep category and duration descriptor, drop the specific title."""
    broadened = " ".join(p.strip() for p in (query.category, query.descriptor) if p.strip())
    return broadened or None


class _Stop(Exception):
    """Internal signal: the backend refused in a way retries cannot fix."""


class MediaResolver:
    """Turn media queries into verified `MediaCandidate`s."""

    def __init__(
        self,
        client: MediaSearchClient,
        *,
        broaden: BroadenFn = default_broaden,
        concurrency: int = 4,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._client = client
        self._broaden = broaden
        self._concurrency = concurrency
        self._telemetry: TelemetryContextProtocol = telemetry or TelemetryContext()

    async def resolve_one(
        self, query: MediaQuery | str, *, broaden: BroadenFn | None = None
    ) -> MediaCandidate:
        """Resolve a single query.

        Order: verify the proposed ``candidate_id`` if any, then search the
        specific text, then search the broadened text once. Returns a
        candidate with ``resolved_id=None`` when nothing verifies.
        """
        q = MediaQuery(title=query) if isinstance(query, str) else query
        broaden_fn = broaden or self._broaden
        with self._telemetry(T_MEDIA_RESOLVE):
            try:
                if q.candidate_id:
                    if await self._verify(q.candidate_id, q.text):
                        return MediaCandidate(q.text, q.candidate_id, verified=True)

                if video_id := await self._search_and_verify(q.text):
                    return MediaCandidate(q.text, video_id, verified=True)

                broadened = broaden_fn(q)
                if broadened and broadened.strip().lower() != q.text.strip().lower():
                    log.debug("Broadening media query %r -> %r", q.text, broadened)
                    if video_id := await self._search_and_verify(broadened):
                        return MediaCandidate(q.text, video_id, verified=True)
            except _Stop:
                pass

        log.info("No embeddable media found for %r", q.text)
        return MediaCandidate(q.text)

    async def resolve_many(
        self,
        queries: Sequence[MediaQuery | str],
        *,
        broaden: BroadenFn | None = None,
    ) -> list[MediaCandidate]:
        """Resolve all queries concurrently, preserving input order.

        Fan-out is bounded by the configured concurrency. Each query is
        isolated: an unexpected failure in one yields a null candidate for
        that slot and does not affect the others.
        """
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(q: MediaQuery | str) -> MediaCandidate:
            async with semaphore:
                try:
                    return await self.resolve_one(q, broaden=broaden)
                except Exception as e:
                    text = q if isinstance(q, str) else q.text
                    log.warning(
                        "Media resolution crashed for %r: %s", text, e, exc_info=True
                    )
                    self._telemetry.count(T_MEDIA_FAILURE, kind="unexpected")
                    return MediaCandidate(text)

        return list(await asyncio.gather(*(_bounded(q) for q in queries)))

    # --- Internal helpers ---

    async def _search_and_verify(self, text: str) -> str | None:
        try:
            hit = await self._client.search(text)
        except MediaError as e:
            self._record_failure(e, text)
            return None
        if not hit:
            return None
        return hit if await self._verify(hit, text) else None

    async def _verify(self, video_id: str, text: str) -> bool:
        try:
            ok = await self._client.is_embeddable(video_id)
        except MediaError as e:
            self._record_failure(e, text)
            return False
        if not ok:
            log.debug("Video %s for %r is not embeddable", video_id, text)
        return bool(ok)

    def _record_failure(self, error: MediaError, text: str) -> None:
        log.warning("Media lookup failed (%s) for %r: %s", error.kind, text, error)
        self._telemetry.count(T_MEDIA_FAILURE, kind=error.kind)
        if isinstance(error, _TERMINAL_ERRORS):
            raise _Stop from error
