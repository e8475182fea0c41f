"""Per-feature orchestration of the recommendation pipeline.

Each call runs a small state machine:

    GATE -> (CACHE) -> BUILD_PROMPT -> CALL_MODEL -> VALIDATE -> RESOLVE_MEDIA -> DONE

and on any recoverable failure:

    ... -> SYNTHESIZE_FALLBACK -> RESOLVE_MEDIA -> DONE

Runtime failures (`ModelError`, `ParseError`, `MediaError`, usage recording)
are absorbed. Programmer errors (`TemplateBindingError`,
`ConfigurationError`, `InvariantViolationError`) propagate. The final payload
is re-checked against the feature contract before it is returned.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Hashable, Mapping, Sequence
import dataclasses
from datetime import datetime
import logging
from typing import TYPE_CHECKING, Any

from oracle_pipeline.core.exceptions import (
    InvariantViolationError,
    ModelError,
    ModelRefusedError,
)
from oracle_pipeline.core.types import (
    InlineImage,
    JSONPayload,
    MediaCandidate,
    MediaQuery,
    Outcome,
    Provenance,
    QuotaExhausted,
    RecommendationResult,
)
from oracle_pipeline.fallback import ContentPool, FallbackSynthesizer, Recipe
from oracle_pipeline.telemetry import TelemetryContext
from oracle_pipeline.usage import AllowAll, Clock, utc_now
from oracle_pipeline.validation import ResponseValidator

if TYPE_CHECKING:
    from oracle_pipeline.core.schema import SchemaContract
    from oracle_pipeline.core.types import BuiltPrompt
    from oracle_pipeline.freshness import DailyResultCache
    from oracle_pipeline.gateway import ModelGateway
    from oracle_pipeline.media import BroadenFn, MediaResolver
    from oracle_pipeline.prompts import PromptBuilder, PromptTemplate
    from oracle_pipeline.telemetry import TelemetryContextProtocol
    from oracle_pipeline.usage import UsageGate

log = logging.getLogger(__name__)

# --- Telemetry scopes/keys ---
T_EXECUTE = "orchestrator.execute"
T_FALLBACK = "orchestrator.fallback"
T_MODEL = "orchestrator.model"
T_QUOTA = "orchestrator.quota_exhausted"
T_RETRY = "orchestrator.retry"

type PathKey = str | int


@dataclasses.dataclass(frozen=True, slots=True)
class MediaSlot:
    """A media query and the payload location its resolved id is written to."""

    path: tuple[PathKey, ...]
    query: MediaQuery

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("MediaSlot path cannot be empty")


@dataclasses.dataclass(frozen=True, slots=True)
class Feature:
    """Everything the orchestrator needs to serve one feature.

    Attributes:
        name: Feature key, also used for usage counters and the cache.
        contract: Expected payload shape.
        template: Prompt template.
        pool: Content variants for fallback synthesis.
        recipe: Builds a fallback payload from ``(request, sampler, now)``.
        bind: Maps ``(request, now)`` to template fields.
        image: Extracts the inline image for vision features.
        media: Lists the media slots of a validated payload.
        finalize: Fills derived fields once media is resolved.
        retries: Extra model attempts after the first one.
        count_fallback_usage: Whether fallback results count against quota.
        broaden: Feature-specific media query broadening.
        cache_key: Enables same-day reuse keyed by the returned value.
    """

    name: str
    contract: SchemaContract
    template: PromptTemplate
    pool: ContentPool
    recipe: Recipe
    bind: Callable[[Any, datetime], Mapping[str, Any]]
    image: Callable[[Any], InlineImage | None] | None = None
    media: Callable[[JSONPayload], Sequence[MediaSlot]] | None = None
    finalize: Callable[[JSONPayload, datetime], JSONPayload] | None = None
    retries: int = 1
    count_fallback_usage: bool = False
    broaden: BroadenFn | None = None
    cache_key: Callable[[Any], Hashable] | None = None

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError(f"Feature '{self.name}' retries must be >= 0")
        if self.template.vision and self.image is None:
            raise ValueError(f"Vision feature '{self.name}' needs an image extractor")


class Orchestrator:
    """Serve one feature: model path first, fallback on any runtime failure."""

    def __init__(
        self,
        feature: Feature,
        *,
        builder: PromptBuilder,
        gateway: ModelGateway,
        media_resolver: MediaResolver,
        cache: DailyResultCache | None = None,
        clock: Clock | None = None,
        seed: int | str | None = None,
        retry_backoff_seconds: float = 0.5,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self.feature = feature
        self._builder = builder
        self._gateway = gateway
        self._resolver = media_resolver
        self._cache = cache
        self._clock: Clock = clock or utc_now
        self._seed = seed
        self._backoff = retry_backoff_seconds
        self._telemetry: TelemetryContextProtocol = telemetry or TelemetryContext()
        self._validator = ResponseValidator(feature.contract)
        self._final_validator = ResponseValidator(feature.contract, preserve_media=True)
        self._synthesizer = FallbackSynthesizer(
            feature.contract, feature.pool, feature.recipe
        )

    async def execute(self, request: Any, *, usage: UsageGate | None = None) -> Outcome:
        """Produce a contract-compliant result for ``request``.

        Args:
            request: Feature request object.
            usage: Optional gate; unmetered when omitted.

        Returns:
            `RecommendationResult` tagged with its provenance, or
            `QuotaExhausted` when the gate refuses.

        Raises:
            TemplateBindingError: The template cannot be bound from the request.
            InvariantViolationError: A pipeline component broke the contract.
        """
        gate = usage or AllowAll()
        name = self.feature.name

        with self._telemetry(T_EXECUTE, feature=name):
            if not gate.can_proceed():
                log.info("Usage limit reached for '%s'", name)
                self._telemetry.count(T_QUOTA, feature=name)
                return QuotaExhausted(
                    name,
                    limit=getattr(gate, "limit", None),
                    used=getattr(gate, "used", None),
                )

            now = self._clock()
            cache_key = self._cache_key(request)
            if cache_key is not None and self._cache is not None:
                cached = self._cache.get(name, cache_key, now)
                if cached is not None:
                    log.debug("Reusing same-day '%s' result for %r", name, cache_key)
                    return cached

            prompt = self._build_prompt(request, now)
            value = await self._generate(prompt)
            source: Provenance = "model"
            if value is None:
                value = self._synthesizer.synthesize(request, now=now, seed=self._seed)
                source = "fallback"
            self._telemetry.count(T_MODEL if source == "model" else T_FALLBACK, feature=name)

            media = await self._resolve_media(value)
            if self.feature.finalize is not None:
                value = self.feature.finalize(value, now)
            value = self._enforce_contract(value)

            result = RecommendationResult(
                feature=name,
                value=value,
                source=source,
                media=tuple(media),
                generated_at=now,
            )

            if source == "model" or self.feature.count_fallback_usage:
                await self._record_usage(gate)
            if cache_key is not None and self._cache is not None and source == "model":
                self._cache.put(name, cache_key, result, now)

            log.debug("'%s' served from %s", name, source)
            return result

    # --- Stages ---

    def _cache_key(self, request: Any) -> Hashable | None:
        if self.feature.cache_key is None:
            return None
        return self.feature.cache_key(request)

    def _build_prompt(self, request: Any, now: datetime) -> BuiltPrompt:
        fields = self.feature.bind(request, now)
        image = self.feature.image(request) if self.feature.image else None
        return self._builder.build(
            self.feature.template,
            fields,
            contract=self.feature.contract,
            image=image,
        )

    async def _generate(self, prompt: BuiltPrompt) -> JSONPayload | None:
        """Run the model path within the retry budget; None means fall back."""
        attempts = 1 + self.feature.retries
        for attempt in range(attempts):
            if attempt:
                delay = self._backoff * (2 ** (attempt - 1))
                self._telemetry.count(T_RETRY, feature=self.feature.name)
                log.debug(
                    "Retrying '%s' (attempt %d/%d) after %.2fs",
                    self.feature.name,
                    attempt + 1,
                    attempts,
                    delay,
                )
                await asyncio.sleep(delay)
            try:
                raw = await self._gateway.call(
                    prompt.system_message, prompt.user_message, prompt.options
                )
            except ModelRefusedError as e:
                log.warning("Model refused '%s': %s", self.feature.name, e)
                return None
            except ModelError as e:
                log.warning(
                    "Model unavailable for '%s' (attempt %d/%d): %s",
                    self.feature.name,
                    attempt + 1,
                    attempts,
                    e,
                )
                continue

            parsed = self._validator.validate(raw)
            if parsed.ok:
                return parsed.value
            log.warning(
                "Rejected model payload for '%s' (%s): %s",
                self.feature.name,
                parsed.reason.value if parsed.reason else "unknown",
                parsed.error,
            )
        return None

    async def _resolve_media(self, value: JSONPayload) -> list[MediaCandidate]:
        if self.feature.media is None:
            return []
        slots = list(self.feature.media(value))
        if not slots:
            return []
        candidates = await self._resolver.resolve_many(
            [slot.query for slot in slots], broaden=self.feature.broaden
        )
        for slot, candidate in zip(slots, candidates, strict=True):
            _assign(value, slot.path, candidate.resolved_id)
        return candidates

    def _enforce_contract(self, value: JSONPayload) -> JSONPayload:
        checked = self._final_validator.check(value)
        if not checked.ok:
            raise InvariantViolationError(
                f"Result for '{self.feature.name}' violates its contract: "
                f"{checked.error}",
                stage_name="finalize",
            )
        return checked.value

    async def _record_usage(self, gate: UsageGate) -> None:
        try:
            await gate.record_usage()
        except Exception as e:
            log.warning(
                "Failed to record usage for '%s': %s", self.feature.name, e, exc_info=True
            )


def _assign(value: Any, path: tuple[PathKey, ...], resolved_id: str | None) -> None:
    target = value
    try:
        for key in path[:-1]:
            target = target[key]
        target[path[-1]]  # noqa: B018
    except (KeyError, IndexError, TypeError) as e:
        raise InvariantViolationError(
            f"Media slot path {path!r} does not exist in the payload",
            stage_name="resolve_media",
        ) from e
    target[path[-1]] = resolved_id
