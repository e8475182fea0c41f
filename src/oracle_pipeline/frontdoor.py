"""Client entry point for UI event handlers.

`OracleClient` wires one `Orchestrator` per feature from explicitly
constructed collaborators: a prompt builder, a model gateway, a media
resolver, a same-day cache and a usage store. Nothing is held at module
level, so tests inject fakes through the constructor.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
import logging
from typing import TYPE_CHECKING, Any, Self
from zoneinfo import ZoneInfo

from oracle_pipeline.config import FrozenConfig, resolve_config
from oracle_pipeline.core.exceptions import ConfigurationError
from oracle_pipeline.features import (
    FEATURES,
    AngelGuidanceRequest,
    ConsultationRequest,
    HealthProfile,
    HoroscopeRequest,
    KundliRequest,
    PalmReadingRequest,
    PujaRequest,
    VideoTherapyRequest,
    WisdomQuoteRequest,
)
from oracle_pipeline.freshness import DailyResultCache
from oracle_pipeline.gateway import GenerationAdapter, ModelGateway, OfflineAdapter
from oracle_pipeline.media import (
    MediaResolver,
    MediaSearchClient,
    NullSearchClient,
    YouTubeSearchClient,
)
from oracle_pipeline.orchestrator import Orchestrator
from oracle_pipeline.prompts import PromptBuilder
from oracle_pipeline.telemetry import TelemetryContext
from oracle_pipeline.usage import InMemoryUsageStore, StoreUsageGate

if TYPE_CHECKING:
    from types import TracebackType

    from oracle_pipeline.core.types import Outcome
    from oracle_pipeline.telemetry import TelemetryReporter
    from oracle_pipeline.usage import Clock, UsageStore

log = logging.getLogger(__name__)


def _default_adapter(config: FrozenConfig) -> GenerationAdapter:
    if not config.use_real_api:
        return OfflineAdapter()
    # Deferred so offline use never initializes the SDK
    from oracle_pipeline.gateway.gemini import GoogleGenAIAdapter

    return GoogleGenAIAdapter(config.api_key)


class OracleClient:
    """Serve every feature through its orchestrator.

    Args:
        config: Resolved, frozen configuration.
        adapter: Generation adapter; defaults to Gemini when ``use_real_api``
            is set and to the offline adapter otherwise.
        search_client: Media search backend; defaults to YouTube when a key is
            configured and to a null client otherwise.
        usage_store: Counter store for per-user gating.
        cache: Same-day result cache.
        clock: Source of "now"; defaults to the configured timezone.
        seed: Makes fallback content reproducible.
        reporters: Telemetry reporters, active when telemetry is enabled.
    """

    def __init__(
        self,
        config: FrozenConfig,
        *,
        adapter: GenerationAdapter | None = None,
        search_client: MediaSearchClient | None = None,
        usage_store: UsageStore | None = None,
        cache: DailyResultCache | None = None,
        clock: Clock | None = None,
        seed: int | str | None = None,
        reporters: Iterable[TelemetryReporter] = (),
    ) -> None:
        self.config = config
        self._telemetry = TelemetryContext(*reporters, enabled=config.telemetry_enabled)

        self._owns_search_client = search_client is None
        if search_client is None:
            if config.youtube_api_key:
                search_client = YouTubeSearchClient(
                    config.youtube_api_key, timeout_seconds=config.media_timeout_seconds
                )
            else:
                log.info("No YouTube API key configured; media slots stay empty")
                search_client = NullSearchClient()
        self._search_client = search_client

        zone = ZoneInfo(config.timezone)
        self._clock: Clock = clock or (lambda: datetime.now(zone))
        self._usage_store: UsageStore = usage_store or InMemoryUsageStore()
        self.cache = cache or DailyResultCache(config.timezone)

        builder = PromptBuilder(config)
        gateway = ModelGateway(
            adapter or _default_adapter(config),
            timeout_seconds=config.model_timeout_seconds,
            refusal_phrases=config.refusal_phrases,
            telemetry=self._telemetry,
        )
        resolver = MediaResolver(
            self._search_client,
            concurrency=config.media_concurrency,
            telemetry=self._telemetry,
        )
        self._orchestrators = {
            name: Orchestrator(
                feature,
                builder=builder,
                gateway=gateway,
                media_resolver=resolver,
                cache=self.cache,
                clock=self._clock,
                seed=seed,
                retry_backoff_seconds=config.retry_backoff_seconds,
                telemetry=self._telemetry,
            )
            for name, feature in FEATURES.items()
        }

    async def execute(
        self, feature: str, request: Any, *, user_id: str | None = None
    ) -> Outcome:
        """Run one feature, gated by the user's free-tier counter when given."""
        try:
            orchestrator = self._orchestrators[feature]
        except KeyError:
            raise ConfigurationError(
                f"Unknown feature {feature!r}; expected one of {', '.join(FEATURES)}"
            ) from None
        gate = None
        if user_id is not None:
            gate = await StoreUsageGate.load(
                self._usage_store,
                user_id,
                feature,
                self.config.free_tier_limit,
                self._clock,
            )
        return await orchestrator.execute(request, usage=gate)

    # --- Feature entry points ---

    async def get_video_recommendations(
        self, emotion: str, problem: str, *, user_id: str | None = None
    ) -> Outcome:
        return await self.execute(
            "video_therapy", VideoTherapyRequest(emotion, problem), user_id=user_id
        )

    async def get_horoscope(self, sign: str, *, user_id: str | None = None) -> Outcome:
        return await self.execute("horoscope", HoroscopeRequest(sign), user_id=user_id)

    async def get_angel_guidance(
        self, request: AngelGuidanceRequest, *, user_id: str | None = None
    ) -> Outcome:
        return await self.execute("angel_guidance", request, user_id=user_id)

    async def analyze_hand_reading(
        self,
        image: bytes,
        mime_type: str = "image/jpeg",
        *,
        user_id: str | None = None,
    ) -> Outcome:
        return await self.execute(
            "palm_reading", PalmReadingRequest(image, mime_type), user_id=user_id
        )

    async def analyze_kundli(
        self, request: KundliRequest, *, user_id: str | None = None
    ) -> Outcome:
        return await self.execute("kundli", request, user_id=user_id)

    async def get_diet_recommendations(
        self, profile: HealthProfile, *, user_id: str | None = None
    ) -> Outcome:
        return await self.execute("diet_plan", profile, user_id=user_id)

    async def get_puja_recommendations(
        self, request: PujaRequest, *, user_id: str | None = None
    ) -> Outcome:
        return await self.execute("puja", request, user_id=user_id)

    async def get_wisdom_quote(
        self, emotion: str, context: str, *, user_id: str | None = None
    ) -> Outcome:
        return await self.execute(
            "wisdom_quote", WisdomQuoteRequest(emotion, context), user_id=user_id
        )

    async def get_premium_consultation(
        self, question: str, complexity: str = "simple", *, user_id: str | None = None
    ) -> Outcome:
        return await self.execute(
            "premium_consultation",
            ConsultationRequest(question, complexity),
            user_id=user_id,
        )

    # --- Lifecycle ---

    async def aclose(self) -> None:
        """Release the HTTP client created for media search."""
        if self._owns_search_client and isinstance(
            self._search_client, YouTubeSearchClient
        ):
            await self._search_client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_client(config: FrozenConfig | None = None, **kwargs: Any) -> OracleClient:
    """Build an `OracleClient`, resolving configuration once when omitted.

    Example:
        ```python
        async with create_client() as client:
            result = await client.get_horoscope("Leo")
        ```
    """
    final_config = config or resolve_config().to_frozen()
    return OracleClient(final_config, **kwargs)
