"""Single choke-point for generative model calls.

The gateway performs exactly one attempt per call. Retry budgets belong to
the orchestrator so each feature can choose its own.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import logging
from typing import TYPE_CHECKING

from oracle_pipeline.core.exceptions import (
    ModelError,
    ModelRefusedError,
    ModelUnavailableError,
)
from oracle_pipeline.telemetry import TelemetryContext

if TYPE_CHECKING:
    from oracle_pipeline.core.types import GenerationOptions
    from oracle_pipeline.gateway.base import GenerationAdapter
    from oracle_pipeline.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

T_GATEWAY_CALL = "gateway.call"

_JSON_OPENERS = ("{", "[", "```")


def looks_like_refusal(text: str, phrases: Iterable[str]) -> bool:
    """Return True when prose text contains a configured refusal phrase.

    Text that opens with JSON or a code fence is never treated as a refusal,
    so creative content quoting a phrase is not misclassified.
    """
    stripped = text.lstrip()
    if stripped.startswith(_JSON_OPENERS):
        return False
    lowered = stripped.lower()
    return any(p and p in lowered for p in phrases)


class ModelGateway:
    """Call a `GenerationAdapter` once with a bounded timeout."""

    def __init__(
        self,
        adapter: GenerationAdapter,
        *,
        timeout_seconds: float = 30.0,
        refusal_phrases: Iterable[str] = (),
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._adapter = adapter
        self._timeout = timeout_seconds
        self._refusal_phrases = tuple(p.lower() for p in refusal_phrases)
        self._telemetry: TelemetryContextProtocol = telemetry or TelemetryContext()

    async def call(
        self,
        system_message: str,
        user_message: str,
        options: GenerationOptions,
    ) -> str:
        """Return raw completion text.

        Raises:
            ModelUnavailableError: Timeout, transport failure, rate limit, or
                empty completion.
            ModelRefusedError: The backend declined to answer.
        """
        with self._telemetry(T_GATEWAY_CALL, model=options.model):
            try:
                async with asyncio.timeout(self._timeout):
                    text = await self._adapter.generate(
                        system_message, user_message, options
                    )
            except TimeoutError as e:
                raise ModelUnavailableError(
                    f"Model call timed out after {self._timeout:g}s"
                ) from e
            except ModelError:
                raise
            except Exception as e:  # Defensive normalization
                raise ModelUnavailableError(f"Model call failed: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise ModelUnavailableError("Model returned an empty completion")
        if looks_like_refusal(text, self._refusal_phrases):
            log.info("Model '%s' declined to answer", options.model)
            raise ModelRefusedError("Model declined to answer")
        return text
