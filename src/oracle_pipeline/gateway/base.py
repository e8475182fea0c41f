"""Adapter protocol for generative model backends."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from oracle_pipeline.core.exceptions import ModelUnavailableError
from oracle_pipeline.core.types import GenerationOptions


@runtime_checkable
class GenerationAdapter(Protocol):
    """Provider-neutral single-shot text generation.

    Implementations return the raw completion text. They may raise
    `ModelRefusedError` or `ModelUnavailableError`; anything else they raise
    is normalized by the gateway.
    """

    async def generate(
        self,
        system_message: str,
        user_message: str,
        options: GenerationOptions,
    ) -> str: ...


class OfflineAdapter:
    """Adapter used when real API calls are disabled.

    Every call fails as unavailable, so each feature is served by its
    fallback synthesizer without touching the network.
    """

    async def generate(
        self,
        system_message: str,  # noqa: ARG002
        user_message: str,  # noqa: ARG002
        options: GenerationOptions,
    ) -> str:
        raise ModelUnavailableError(
            f"Real API calls are disabled; model '{options.model}' not contacted"
        )
