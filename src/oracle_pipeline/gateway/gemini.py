"""Google Gemini adapter built on the ``google-genai`` SDK."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import errors, types

from oracle_pipeline.core.exceptions import ModelRefusedError, ModelUnavailableError
from oracle_pipeline.core.types import GenerationOptions

log = logging.getLogger(__name__)

# Finish reasons that mean the backend declined to answer
_REFUSAL_FINISH_REASONS = frozenset(
    {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "RECITATION"}
)


class GoogleGenAIAdapter:
    """Calls ``client.aio.models.generate_content`` for one completion.

    Structured refusal signals (``prompt_feedback.block_reason`` or a safety
    finish reason) raise `ModelRefusedError`. SDK API errors raise
    `ModelUnavailableError` with the HTTP status code.
    """

    def __init__(
        self, api_key: str | None = None, *, client: genai.Client | None = None
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("GoogleGenAIAdapter requires an api_key or a client")
            client = genai.Client(api_key=api_key)
        self._client = client

    async def generate(
        self,
        system_message: str,
        user_message: str,
        options: GenerationOptions,
    ) -> str:
        contents: list[Any] = [user_message]
        if options.image is not None:
            contents.insert(
                0,
                types.Part.from_bytes(
                    data=bytes(options.image.data),
                    mime_type=options.image.mime_type,
                ),
            )
        config = types.GenerateContentConfig(
            system_instruction=system_message,
            temperature=options.temperature,
            max_output_tokens=options.max_output_tokens,
            response_mime_type="application/json",
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=options.model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            raise ModelUnavailableError(
                f"Gemini API error: {e.message or e}", status_code=e.code
            ) from e

        _raise_if_refused(response)
        return response.text or ""


def _raise_if_refused(response: Any) -> None:
    feedback = getattr(response, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None)
    if block_reason:
        raise ModelRefusedError(f"Prompt blocked: {_enum_name(block_reason)}")
    for candidate in getattr(response, "candidates", None) or ():
        reason = _enum_name(getattr(candidate, "finish_reason", None))
        if reason in _REFUSAL_FINISH_REASONS:
            raise ModelRefusedError(f"Generation stopped: {reason}")


def _enum_name(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "name", value))
