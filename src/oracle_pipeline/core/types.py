"""Core data types that flow through the recommendation pipeline.

Every value handed between stages is an immutable dataclass validated on
construction, so an invalid intermediate state fails loudly where it is
created instead of surfacing later as a broken screen.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
import typing

from oracle_pipeline.core.exceptions import ParseError, ParseFailureKind

def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result Monad ---
# Stages return Success | Failure instead of raising so that recoverable
# failures are an explicit part of the data flow.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful stage result."""

    value: TSuccess

    @property
    def ok(self) -> bool:
        return True


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failed stage result, carrying the classified error."""

    error: TFailure

    @property
    def ok(self) -> bool:
        return False

    @property
    def reason(self) -> ParseFailureKind | None:
        """Parse failure kind when the error is a `ParseError`."""
        if isinstance(self.error, ParseError):
            return self.error.kind
        return None


Result = Success[TSuccess] | Failure[TFailure]

type JSONPayload = dict[str, typing.Any] | list[typing.Any]
type ParsedResult = Success[JSONPayload] | Failure[ParseError]

Provenance = typing.Literal["model", "fallback"]

# --- Generation request data ---


@dataclasses.dataclass(frozen=True, slots=True)
class InlineImage:
    """Image bytes sent inline to a vision-capable model."""

    data: bytes
    mime_type: str = "image/jpeg"

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.data, bytes | bytearray) and len(self.data) > 0,
            message="must be non-empty bytes",
            field_name="data",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.mime_type, str)
            and self.mime_type.startswith("image/"),
            message=f"must be an image/* media type, got {self.mime_type!r}",
            field_name="mime_type",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class GenerationOptions:
    """Parameters for a single model call."""

    model: str
    temperature: float = 0.7
    max_output_tokens: int = 2048
    image: InlineImage | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.model, str) and self.model.strip() != "",
            message="must be a non-empty str",
            field_name="model",
            exc=TypeError,
        )
        _require(
            condition=0.0 <= self.temperature <= 2.0,
            message=f"must be within [0, 2], got {self.temperature}",
            field_name="temperature",
        )
        _require(
            condition=isinstance(self.max_output_tokens, int)
            and self.max_output_tokens >= 1,
            message="must be an int >= 1",
            field_name="max_output_tokens",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class BuiltPrompt:
    """System/user message pair plus generation parameters."""

    system_message: str
    user_message: str
    options: GenerationOptions

    def __post_init__(self) -> None:
        _require(
            condition=self.system_message.strip() != "",
            message="cannot be empty",
            field_name="system_message",
        )
        _require(
            condition=self.user_message.strip() != "",
            message="cannot be empty",
            field_name="user_message",
        )


# --- Media ---


@dataclasses.dataclass(frozen=True, slots=True)
class MediaQuery:
    """A structured video search phrase.

    `text` is the specific query. Broadening drops the title and keeps the
    category and duration descriptor. `candidate_id` is an id proposed
    upstream (for example parsed from a URL the model cited); it is only
    accepted after verification.
    """

    title: str
    category: str = ""
    descriptor: str = ""
    candidate_id: str | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.title, str) and self.title.strip() != "",
            message="must be a non-empty str",
            field_name="title",
            exc=TypeError,
        )

    @property
    def text(self) -> str:
        return " ".join(p for p in (self.title, self.category) if p.strip())


@dataclasses.dataclass(frozen=True, slots=True)
class MediaCandidate:
    """Outcome of resolving one media query."""

    query: str
    resolved_id: str | None = None
    verified: bool = False

    def __post_init__(self) -> None:
        _require(
            condition=self.resolved_id is None or self.verified,
            message="an unverified candidate cannot carry a resolved id",
            field_name="resolved_id",
        )


# --- Results returned to the UI ---


@dataclasses.dataclass(frozen=True, slots=True)
class RecommendationResult:
    """Fully populated, contract-compliant payload for one feature call."""

    feature: str
    value: JSONPayload
    source: Provenance
    media: tuple[MediaCandidate, ...] = ()
    generated_at: datetime = dataclasses.field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        _require(
            condition=self.source in ("model", "fallback"),
            message=f"must be 'model' or 'fallback', got {self.source!r}",
            field_name="source",
        )
        _require(
            condition=isinstance(self.value, dict | list),
            message="must be a dict or list",
            field_name="value",
            exc=TypeError,
        )

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


@dataclasses.dataclass(frozen=True, slots=True)
class QuotaExhausted:
    """The usage gate refused the call; no content was generated."""

    feature: str
    limit: int | None = None
    used: int | None = None


Outcome = RecommendationResult | QuotaExhausted
