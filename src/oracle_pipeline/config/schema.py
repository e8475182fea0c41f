"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces
configuration values from the environment and programmatic overrides into the
correct types with proper defaults.
"""

from typing import Annotated, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_REFUSAL_PHRASES: tuple[str, ...] = (
    "i'm sorry",
    "i am sorry",
    "i cannot",
    "i can't",
    "i am unable",
    "i'm unable",
    "as an ai",
    "cannot assist with",
)


class OracleSettings(BaseSettings):
    """Pydantic settings schema for the recommendation pipeline.

    Handles validation, type coercion, and defaults for every configuration
    field. Environment variables use the ORACLE_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="ORACLE_",
        env_file=None,  # .env loading is explicit, see resolve_config()
        case_sensitive=False,
        extra="ignore",
    )

    # --- Generative model ---

    api_key: str | None = Field(default=None, description="Gemini API key")
    model: str = Field(default="gemini-2.0-flash", min_length=1)
    vision_model: str = Field(default="gemini-2.0-flash", min_length=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=2048, ge=1)
    use_real_api: bool = Field(
        default=False,
        description="Call the real model; otherwise every request is served by fallback",
    )
    model_timeout_seconds: float = Field(default=30.0, gt=0)
    retry_backoff_seconds: float = Field(default=0.5, ge=0)
    refusal_phrases: Annotated[tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_REFUSAL_PHRASES,
        description="Case-insensitive phrases that mark a model refusal",
    )

    # --- Media search ---

    youtube_api_key: str | None = Field(default=None)
    media_concurrency: int = Field(default=4, ge=1)
    media_timeout_seconds: float = Field(default=10.0, gt=0)

    # --- Usage gating and freshness ---

    free_tier_limit: int = Field(default=3, ge=0)
    timezone: str = Field(default="UTC")

    telemetry_enabled: bool = Field(default=False)

    # --- Validation Rules ---

    @field_validator("refusal_phrases", mode="before")
    @classmethod
    def parse_phrases(cls, v: Any) -> tuple[str, ...]:
        """Accept a comma-separated string or any iterable of phrases."""
        if isinstance(v, str):
            items = v.split(",")
        else:
            items = list(v)
        phrases = tuple(str(p).strip().lower() for p in items if str(p).strip())
        return phrases

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the timezone is a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v!r}") from e
        return v

    @model_validator(mode="after")
    def validate_api_key_requirement(self) -> "OracleSettings":
        """Ensure api_key is provided when use_real_api is True."""
        if self.use_real_api and not self.api_key:
            raise ValueError(
                "api_key is required when use_real_api=True. "
                "Set ORACLE_API_KEY or pass it programmatically."
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary of resolved values."""
        return self.model_dump()
