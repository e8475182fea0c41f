"""Core configuration data types.

Configuration follows a resolve-once, freeze-then-flow pattern: settings are
resolved from all sources a single time at startup and the resulting
`FrozenConfig` is passed explicitly to every component that needs it.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Literal, NamedTuple

ConfigOrigin = Literal["programmatic", "env", "default"]
SourceMap = Mapping[str, ConfigOrigin]

_SECRET_FIELDS = frozenset({"api_key", "youtube_api_key"})


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to pipeline components.

    Any attempt to modify this object raises. Secrets are redacted from
    `str()` and `repr()` so the object is safe to log.
    """

    api_key: str | None = None
    model: str = "gemini-2.0-flash"
    vision_model: str = "gemini-2.0-flash"
    temperature: float = 0.7
    max_output_tokens: int = 2048
    use_real_api: bool = False
    model_timeout_seconds: float = 30.0
    retry_backoff_seconds: float = 0.5
    refusal_phrases: tuple[str, ...] = ()
    youtube_api_key: str | None = None
    media_concurrency: int = 4
    media_timeout_seconds: float = 10.0
    free_tier_limit: int = 3
    timezone: str = "UTC"
    telemetry_enabled: bool = False

    def __str__(self) -> str:
        parts = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _SECRET_FIELDS and value:
                value = "[REDACTED]"
            parts.append(f"{f.name}={value!r}")
        return f"FrozenConfig({', '.join(parts)})"

    def __repr__(self) -> str:
        return self.__str__()


class ResolvedConfig(NamedTuple):
    """Configuration after resolution, with the origin of every field."""

    config: FrozenConfig
    origin: SourceMap

    def to_frozen(self) -> FrozenConfig:
        return self.config

    def audit(self) -> str:
        """Redacted, human-readable report of where each value came from."""
        lines = []
        for f in fields(self.config):
            origin = self.origin.get(f.name, "default")
            value = getattr(self.config, f.name)
            if f.name in _SECRET_FIELDS:
                display = "None" if value is None else "<redacted>"
            else:
                display = repr(value)
            lines.append(f"{f.name}: {origin}:{display}")
        return "\n".join(lines)
