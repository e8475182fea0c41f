"""Exception hierarchy for the recommendation pipeline.

Two families live here. Programmer errors (`ConfigurationError`,
`InvariantViolationError`, `TemplateBindingError`) always propagate out of the
orchestrator. Runtime errors (`ModelError`, `ParseError`, `MediaError`) are
recoverable and are absorbed into fallback content or a null media slot.
"""

from __future__ import annotations

from enum import Enum


class OracleError(Exception):
    """Base exception for all pipeline errors."""


# --- Programmer errors ---


class ConfigurationError(OracleError):
    """Raised when contracts, pools, or settings are misconfigured at startup."""


class InvariantViolationError(OracleError):
    """Raised when a pipeline guarantee is broken by one of its own components."""

    def __init__(self, message: str, *, stage_name: str | None = None):
        super().__init__(message)
        self.stage_name = stage_name


class TemplateBindingError(OracleError):
    """Raised when a prompt template references fields the request lacks."""

    def __init__(self, template_name: str, missing: tuple[str, ...] = ()):
        self.template_name = template_name
        self.missing = missing
        detail = ", ".join(missing) if missing else "unbound placeholder"
        super().__init__(f"Template '{template_name}' cannot be bound: {detail}")


# --- Model errors ---


class ModelError(OracleError):
    """Base class for failures reported by the generative model call."""


class ModelUnavailableError(ModelError):
    """Network failure, timeout, rate limit, or empty completion."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ModelRefusedError(ModelError):
    """The backend explicitly declined to answer."""


# --- Parse errors ---


class ParseFailureKind(str, Enum):
    """Classified reasons a model payload could not be accepted."""

    MALFORMED_JSON = "malformed_json"
    SCHEMA_MISMATCH = "schema_mismatch"


class ParseError(OracleError):
    """Base class for response validation failures."""

    kind: ParseFailureKind


class MalformedJsonError(ParseError):
    """The payload is not syntactically valid JSON."""

    kind = ParseFailureKind.MALFORMED_JSON


class SchemaMismatchError(ParseError):
    """The payload is valid JSON but does not satisfy the schema contract."""

    kind = ParseFailureKind.SCHEMA_MISMATCH

    def __init__(self, message: str, *, path: str = "$"):
        super().__init__(f"{path}: {message}")
        self.path = path


# --- Media errors ---


class MediaError(OracleError):
    """Base class for video search failures (transport errors use it directly)."""

    kind: str = "transport"


class MediaQuotaExceededError(MediaError):
    """The search API quota is exhausted."""

    kind = "quota_exceeded"


class MediaAuthError(MediaError):
    """The search API rejected the credentials."""

    kind = "auth_error"


class MediaNotFoundError(MediaError):
    """No item matched the query or the requested id does not exist."""

    kind = "not_found"
