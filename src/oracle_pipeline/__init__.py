"""Recommendation orchestration and resilience pipeline."""

import importlib.metadata
import logging

from oracle_pipeline.config import FrozenConfig, resolve_config
from oracle_pipeline.core.exceptions import (
    ConfigurationError,
    InvariantViolationError,
    MalformedJsonError,
    MediaAuthError,
    MediaError,
    MediaNotFoundError,
    MediaQuotaExceededError,
    ModelError,
    ModelRefusedError,
    ModelUnavailableError,
    OracleError,
    ParseError,
    ParseFailureKind,
    SchemaMismatchError,
    TemplateBindingError,
)
from oracle_pipeline.core.schema import SchemaContract
from oracle_pipeline.core.types import (
    Failure,
    MediaCandidate,
    MediaQuery,
    Outcome,
    QuotaExhausted,
    RecommendationResult,
    Result,
    Success,
)
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
from oracle_pipeline.frontdoor import OracleClient, create_client
from oracle_pipeline.orchestrator import Feature, MediaSlot, Orchestrator
from oracle_pipeline.telemetry import SimpleReporter, TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("oracle-pipeline")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Entry points
    "OracleClient",
    "create_client",
    "Orchestrator",
    "Feature",
    "MediaSlot",
    "FEATURES",
    # Configuration
    "FrozenConfig",
    "resolve_config",
    # Requests
    "AngelGuidanceRequest",
    "ConsultationRequest",
    "HealthProfile",
    "HoroscopeRequest",
    "KundliRequest",
    "PalmReadingRequest",
    "PujaRequest",
    "VideoTherapyRequest",
    "WisdomQuoteRequest",
    # Core types
    "SchemaContract",
    "RecommendationResult",
    "QuotaExhausted",
    "Outcome",
    "MediaQuery",
    "MediaCandidate",
    "Result",
    "Success",
    "Failure",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
    "SimpleReporter",
    # Exceptions
    "OracleError",
    "ConfigurationError",
    "InvariantViolationError",
    "TemplateBindingError",
    "ModelError",
    "ModelUnavailableError",
    "ModelRefusedError",
    "ParseError",
    "ParseFailureKind",
    "MalformedJsonError",
    "SchemaMismatchError",
    "MediaError",
    "MediaQuotaExceededError",
    "MediaAuthError",
    "MediaNotFoundError",
]
