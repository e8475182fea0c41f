"""Configuration management for the recommendation pipeline.

Key components:
- OracleSettings: Pydantic schema for ORACLE_* settings
- ResolvedConfig: Resolution output with audit metadata
- FrozenConfig: Immutable configuration passed to components
"""

from .api import resolve_config
from .schema import DEFAULT_REFUSAL_PHRASES, OracleSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [
    "DEFAULT_REFUSAL_PHRASES",
    "ConfigOrigin",
    "FrozenConfig",
    "OracleSettings",
    "ResolvedConfig",
    "SourceMap",
    "resolve_config",
]
