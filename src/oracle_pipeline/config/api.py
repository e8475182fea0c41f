"""Public API for configuration resolution."""

import logging
import os
from pathlib import Path
from typing import Any

import dotenv
from pydantic import ValidationError

from oracle_pipeline.core.exceptions import ConfigurationError

from .schema import OracleSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig

log = logging.getLogger(__name__)

ENV_PREFIX = "ORACLE_"


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration with precedence Programmatic > Environment > Defaults.

    Args:
        programmatic: Explicit overrides. Unknown keys are ignored.
        env_file: Optional .env file loaded before reading ORACLE_* variables.
            Values already present in the environment are not overridden.

    Returns:
        ResolvedConfig carrying the FrozenConfig and per-field origins.

    Raises:
        ConfigurationError: If a value fails validation or the env file is missing.

    Example:
        ```python
        resolved = resolve_config({"use_real_api": True, "api_key": "..."})
        config = resolved.to_frozen()
        ```
    """
    if env_file is not None:
        env_path = Path(env_file)
        if not env_path.is_file():
            raise ConfigurationError(f"Environment file not found: {env_path}")
        dotenv.load_dotenv(env_path, override=False)

    known = set(OracleSettings.model_fields)
    overrides = {k: v for k, v in (programmatic or {}).items() if k in known}
    try:
        settings = OracleSettings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    origin: dict[str, ConfigOrigin] = {}
    for name in known:
        if name in overrides:
            origin[name] = "programmatic"
        elif f"{ENV_PREFIX}{name.upper()}" in os.environ:
            origin[name] = "env"
        else:
            origin[name] = "default"

    frozen = FrozenConfig(**settings.to_dict())
    log.debug("Resolved configuration: %s", frozen)
    return ResolvedConfig(config=frozen, origin=origin)
