"""Unit tests for configuration resolution.

These tests verify the core behaviors of the configuration module:
- Precedence of programmatic overrides over ORACLE_* environment variables.
- Per-field origin tracking and redacted audit output.
- Validation errors surfacing as `ConfigurationError`.
"""

import dataclasses
import os
from unittest.mock import patch

import pytest

from oracle_pipeline.config import DEFAULT_REFUSAL_PHRASES, FrozenConfig, resolve_config
from oracle_pipeline.core.exceptions import ConfigurationError


class TestConfigurationResolution:
    """Resolution precedence and origins."""

    @pytest.mark.unit
    def test_defaults_apply_without_environment(self):
        resolved = resolve_config()

        config = resolved.to_frozen()
        assert config.model == "gemini-2.0-flash"
        assert config.use_real_api is False
        assert config.free_tier_limit == 3
        assert config.refusal_phrases == DEFAULT_REFUSAL_PHRASES
        assert set(resolved.origin.values()) == {"default"}

    @pytest.mark.unit
    def test_environment_variables_are_read_with_prefix(self):
        with patch.dict(
            os.environ, {"ORACLE_MODEL": "env-model", "ORACLE_FREE_TIER_LIMIT": "5"}
        ):
            resolved = resolve_config()

        assert resolved.config.model == "env-model"
        assert resolved.config.free_tier_limit == 5
        assert resolved.origin["model"] == "env"
        assert resolved.origin["free_tier_limit"] == "env"
        assert resolved.origin["timezone"] == "default"

    @pytest.mark.unit
    def test_programmatic_overrides_beat_environment(self):
        with patch.dict(os.environ, {"ORACLE_MODEL": "env-model"}):
            resolved = resolve_config({"model": "explicit-model"})

        assert resolved.config.model == "explicit-model"
        assert resolved.origin["model"] == "programmatic"

    @pytest.mark.unit
    def test_unknown_programmatic_keys_are_ignored(self):
        resolved = resolve_config({"not_a_setting": 1})

        assert "not_a_setting" not in resolved.origin

    @pytest.mark.unit
    def test_refusal_phrases_parse_from_a_comma_list(self):
        with patch.dict(os.environ, {"ORACLE_REFUSAL_PHRASES": "Nope, I Decline ,,"}):
            config = resolve_config().to_frozen()

        assert config.refusal_phrases == ("nope", "i decline")


class TestConfigurationValidation:
    """Invalid settings fail loudly at startup."""

    @pytest.mark.unit
    def test_real_api_requires_an_api_key(self):
        with pytest.raises(ConfigurationError, match="api_key is required"):
            resolve_config({"use_real_api": True})

    @pytest.mark.unit
    def test_real_api_with_key_from_environment(self):
        with patch.dict(
            os.environ, {"ORACLE_USE_REAL_API": "true", "ORACLE_API_KEY": "sk-test"}
        ):
            config = resolve_config().to_frozen()

        assert config.use_real_api is True
        assert config.api_key == "sk-test"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "overrides",
        [
            {"timezone": "Mars/Olympus_Mons"},
            {"temperature": 3.5},
            {"model_timeout_seconds": 0},
            {"media_concurrency": 0},
        ],
    )
    def test_invalid_values_raise_configuration_error(self, overrides):
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            resolve_config(overrides)

    @pytest.mark.unit
    def test_missing_env_file_is_an_error(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            resolve_config(env_file=tmp_path / "missing.env")

    @pytest.mark.unit
    @pytest.mark.allow_dotenv
    def test_env_file_values_do_not_override_the_environment(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("ORACLE_MODEL=file-model\nORACLE_TIMEZONE=Asia/Kolkata\n")

        with patch.dict(os.environ, {"ORACLE_MODEL": "env-model"}):
            resolved = resolve_config(env_file=env_file)

        assert resolved.config.model == "env-model"
        assert resolved.config.timezone == "Asia/Kolkata"
        assert resolved.origin["timezone"] == "env"


class TestFrozenConfig:
    """Immutability and secret redaction."""

    @pytest.mark.unit
    def test_frozen_config_is_immutable(self):
        config = FrozenConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.model = "other"  # type: ignore[misc]

    @pytest.mark.unit
    def test_secrets_are_redacted_from_str_and_repr(self):
        config = FrozenConfig(api_key="sk-secret", youtube_api_key="yt-secret")

        for rendered in (str(config), repr(config)):
            assert "sk-secret" not in rendered
            assert "yt-secret" not in rendered
            assert "[REDACTED]" in rendered

    @pytest.mark.unit
    def test_audit_reports_origins_without_secrets(self):
        resolved = resolve_config({"api_key": "sk-secret", "model": "m"})

        audit = resolved.audit()

        assert "sk-secret" not in audit
        assert "api_key: programmatic:<redacted>" in audit
        assert "model: programmatic:'m'" in audit
        assert "youtube_api_key: default:None" in audit
