"""
Global test configuration: environment isolation and shared fixtures.
"""

from contextlib import suppress
import os

import pytest

from oracle_pipeline.config import DEFAULT_REFUSAL_PHRASES, FrozenConfig
from tests.fakes import NOW


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-in escape hatch: mark a test with @pytest.mark.allow_dotenv
    to permit .env loading for that specific test.
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_oracle_env(monkeypatch):
    """Ensure a clean ORACLE_* environment for each test.

    Variables a test adds (for example through a loaded .env file) are
    removed afterwards; pre-existing ones are restored by monkeypatch.
    """
    for key in list(os.environ.keys()):
        if key.startswith("ORACLE_"):
            monkeypatch.delenv(key, raising=False)
    yield
    for key in list(os.environ.keys()):
        if key.startswith("ORACLE_"):
            os.environ.pop(key, None)


# --- Shared fixtures ---


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def config() -> FrozenConfig:
    """Offline configuration with the default refusal phrases."""
    return FrozenConfig(refusal_phrases=DEFAULT_REFUSAL_PHRASES)
