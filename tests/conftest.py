"""Pytest configuration and fixtures.

Provides environment isolation, settings-cache resets and logging
configuration. All fixtures here are autouse unless noted.
"""

from __future__ import annotations

import logging
import os

import pytest

from safetry.settings import clear_settings_cache

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_safetry_env(request, monkeypatch):
    """Ensure a clean SAFETRY_* environment and a fresh settings cache.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if not request.node.get_closest_marker("allow_env_pollution"):
        for key in list(os.environ.keys()):
            if key.startswith("SAFETRY_"):
                monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def block_dotenv(monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests."""
    monkeypatch.setattr("safetry.settings._DOTENV_LOADED", True)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_asyncio_logger():
    """Keep asyncio debug chatter out of captured logs."""
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# =============================================================================
# Backoff Recording
# =============================================================================


@pytest.fixture
def recorded_delays(monkeypatch) -> list[float]:
    """Replace the executor's sleep with a recorder; returns the delay list.

    Not autouse: tests that need real pauses simply don't request it.
    """
    delays: list[float] = []

    async def _fake_sleep(ms: float) -> None:
        delays.append(ms)

    monkeypatch.setattr("safetry.executor.sleep", _fake_sleep)
    return delays
