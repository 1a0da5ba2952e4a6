"""
CoRunner — Test Fixtures
=========================
Shared pytest fixtures.
"""

from __future__ import annotations

import os

import pytest


# ── Override settings BEFORE any runner is built ─────────────────────────
@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Ensure a fresh Settings instance for each test."""
    from corunner.core.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(monkeypatch):
    """Return a settings instance with test defaults."""
    monkeypatch.setenv("CORUNNER_ENVIRONMENT", "development")
    monkeypatch.setenv("CORUNNER_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("CORUNNER_LOG_FORMAT", "console")
    from corunner.core.config import get_settings
    return get_settings()


@pytest.fixture
def by_priority():
    """Comparator: lower ``priority`` attribute runs first."""
    from corunner.scheduler.adapters import compare_by
    return compare_by(lambda task: task.priority)
