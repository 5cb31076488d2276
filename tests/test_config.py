"""
tests/test_config.py -- Unit tests for Settings.

Covers:
  - defaults match the documented policy switches
  - environment variables override defaults
  - a non-positive session TTL is rejected at load time
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings


def test_defaults():
    settings = Settings()
    assert settings.session_ttl_seconds == 8 * 3600
    assert settings.reject_expired_sessions is False
    assert settings.admin_can_edit is False
    assert settings.uniform_signin_errors is True


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("REJECT_EXPIRED_SESSIONS", "true")
    monkeypatch.setenv("SESSION_TTL_SECONDS", "120")
    settings = Settings()
    assert settings.reject_expired_sessions is True
    assert settings.session_ttl_seconds == 120


@pytest.mark.parametrize("ttl", [0, -5])
def test_non_positive_ttl_rejected(ttl):
    with pytest.raises(ValidationError):
        Settings(session_ttl_seconds=ttl)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
