"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the forum happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. session_ttl_seconds -> SESSION_TTL_SECONDS).

Policy switches:
  reject_expired_sessions -- the reference behaviour accepts a session past its
      expires_at as long as it was never signed out. Setting this to true makes
      the access guard reject such sessions with SessionExpired.

  admin_can_edit -- admins may always delete content they do not own, but by
      default may not edit it. Setting this to true lifts the edit restriction.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or forum/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("forum.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'forum.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    # Host headers accepted by TrustedHostMiddleware. "testserver" is the
    # host FastAPI's TestClient sends. Set as a JSON list in the environment.
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost", "testserver"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    # 8 hours, matching the lifetime sessions have always been issued with.
    session_ttl_seconds: int = 8 * 3600
    reject_expired_sessions: bool = False

    # ------------------------------------------------------------------
    # Authorization policy
    # ------------------------------------------------------------------

    admin_can_edit: bool = False

    # UnknownUser and BadCredential stay distinct internally; the transport
    # layer collapses them into one message when this is set.
    uniform_signin_errors: bool = True

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_session_ttl(self) -> "Settings":
        """Reject a non-positive session lifetime.

        A zero or negative TTL would mint sessions that are expired at birth,
        which silently breaks every login when reject_expired_sessions is on.
        """
        if self.session_ttl_seconds <= 0:
            raise ValueError("SESSION_TTL_SECONDS must be a positive number of seconds.")
        if self.debug:
            logger.warning("DEBUG mode enabled -- SQL statements will be echoed.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
