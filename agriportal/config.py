"""
Application Configuration.

Pydantic Settings model for the AgriPortal client.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")

    # --- Role resolution ---
    # Comma-separated allow-list.  Membership (case-insensitive) is the only
    # thing that makes a user an admin; there is no server-side role claim.
    ADMIN_EMAILS: str = ""

    # --- Listing ---
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1)
    DASHBOARD_ACTIVITY_LIMIT: int = Field(default=6, ge=1)
    CAROUSEL_PAGE_SIZE: int = Field(default=50, ge=1)
    NOTIFICATIONS_PAGE_SIZE: int = Field(default=50, ge=1)

    # --- Storage ---
    STORAGE_CACHE_CONTROL: str = "3600"
    IMAGE_MAX_SIZE_MB: int = 5
    ALLOWED_IMAGE_TYPES: list[str] = Field(default_factory=lambda: [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ])

    # --- Logging ---
    LOG_FILE: str = "agriportal.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing.
        This validator logs a warning so operators know the client is
        running with placeholder values.
        """
        _log = logging.getLogger("agriportal.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.SUPABASE_URL:
            _log.warning(
                "SUPABASE_URL is empty. Backend connectivity is disabled "
                "and every backend operation will report a failure."
            )

        if not self.admin_emails:
            _log.warning(
                "ADMIN_EMAILS is empty. No account will resolve to the admin role."
            )

        return self

    @property
    def admin_emails(self) -> frozenset[str]:
        """The admin allow-list, normalised to stripped lower-case addresses."""
        return frozenset(
            email.strip().lower()
            for email in self.ADMIN_EMAILS.split(",")
            if email.strip()
        )


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern so the fast path never touches the lock.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
