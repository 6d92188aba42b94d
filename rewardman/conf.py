"""
Rewardman configuration.

Usage in settings.py:
    REWARDMAN = {
        "BACKEND": "rewardman.adapters.postgrest.PostgrestLedgerBackend",
        "POINTS_STEP": 5,
        "REQUEST_TIMEOUT": 10,
    }
"""

import os
from dataclasses import dataclass, field
from typing import Any

from django.conf import settings


@dataclass
class RewardmanSettings:
    """Rewardman configuration settings."""

    # LedgerBackend implementation (dotted path)
    BACKEND: str = "rewardman.adapters.django_orm.DjangoLedgerBackend"

    # Admin +/- buttons
    POINTS_STEP: int = 5

    # Customer search
    MIN_SEARCH_LENGTH: int = 2

    # Extra attempts for read calls on BackendUnavailableError (writes never retry)
    READ_RETRIES: int = 1

    # Seconds to wait for the per-customer lock
    LOCK_TIMEOUT: float = 5.0

    # PostgREST backend
    REQUEST_TIMEOUT: float = 10.0
    POSTGREST_URL: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    POSTGREST_KEY: str = field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    )


def get_rewardman_settings() -> RewardmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "REWARDMAN", {})
    return RewardmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_rewardman_settings(), name)


rewardman_settings = _LazySettings()
