"""
Rewardman configuration.

Usage in settings.py:
    REWARDMAN = {
        "VIP_TIERS": [
            ("bronze", 0, "1"),
            ("silver", 500, "1.25"),
            ("gold", 2000, "1.5"),
            ("platinum", 5000, "2"),
        ],
        "CREDITS_PER_POINT": 2,
        "REFERRER_BONUS": "50",
    }
"""

from dataclasses import dataclass, field
from typing import Any

from django.conf import settings


def _default_tiers() -> list[tuple[str, int, str]]:
    return [
        ("bronze", 0, "1"),
        ("silver", 500, "1.25"),
        ("gold", 2000, "1.5"),
        ("platinum", 5000, "2"),
    ]


@dataclass
class RewardmanSettings:
    """Rewardman configuration settings."""

    # (name, minimum points, multiplier), ascending
    VIP_TIERS: list = field(default_factory=_default_tiers)

    # Points policy: points = floor(credits / CREDITS_PER_POINT)
    CREDITS_PER_POINT: int = 2

    # Registration / referral credits
    WELCOME_BONUS: str = "100"
    REFERRER_BONUS: str = "50"
    REFERRED_BONUS: str = "25"
    REFERRAL_CODE_LENGTH: int = 8

    # Dotted path to a NotificationBackend ("" disables notifications)
    NOTIFICATION_BACKEND: str = "rewardman.services.notifications.DatabaseBackend"

    # Default page size for ledger history
    HISTORY_LIMIT: int = 50


def get_rewardman_settings() -> RewardmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "REWARDMAN", {})
    return RewardmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_rewardman_settings(), name)


rewardman_settings = _LazySettings()
