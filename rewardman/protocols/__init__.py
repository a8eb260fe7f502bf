"""Rewardman protocols."""

from rewardman.protocols.notifications import (
    NotificationBackend,
    NotificationEvent,
)

__all__ = [
    "NotificationBackend",
    "NotificationEvent",
]
