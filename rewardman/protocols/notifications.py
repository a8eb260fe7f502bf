"""Notification protocols."""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class NotificationEvent:
    """Best-effort event for an account (ledger apply, unlock, ...)."""

    account_id: int
    title: str
    message: str
    category: str
    metadata: dict = field(default_factory=dict)


@runtime_checkable
class NotificationBackend(Protocol):
    """Protocol for notification sinks (inbox table, push, websocket, ...)."""

    def send(self, event: NotificationEvent) -> None:
        """
        Deliver one event.

        May raise; Rewardman logs the failure and never retries or rolls
        back the balance change that produced the event.
        """
        ...
