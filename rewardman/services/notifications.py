"""Notification service - fire-and-forget delivery plus a stored inbox.

notify() never raises and never runs inside the caller's transaction:
delivery is deferred with transaction.on_commit(), so a rolled-back
operation sends nothing and a sink outage cannot revert a committed one.
"""

import logging

from django.db import transaction
from django.utils.module_loading import import_string

from rewardman.models import Notification
from rewardman.protocols import NotificationBackend, NotificationEvent

logger = logging.getLogger(__name__)


class DatabaseBackend:
    """Default backend: store events as Notification rows."""

    def send(self, event: NotificationEvent) -> None:
        Notification.objects.create(
            account_id=event.account_id,
            title=event.title,
            message=event.message,
            category=event.category,
        )


def get_backend() -> NotificationBackend | None:
    """Instantiate the configured backend (None when disabled)."""
    from rewardman.conf import rewardman_settings

    path = rewardman_settings.NOTIFICATION_BACKEND
    if not path:
        return None
    return import_string(path)()


def deliver(event: NotificationEvent) -> bool:
    """Send one event now. Returns False (and logs) on any sink failure."""
    try:
        backend = get_backend()
        if backend is None:
            return False
        backend.send(event)
        return True
    except Exception:
        logger.exception(
            "Notification delivery failed for account %s (%s)",
            event.account_id,
            event.category,
        )
        return False


def notify(account_id: int, title: str, message: str, category: str, **metadata) -> None:
    """Schedule delivery after the current transaction commits."""
    event = NotificationEvent(
        account_id=account_id,
        title=title,
        message=message,
        category=category,
        metadata=metadata,
    )
    transaction.on_commit(lambda: deliver(event))


# ======================================================================
# Inbox queries (DatabaseBackend)
# ======================================================================


def inbox(account_id: int, unread_only: bool = False, limit: int = 50) -> list[Notification]:
    """Stored notifications, most recent first."""
    qs = Notification.objects.filter(account_id=account_id)
    if unread_only:
        qs = qs.filter(is_read=False)
    return list(qs[:limit])


def unread_count(account_id: int) -> int:
    return Notification.objects.filter(account_id=account_id, is_read=False).count()


def mark_read(notification_id: int, account_id: int) -> bool:
    """Mark one notification as read. False if it does not belong to the account."""
    updated = Notification.objects.filter(
        pk=notification_id, account_id=account_id
    ).update(is_read=True)
    return bool(updated)


def mark_all_read(account_id: int) -> int:
    return Notification.objects.filter(account_id=account_id, is_read=False).update(
        is_read=True
    )
