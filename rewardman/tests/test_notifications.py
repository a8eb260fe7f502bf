"""Tests for after-commit notification delivery."""

from decimal import Decimal

import pytest

from rewardman.models import Account, LedgerCategory, Notification
from rewardman.protocols import NotificationBackend, NotificationEvent
from rewardman.services import ledger, notifications


pytestmark = pytest.mark.django_db


class FailingBackend:
    def send(self, event):
        raise ConnectionError("sink down")


class RecordingBackend:
    events = []

    def send(self, event):
        RecordingBackend.events.append(event)


@pytest.fixture
def recorded_events():
    RecordingBackend.events = []
    yield RecordingBackend.events
    RecordingBackend.events = []


class TestDelivery:
    def test_database_backend_is_a_backend(self):
        assert isinstance(notifications.DatabaseBackend(), NotificationBackend)

    def test_deferred_until_commit(self, account, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            ledger.credit(account.pk, 10, LedgerCategory.GAME_WIN, "Won 10 credits")
            assert not Notification.objects.exists()

        for callback in callbacks:
            callback()

        notification = Notification.objects.get(account=account)
        assert notification.title == "You Won!"
        assert notification.category == LedgerCategory.GAME_WIN

    def test_sink_failure_does_not_revert_balance(
        self, account, settings, caplog, django_capture_on_commit_callbacks
    ):
        settings.REWARDMAN = {
            "NOTIFICATION_BACKEND": "rewardman.tests.test_notifications.FailingBackend"
        }

        with django_capture_on_commit_callbacks(execute=True):
            ledger.credit(account.pk, 10, LedgerCategory.GAME_WIN, "x")

        account.refresh_from_db()
        assert account.credit_balance == Decimal("10.00")
        assert "Notification delivery failed" in caplog.text

    def test_custom_backend(
        self, account, settings, recorded_events, django_capture_on_commit_callbacks
    ):
        settings.REWARDMAN = {
            "NOTIFICATION_BACKEND": "rewardman.tests.test_notifications.RecordingBackend"
        }

        with django_capture_on_commit_callbacks(execute=True):
            notifications.notify(account.pk, "Hi", "Hello", "SYSTEM", source="test")

        assert recorded_events == [
            NotificationEvent(
                account_id=account.pk,
                title="Hi",
                message="Hello",
                category="SYSTEM",
                metadata={"source": "test"},
            )
        ]

    def test_disabled_backend(self, account, settings):
        settings.REWARDMAN = {"NOTIFICATION_BACKEND": ""}
        event = NotificationEvent(account.pk, "t", "m", "SYSTEM", {})
        assert notifications.deliver(event) is False

    def test_debit_sends_nothing(self, account, django_capture_on_commit_callbacks):
        Account.objects.filter(pk=account.pk).update(credit_balance=Decimal("20"))
        with django_capture_on_commit_callbacks(execute=True):
            ledger.apply(account.pk, -5, 0, LedgerCategory.ADMIN_CREDIT, "fee")
        assert not Notification.objects.exists()

    def test_tier_change_notifies(self, account, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            ledger.apply(account.pk, 0, 500, LedgerCategory.ADMIN_CREDIT, "promo")

        assert Notification.objects.get(account=account).title == "VIP Tier Changed!"


class TestInbox:
    def test_read_flags(self, account, other_account):
        first = Notification.objects.create(account=account, title="a", message="a", category="X")
        Notification.objects.create(account=account, title="b", message="b", category="X")

        assert notifications.unread_count(account.pk) == 2
        assert not notifications.mark_read(first.pk, other_account.pk)
        assert notifications.mark_read(first.pk, account.pk)
        assert [n.title for n in notifications.inbox(account.pk, unread_only=True)] == ["b"]
        assert notifications.mark_all_read(account.pk) == 1
        assert notifications.unread_count(account.pk) == 0
