"""Tests for registration, referrals and logins."""

from datetime import timedelta
from decimal import Decimal

from unittest.mock import patch

import pytest
from django.db import IntegrityError

from rewardman.exceptions import NotFoundError, TransientError, ValidationError
from rewardman.models import Account, AchievementDef, AchievementType, LedgerCategory, LedgerEntry
from rewardman.services import accounts, achievements, ledger, referral
from rewardman.signals import account_registered


pytestmark = pytest.mark.django_db


class TestRegister:
    def test_welcome_bonus(self, db):
        account = accounts.register("carol", credentials={"password": "x"}, email="c@example.com")

        assert account.referral_code
        assert len(account.referral_code) == 8
        assert account.credit_balance == Decimal("100.00")
        assert account.points_balance == 50
        assert account.vip_tier == "bronze"

        entry = LedgerEntry.objects.get(account=account)
        assert entry.category == LedgerCategory.BONUS_CLAIM
        assert entry.reference == "welcome"

    def test_valid_referral_code(self, db):
        """Referrer and new account each get exactly one entry for the signup."""
        alice = accounts.register("alice")

        bob = accounts.register("bob", referral_code=alice.referral_code.lower())

        assert bob.referred_by == alice
        bob_entries = LedgerEntry.objects.filter(account=bob)
        assert bob_entries.count() == 1
        assert bob_entries[0].category == LedgerCategory.REFERRAL_BONUS
        assert bob_entries[0].credit_delta == Decimal("125.00")

        referral_entries = LedgerEntry.objects.filter(
            account=alice, category=LedgerCategory.REFERRAL_BONUS
        )
        assert referral_entries.count() == 1
        assert referral_entries[0].credit_delta == Decimal("50.00")
        assert referral_entries[0].reference == f"referral:{bob.pk}"

        alice.refresh_from_db()
        assert alice.credit_balance == Decimal("150.00")

    def test_unknown_referral_code(self, db, caplog):
        account = accounts.register("dave", referral_code="NOPE0000")

        assert account.referred_by is None
        assert LedgerEntry.objects.filter(account=account).count() == 1
        assert account.credit_balance == Decimal("100.00")
        assert "NOPE0000" in caplog.text

    def test_configured_amounts(self, settings, db):
        settings.REWARDMAN = {"WELCOME_BONUS": "10", "REFERRER_BONUS": "0", "REFERRED_BONUS": "5"}
        alice = accounts.register("alice")
        bob = accounts.register("bob", referral_code=alice.referral_code)

        assert bob.credit_balance == Decimal("15.00")
        assert LedgerEntry.objects.filter(account=alice).count() == 1

    def test_referrer_bonus_storage_fault_keeps_registration(self, db, caplog):
        alice = accounts.register("alice")
        real_credit = ledger.credit

        def credit(account_id, *args, **kwargs):
            if account_id == alice.pk:
                raise IntegrityError("fk fault")
            return real_credit(account_id, *args, **kwargs)

        with patch.object(ledger, "credit", side_effect=credit):
            bob = accounts.register("bob", referral_code=alice.referral_code)

        assert Account.objects.filter(username="bob").exists()
        assert bob.referred_by == alice
        entries = LedgerEntry.objects.filter(account=bob)
        assert entries.count() == 1
        assert entries[0].reference == "welcome"
        assert bob.credit_balance == Decimal("125.00")
        assert not LedgerEntry.objects.filter(reference=f"referral:{bob.pk}").exists()
        assert "Referral bonus" in caplog.text

    def test_malformed_referrer_bonus_setting(self, settings, db):
        alice = accounts.register("alice")
        settings.REWARDMAN = {"REFERRER_BONUS": "fifty"}

        bob = accounts.register("bob", referral_code=alice.referral_code)

        assert bob.credit_balance == Decimal("125.00")
        assert LedgerEntry.objects.filter(account=alice).count() == 1

    def test_username_required(self, db):
        with pytest.raises(ValidationError) as exc:
            accounts.register("   ")
        assert exc.value.code == "INVALID_USERNAME"

    def test_username_taken(self, account):
        with pytest.raises(ValidationError) as exc:
            accounts.register("alice")
        assert exc.value.code == "USERNAME_TAKEN"
        assert Account.objects.count() == 1

    def test_signal_carries_credentials(self, db, django_capture_on_commit_callbacks):
        received = []

        def handler(sender, account, credentials, referrer, **kwargs):
            received.append((account.username, credentials, referrer))

        account_registered.connect(handler)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                accounts.register("erin", credentials={"token": "abc"})
        finally:
            account_registered.disconnect(handler)

        assert received == [("erin", {"token": "abc"}, None)]


class TestReferral:
    def test_generate_code_is_unique_alphanumeric(self, account):
        code = referral.generate_code(length=12)
        assert len(code) == 12
        assert code.isalnum() and code.upper() == code
        assert code != account.referral_code

    def test_resolve_ignores_inactive(self, account):
        Account.objects.filter(pk=account.pk).update(is_active=False)
        assert referral.resolve("ALICE001") is None

    def test_bonus_not_issued_twice(self, account, other_account):
        assert referral.issue_referrer_bonus(account, other_account)
        assert not referral.issue_referrer_bonus(account, other_account)
        assert LedgerEntry.objects.filter(account=account).count() == 1

    def test_summary(self, db):
        alice = accounts.register("alice")
        accounts.register("bob", referral_code=alice.referral_code)
        accounts.register("carol", referral_code=alice.referral_code)

        summary = referral.summary(alice.pk)

        assert summary.referral_code == alice.referral_code
        assert summary.total_referrals == 2
        assert summary.referred_usernames == ["bob", "carol"]
        assert summary.credits_earned == Decimal("100.00")


class TestRecordLogin:
    def test_streak_rules(self, account, t0):
        assert accounts.record_login(account.pk, now=t0).login_streak == 1
        # < 24h: unchanged
        assert accounts.record_login(account.pk, now=t0 + timedelta(hours=5)).login_streak == 1
        # 24-48h since the last login: +1
        assert accounts.record_login(account.pk, now=t0 + timedelta(hours=30)).login_streak == 2
        assert accounts.record_login(account.pk, now=t0 + timedelta(hours=55)).login_streak == 3
        # >= 48h: reset
        result = accounts.record_login(account.pk, now=t0 + timedelta(hours=110))
        assert result.login_streak == 1
        assert result.streak_reset

        account.refresh_from_db()
        assert account.last_login_at == t0 + timedelta(hours=110)

    @pytest.mark.parametrize(
        "hours,expected",
        [(0, 4), (23.99, 4), (24, 5), (47.99, 5), (48, 1), (500, 1)],
    )
    def test_next_streak(self, t0, hours, expected):
        assert accounts.next_streak(4, t0, t0 + timedelta(hours=hours)) == expected

    def test_first_login(self, t0):
        assert accounts.next_streak(0, None, t0) == 1

    def test_unlocks_streak_achievement(self, account, t0):
        AchievementDef.objects.create(
            code="streak-starter",
            name="Streak Starter",
            achievement_type=AchievementType.STREAK,
            threshold=2,
            reward_credits=Decimal("25"),
        )
        accounts.record_login(account.pk, now=t0)
        result = accounts.record_login(account.pk, now=t0 + timedelta(hours=25))

        assert [a.code for a in result.unlocked] == ["streak-starter"]
        assert result.account.credit_balance == Decimal("25.00")

    def test_unknown_account(self, db, t0):
        with pytest.raises(NotFoundError):
            accounts.record_login(777, now=t0)

    def test_achievement_storage_fault_keeps_login(self, account, t0, caplog):
        with patch.object(
            achievements, "evaluate", side_effect=TransientError("STORAGE_UNAVAILABLE")
        ):
            result = accounts.record_login(account.pk, now=t0)

        assert result.login_streak == 1
        assert result.unlocked == []
        account.refresh_from_db()
        assert account.last_login_at == t0
        assert "Achievement evaluation deferred" in caplog.text


class TestVipInfo:
    def test_info(self, account):
        Account.objects.filter(pk=account.pk).update(points_balance=620, vip_tier="silver")
        info = accounts.vip_info(account.pk)

        assert info.tier == "silver"
        assert info.multiplier == Decimal("1.25")
        assert info.next_tier == "gold"
        assert info.points_to_next == 1380

    def test_deactivate(self, account):
        assert accounts.deactivate(account.pk)
        assert not accounts.deactivate(account.pk)
        assert accounts.get(account.pk) is None
        with pytest.raises(NotFoundError):
            accounts.vip_info(account.pk)
