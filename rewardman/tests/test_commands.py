"""Tests for management commands."""

from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from rewardman.models import Account, AchievementDef, LedgerCategory, Offer, OfferKind
from rewardman.services import accounts, ledger


pytestmark = pytest.mark.django_db


class TestSeed:
    def test_creates_catalog(self):
        out = StringIO()
        call_command("rewardman_seed", stdout=out)

        assert Offer.objects.filter(kind=OfferKind.GAME).count() == 3
        assert Offer.objects.filter(kind=OfferKind.BONUS).count() == 3
        assert AchievementDef.objects.count() == 7
        assert "Seeded 13" in out.getvalue()

        streak = Offer.objects.get(code="streak-bonus")
        assert streak.streak_required == 7
        assert streak.cooldown.days == 7

    def test_idempotent(self):
        call_command("rewardman_seed", stdout=StringIO())
        Offer.objects.filter(code="wheel-game").update(max_reward=Decimal("500"))

        out = StringIO()
        call_command("rewardman_seed", stdout=out)

        assert "Seeded 0" in out.getvalue()
        assert Offer.objects.count() == 6
        assert Offer.objects.get(code="wheel-game").max_reward == Decimal("500")

    def test_seeded_offers_are_playable(self):
        call_command("rewardman_seed", stdout=StringIO())
        account = accounts.register("alice")

        from rewardman.services import offers

        result = offers.play_game(account.pk, "wheel-game")
        assert Decimal("5") <= result.amount <= Decimal("100")
        assert [a.code for a in result.unlocked] == ["first-game"]


class TestAudit:
    def test_clean(self, account):
        ledger.credit(account.pk, 10, LedgerCategory.GAME_WIN, "x")
        out = StringIO()
        call_command("rewardman_audit", stdout=out)
        assert "no drift" in out.getvalue()

    def test_drift_fails(self, account, other_account):
        ledger.credit(account.pk, 10, LedgerCategory.GAME_WIN, "x")
        Account.objects.filter(pk=account.pk).update(points_balance=999)

        err = StringIO()
        with pytest.raises(CommandError):
            call_command("rewardman_audit", stdout=StringIO(), stderr=err)
        assert f"Account {account.pk}" in err.getvalue()

    def test_single_account(self, account, other_account):
        Account.objects.filter(pk=account.pk).update(credit_balance=Decimal("5"))
        out = StringIO()
        call_command("rewardman_audit", account=other_account.pk, stdout=out)
        assert "Audited 1 accounts" in out.getvalue()
