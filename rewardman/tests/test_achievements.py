"""Tests for the achievement engine."""

from decimal import Decimal
from unittest.mock import patch

import pytest

from rewardman.exceptions import ConcurrencyConflict, NotFoundError
from rewardman.models import (
    Account,
    AchievementDef,
    AchievementType,
    AchievementUnlock,
    LedgerCategory,
    LedgerEntry,
)
from rewardman.services import achievements


pytestmark = pytest.mark.django_db


class TestEvaluate:
    def test_nothing_reached(self, account, first_game_achievement):
        assert achievements.evaluate(account.pk) == []
        assert not AchievementUnlock.objects.exists()

    def test_unlock_pays_reward_once(self, account, first_game_achievement):
        Account.objects.filter(pk=account.pk).update(games_played=1)

        unlocked = achievements.evaluate(account.pk)

        assert unlocked == [first_game_achievement]
        unlock = AchievementUnlock.objects.get(account=account)
        assert unlock.is_unlocked
        assert unlock.unlocked_at is not None

        entry = LedgerEntry.objects.get(account=account)
        assert entry.category == LedgerCategory.ACHIEVEMENT
        assert entry.credit_delta == Decimal("10.00")
        assert entry.point_delta == 5
        assert entry.reference == "achievement:first-game"

    def test_idempotent(self, account, first_game_achievement):
        Account.objects.filter(pk=account.pk).update(games_played=3)

        achievements.evaluate(account.pk)
        assert achievements.evaluate(account.pk) == []
        assert achievements.evaluate(account.pk) == []

        assert LedgerEntry.objects.filter(category=LedgerCategory.ACHIEVEMENT).count() == 1
        account.refresh_from_db()
        assert account.credit_balance == Decimal("10.00")

    def test_concurrent_unlock_loses_cleanly(self, account, first_game_achievement):
        """A caller that read a stale "not unlocked" state pays nothing."""
        Account.objects.filter(pk=account.pk).update(games_played=1)
        achievements.evaluate(account.pk)

        with patch("rewardman.services.achievements._unlocked_ids", return_value=set()):
            assert achievements.evaluate(account.pk) == []

        assert AchievementUnlock.objects.count() == 1
        assert LedgerEntry.objects.count() == 1

    def test_unlock_conflict_raised_directly(self, account, first_game_achievement):
        AchievementUnlock.objects.create(
            account=account, achievement=first_game_achievement, progress=1, is_unlocked=True
        )
        with pytest.raises(ConcurrencyConflict) as exc:
            achievements._unlock(account.pk, first_game_achievement, 1)
        assert exc.value.code == "ALREADY_UNLOCKED"

    def test_existing_locked_row_is_flipped(self, account, first_game_achievement):
        AchievementUnlock.objects.create(
            account=account, achievement=first_game_achievement, progress=0
        )
        Account.objects.filter(pk=account.pk).update(games_played=1)

        assert achievements.evaluate(account.pk) == [first_game_achievement]
        unlock = AchievementUnlock.objects.get()
        assert unlock.is_unlocked
        assert unlock.progress == 1

    def test_chained_unlocks(self, account, first_game_achievement):
        """A reward that crosses another threshold is unlocked in the same call."""
        points_goal = AchievementDef.objects.create(
            code="five-points",
            name="Five Points",
            achievement_type=AchievementType.POINTS,
            threshold=5,
            reward_credits=Decimal("1"),
        )
        Account.objects.filter(pk=account.pk).update(games_played=1)

        unlocked = achievements.evaluate(account.pk)

        assert unlocked == [first_game_achievement, points_goal]

    def test_inactive_definition_ignored(self, account, first_game_achievement):
        AchievementDef.objects.filter(pk=first_game_achievement.pk).update(is_active=False)
        Account.objects.filter(pk=account.pk).update(games_played=10)
        assert achievements.evaluate(account.pk) == []

    def test_streak_type(self, account):
        streak = AchievementDef.objects.create(
            code="streak-starter",
            name="Streak Starter",
            achievement_type=AchievementType.STREAK,
            threshold=3,
            reward_credits=Decimal("25"),
            reward_points=15,
        )
        Account.objects.filter(pk=account.pk).update(login_streak=3)
        assert achievements.evaluate(account.pk) == [streak]

    def test_unknown_account(self, db):
        with pytest.raises(NotFoundError):
            achievements.evaluate(999)


class TestProgress:
    def test_reports_progress_and_unlocks(self, account, first_game_achievement):
        enthusiast = AchievementDef.objects.create(
            code="game-enthusiast",
            name="Game Enthusiast",
            achievement_type=AchievementType.GAMES_PLAYED,
            threshold=10,
            reward_credits=Decimal("50"),
            reward_points=25,
        )
        Account.objects.filter(pk=account.pk).update(games_played=4)
        achievements.evaluate(account.pk)

        report = {p.achievement.code: p for p in achievements.progress(account.pk)}

        assert report["first-game"].is_unlocked
        assert report["first-game"].percent == 100
        assert not report[enthusiast.code].is_unlocked
        assert report[enthusiast.code].progress == 4
        assert report[enthusiast.code].percent == 40
