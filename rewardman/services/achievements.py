"""Achievement service - threshold unlocks with one-time rewards.

evaluate() is idempotent and safe to run concurrently: the False -> True
flip of AchievementUnlock.is_unlocked is a conditional write, and the
reward entry carries the reference "achievement:<code>", so each
achievement is rewarded at most once per account.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import IntegrityError, transaction
from django.utils import timezone

from rewardman.exceptions import ConcurrencyConflict, NotFoundError, translate_storage_errors
from rewardman.models import (
    Account,
    AchievementDef,
    AchievementType,
    AchievementUnlock,
    LedgerCategory,
)
from rewardman.services import ledger, notifications
from rewardman.signals import achievement_unlocked

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementProgress:
    """Progress of one account towards one achievement."""

    achievement: AchievementDef
    progress: int
    is_unlocked: bool
    unlocked_at: datetime | None = None

    @property
    def percent(self) -> int:
        if self.is_unlocked or not self.achievement.threshold:
            return 100
        return min(100, self.progress * 100 // self.achievement.threshold)


def progress_value(account: Account, achievement_type: str) -> int:
    """Current value of the counter an achievement type tracks."""
    if achievement_type == AchievementType.GAMES_PLAYED:
        return account.games_played
    if achievement_type == AchievementType.STREAK:
        return account.login_streak
    if achievement_type == AchievementType.POINTS:
        return account.points_balance
    return 0


def _get_account(account_id: int) -> Account:
    try:
        return Account.objects.get(pk=account_id)
    except Account.DoesNotExist:
        raise NotFoundError("ACCOUNT_NOT_FOUND", account_id=account_id)


def _unlocked_ids(account_id: int) -> set[int]:
    return set(
        AchievementUnlock.objects.filter(account_id=account_id, is_unlocked=True).values_list(
            "achievement_id", flat=True
        )
    )


@translate_storage_errors
def evaluate(account_id: int) -> list[AchievementDef]:
    """
    Unlock every active achievement whose threshold the account has reached.

    Repeats until a pass unlocks nothing, so an achievement reward that
    pushes another counter over its threshold is picked up in the same call.

    Returns:
        Achievements newly unlocked by this call (empty if none)

    Raises:
        NotFoundError: Unknown account
    """
    definitions = list(AchievementDef.objects.filter(is_active=True))
    unlocked = []

    while True:
        account = _get_account(account_id)
        done = _unlocked_ids(account_id)

        newly = []
        for achievement in definitions:
            if achievement.pk in done:
                continue
            value = progress_value(account, achievement.achievement_type)
            if value < achievement.threshold:
                continue
            try:
                _unlock(account.pk, achievement, value)
            except ConcurrencyConflict:
                logger.info(
                    "Achievement %s already unlocked for account %s",
                    achievement.code,
                    account.pk,
                )
                continue
            newly.append(achievement)

        if not newly:
            return unlocked
        unlocked.extend(newly)


def _unlock(account_id: int, achievement: AchievementDef, value: int) -> None:
    """
    Flip the unlock and pay the reward in one atomic unit.

    Raises:
        ConcurrencyConflict: Another caller unlocked it first
    """
    now = timezone.now()

    with transaction.atomic():
        claimed = AchievementUnlock.objects.filter(
            account_id=account_id, achievement=achievement, is_unlocked=False
        ).update(is_unlocked=True, progress=value, unlocked_at=now)

        if not claimed:
            try:
                with transaction.atomic():
                    AchievementUnlock.objects.create(
                        account_id=account_id,
                        achievement=achievement,
                        progress=value,
                        is_unlocked=True,
                        unlocked_at=now,
                    )
            except IntegrityError:
                raise ConcurrencyConflict(
                    "ALREADY_UNLOCKED", account_id=account_id, achievement=achievement.code
                )

        if achievement.reward_credits or achievement.reward_points:
            ledger.apply(
                account_id,
                achievement.reward_credits,
                achievement.reward_points,
                LedgerCategory.ACHIEVEMENT,
                f"Achievement unlocked: {achievement.name}",
                reference=f"achievement:{achievement.code}",
                notify=False,
            )

        notifications.notify(
            account_id,
            "Achievement Unlocked!",
            f'You unlocked "{achievement.name}" and earned {achievement.reward_credits} credits!',
            "ACHIEVEMENT",
            achievement=achievement.code,
        )
        transaction.on_commit(
            lambda: achievement_unlocked.send(
                sender=AchievementDef, account_id=account_id, achievement=achievement
            )
        )

    logger.info("Achievement %s unlocked for account %s", achievement.code, account_id)


def progress(account_id: int) -> list[AchievementProgress]:
    """Every active achievement with the account's progress. No side effects."""
    account = _get_account(account_id)
    unlocks = {
        u.achievement_id: u for u in AchievementUnlock.objects.filter(account_id=account_id)
    }

    result = []
    for achievement in AchievementDef.objects.filter(is_active=True):
        unlock = unlocks.get(achievement.pk)
        if unlock and unlock.is_unlocked:
            result.append(
                AchievementProgress(
                    achievement=achievement,
                    progress=max(unlock.progress, achievement.threshold),
                    is_unlocked=True,
                    unlocked_at=unlock.unlocked_at,
                )
            )
        else:
            result.append(
                AchievementProgress(
                    achievement=achievement,
                    progress=progress_value(account, achievement.achievement_type),
                    is_unlocked=False,
                )
            )
    return result
