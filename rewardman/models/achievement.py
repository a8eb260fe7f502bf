"""Achievement models - one-time rewards for crossing progress thresholds."""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class AchievementType(models.TextChoices):
    """Which account counter an achievement tracks."""

    GAMES_PLAYED = "GAMES_PLAYED", _("Games played")
    STREAK = "STREAK", _("Login streak")
    POINTS = "POINTS", _("Loyalty points")


class AchievementDef(models.Model):
    """Achievement definition."""

    code = models.SlugField(_("code"), max_length=50, unique=True)
    name = models.CharField(_("name"), max_length=100)
    description = models.CharField(_("description"), max_length=200, blank=True)
    achievement_type = models.CharField(
        _("type"),
        max_length=20,
        choices=AchievementType.choices,
    )
    threshold = models.PositiveIntegerField(_("threshold"))
    reward_credits = models.DecimalField(
        _("reward credits"), max_digits=12, decimal_places=2, default=Decimal("0")
    )
    reward_points = models.PositiveIntegerField(_("reward points"), default=0)
    is_active = models.BooleanField(_("active"), default=True)

    class Meta:
        db_table = "rewardman_achievement"
        verbose_name = _("achievement")
        verbose_name_plural = _("achievements")
        ordering = ["achievement_type", "threshold"]

    def __str__(self):
        return f"{self.name} ({self.achievement_type} >= {self.threshold})"


class AchievementUnlock(models.Model):
    """
    Per-account achievement state.

    is_unlocked flips False → True exactly once and never reverses.
    Unique (account, achievement) makes the first unlock a conditional write.
    """

    account = models.ForeignKey(
        "rewardman.Account",
        on_delete=models.PROTECT,
        related_name="achievement_unlocks",
        verbose_name=_("account"),
    )
    achievement = models.ForeignKey(
        AchievementDef,
        on_delete=models.PROTECT,
        related_name="unlocks",
        verbose_name=_("achievement"),
    )
    progress = models.PositiveIntegerField(_("progress"), default=0)
    is_unlocked = models.BooleanField(_("unlocked"), default=False)
    unlocked_at = models.DateTimeField(_("unlocked at"), null=True, blank=True)

    class Meta:
        db_table = "rewardman_achievement_unlock"
        verbose_name = _("achievement unlock")
        verbose_name_plural = _("achievement unlocks")
        constraints = [
            models.UniqueConstraint(
                fields=["account", "achievement"],
                name="rewardman_unique_achievement_per_account",
            ),
        ]

    def __str__(self):
        state = "unlocked" if self.is_unlocked else f"{self.progress}/{self.achievement.threshold}"
        return f"{self.account_id}:{self.achievement.code} [{state}]"
