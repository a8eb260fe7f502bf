"""
Offer model - cooldown-gated reward actions.

Two variants share one table:
- game:  random reward from a [min, max] range or a segment table,
         optionally gated by a minimum VIP tier
- bonus: fixed credit amount, optionally gated by a login streak

Offers are administered outside Rewardman. At claim time the core only
reads them, through rewardman.catalog (which snapshots and validates).
"""

from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _


class OfferKind(models.TextChoices):
    GAME = "game", _("Game")
    BONUS = "bonus", _("Bonus")


class RewardMode(models.TextChoices):
    RANGE = "range", _("Uniform range")
    SEGMENTS = "segments", _("Segment table")


class SelectionPolicy(models.TextChoices):
    UNIFORM = "uniform", _("Uniform over segments")
    WEIGHTED = "weighted", _("Proportional to weight")


class Offer(models.Model):
    """Cooldown-gated game or bonus definition."""

    code = models.SlugField(_("code"), max_length=50, unique=True)
    name = models.CharField(_("name"), max_length=100)
    description = models.TextField(_("description"), blank=True)
    kind = models.CharField(_("kind"), max_length=10, choices=OfferKind.choices)
    cooldown = models.DurationField(
        _("cooldown"),
        default=timedelta(hours=24),
        help_text=_("Minimum time between claims by the same account"),
    )

    # Game
    reward_mode = models.CharField(
        _("reward mode"),
        max_length=10,
        choices=RewardMode.choices,
        default=RewardMode.RANGE,
    )
    min_reward = models.DecimalField(
        _("minimum reward"), max_digits=12, decimal_places=2, default=Decimal("5")
    )
    max_reward = models.DecimalField(
        _("maximum reward"), max_digits=12, decimal_places=2, default=Decimal("50")
    )
    segments = models.JSONField(
        _("segments"),
        default=list,
        blank=True,
        help_text=_('[{"value": 10, "label": "10", "weight": 25}, ...]'),
    )
    selection = models.CharField(
        _("segment selection"),
        max_length=10,
        choices=SelectionPolicy.choices,
        default=SelectionPolicy.UNIFORM,
    )
    min_tier = models.CharField(
        _("minimum VIP tier"),
        max_length=20,
        blank=True,
        help_text=_("Empty = open to every tier"),
    )

    # Bonus
    credit_amount = models.DecimalField(
        _("credit amount"), max_digits=12, decimal_places=2, default=Decimal("10")
    )
    streak_required = models.IntegerField(
        _("streak required"),
        default=0,
        help_text=_("Login streak needed to claim (0 = none)"),
    )

    is_active = models.BooleanField(_("active"), default=True, db_index=True)
    display_order = models.IntegerField(_("display order"), default=0)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "rewardman_offer"
        verbose_name = _("offer")
        verbose_name_plural = _("offers")
        ordering = ["kind", "display_order", "created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(min_reward__lte=models.F("max_reward")),
                name="rewardman_offer_min_lte_max",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def clean(self):
        """Reject configurations the catalog would refuse at claim time."""
        from rewardman.catalog import validate_offer

        try:
            validate_offer(self)
        except ValueError as exc:
            raise ValidationError(str(exc))
