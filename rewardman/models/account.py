"""Account model - a user's loyalty identity and balances.

Balances are a cache of the ledger:
    credit_balance == Σ LedgerEntry.credit_delta
    points_balance == Σ LedgerEntry.point_delta
    vip_tier       == tier_for(points_balance).name

Only rewardman.services.ledger writes the three fields above, always under
select_for_update() inside transaction.atomic().
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class Account(models.Model):
    """
    Loyalty account.

    Identity (credentials, sessions) lives outside Rewardman; an account is
    created once at registration and never deleted, only deactivated.
    """

    username = models.CharField(_("username"), max_length=150, unique=True)
    email = models.EmailField(_("email"), blank=True)
    referral_code = models.CharField(
        _("referral code"),
        max_length=32,
        unique=True,
        help_text=_("Code other users enter at registration"),
    )
    referred_by = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="referrals",
        verbose_name=_("referred by"),
    )

    # Balances (ledger cache)
    credit_balance = models.DecimalField(
        _("credit balance"),
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    points_balance = models.IntegerField(_("points balance"), default=0)
    vip_tier = models.CharField(_("VIP tier"), max_length=20, default="bronze")

    # Counters
    login_streak = models.IntegerField(_("login streak"), default=0)
    last_login_at = models.DateTimeField(_("last login"), null=True, blank=True)
    games_played = models.IntegerField(_("games played"), default=0)

    # Status
    is_active = models.BooleanField(_("active"), default=True, db_index=True)
    metadata = models.JSONField(_("metadata"), default=dict, blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "rewardman_account"
        verbose_name = _("account")
        verbose_name_plural = _("accounts")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(credit_balance__gte=0),
                name="rewardman_account_credit_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(points_balance__gte=0),
                name="rewardman_account_points_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.username}: {self.credit_balance}cr | {self.points_balance}pts | {self.vip_tier}"
