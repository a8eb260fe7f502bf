"""LedgerEntry model - append-only history of balance changes."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class LedgerCategory(models.TextChoices):
    """Why a balance changed."""

    GAME_WIN = "GAME_WIN", _("Game win")
    BONUS_CLAIM = "BONUS_CLAIM", _("Bonus claim")
    REFERRAL_BONUS = "REFERRAL_BONUS", _("Referral bonus")
    ACHIEVEMENT = "ACHIEVEMENT", _("Achievement")
    ADMIN_CREDIT = "ADMIN_CREDIT", _("Admin credit")


class LedgerEntry(models.Model):
    """
    Immutable record of one balance change.

    Every credit/point mutation on an Account is logged here, with the
    balances it produced. Entries are append-only: never modified or deleted.

    ``reference`` is an optional idempotency key: a non-empty reference can
    appear at most once per account (claim:12, achievement:first-game,
    referral:42).
    """

    account = models.ForeignKey(
        "rewardman.Account",
        on_delete=models.PROTECT,
        related_name="ledger_entries",
        verbose_name=_("account"),
    )
    category = models.CharField(
        _("category"),
        max_length=20,
        choices=LedgerCategory.choices,
        db_index=True,
    )
    credit_delta = models.DecimalField(
        _("credit delta"),
        max_digits=12,
        decimal_places=2,
        help_text=_("Signed credit change"),
    )
    point_delta = models.IntegerField(_("point delta"), help_text=_("Signed point change"))
    credit_balance_after = models.DecimalField(
        _("credit balance after"),
        max_digits=12,
        decimal_places=2,
    )
    points_balance_after = models.IntegerField(_("points balance after"))

    description = models.CharField(_("description"), max_length=200)
    reference = models.CharField(
        _("reference"),
        max_length=100,
        blank=True,
        help_text=_("Idempotency key (ex: claim:123)"),
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    created_by = models.CharField(_("created by"), max_length=100, blank=True)

    class Meta:
        db_table = "rewardman_ledger_entry"
        verbose_name = _("ledger entry")
        verbose_name_plural = _("ledger entries")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["account", "reference"],
                condition=~models.Q(reference=""),
                name="rewardman_unique_entry_reference",
            ),
        ]
        indexes = [
            models.Index(fields=["account", "-created_at"], name="rewardman_entry_acct_date_idx"),
            models.Index(fields=["account", "category"], name="rewardman_entry_acct_cat_idx"),
        ]

    def __str__(self):
        sign = "+" if self.credit_delta >= 0 else ""
        return f"{sign}{self.credit_delta}cr {self.point_delta:+d}pts - {self.description}"
