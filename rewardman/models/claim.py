"""ClaimRecord model - successful offer claims (cooldown source of truth)."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class ClaimRecord(models.Model):
    """
    One row per successful claim of (account, offer).

    ``sequence`` numbers claims 1, 2, 3 … per (account, offer). The unique
    constraint on (account, offer, sequence) is the compare-and-swap that
    makes the cooldown gate race-free: two requests that both saw claim N
    as the latest both try to insert N+1, and only one insert can win.

    Never mutated after creation.
    """

    account = models.ForeignKey(
        "rewardman.Account",
        on_delete=models.PROTECT,
        related_name="claims",
        verbose_name=_("account"),
    )
    offer = models.ForeignKey(
        "rewardman.Offer",
        on_delete=models.PROTECT,
        related_name="claims",
        verbose_name=_("offer"),
    )
    sequence = models.PositiveIntegerField(_("sequence"))
    claimed_at = models.DateTimeField(_("claimed at"), db_index=True)

    class Meta:
        db_table = "rewardman_claim_record"
        verbose_name = _("claim record")
        verbose_name_plural = _("claim records")
        ordering = ["-claimed_at", "-sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["account", "offer", "sequence"],
                name="rewardman_unique_claim_sequence",
            ),
        ]
        indexes = [
            models.Index(
                fields=["account", "offer", "-sequence"], name="rewardman_claim_seq_idx"
            ),
        ]

    def __str__(self):
        return f"{self.account_id}:{self.offer_id}#{self.sequence} @ {self.claimed_at:%Y-%m-%d %H:%M:%S}"
