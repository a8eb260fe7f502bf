"""Ledger service - the only writer of account balances.

Every balance change is one LedgerEntry, written in the same atomic unit
as the balance update and the VIP tier recompute:

    with transaction.atomic():
        account = select_for_update()          # per-account serialization
        account.balances += deltas
        account.vip_tier = tier_for(points)
        LedgerEntry.create(..., *_balance_after)

Notifications and signals are deferred to transaction.on_commit().
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum

from rewardman.exceptions import (
    ConcurrencyConflict,
    LedgerInvariantError,
    NotFoundError,
    ValidationError,
    translate_storage_errors,
)
from rewardman.models import Account, LedgerCategory, LedgerEntry
from rewardman.rewards import CENT
from rewardman.services import notifications
from rewardman.signals import ledger_entry_created, tier_changed
from rewardman.tiers import get_tier_table

logger = logging.getLogger(__name__)

MAX_CREDIT_DELTA = Decimal("9999999999.99")

_NOTIFICATION_TITLES = {
    LedgerCategory.GAME_WIN: "You Won!",
    LedgerCategory.BONUS_CLAIM: "Bonus Claimed!",
    LedgerCategory.REFERRAL_BONUS: "Referral Bonus!",
    LedgerCategory.ACHIEVEMENT: "Achievement Reward!",
    LedgerCategory.ADMIN_CREDIT: "Credits Added",
}


@dataclass(frozen=True)
class BalanceSnapshot:
    """Balances produced by one ledger apply."""

    account_id: int
    credits: Decimal
    points: int
    tier: str
    entry: LedgerEntry
    previous_tier: str

    @property
    def tier_changed(self) -> bool:
        return self.tier != self.previous_tier


@dataclass(frozen=True)
class LedgerAudit:
    """Σ entries vs cached balances for one account."""

    account_id: int
    credit_balance: Decimal
    credit_sum: Decimal
    points_balance: int
    points_sum: int
    cached_tier: str
    expected_tier: str

    @property
    def ok(self) -> bool:
        return (
            self.credit_balance == self.credit_sum
            and self.points_balance == self.points_sum
            and self.cached_tier == self.expected_tier
        )


# ======================================================================
# Points policy
# ======================================================================


def points_for_credits(amount: Decimal, credits_per_point: int | None = None) -> int:
    """
    Loyalty points earned for a credit amount: floor(amount / credits_per_point).

    Non-positive amounts earn nothing.
    """
    if credits_per_point is None:
        from rewardman.conf import rewardman_settings

        credits_per_point = rewardman_settings.CREDITS_PER_POINT
    if credits_per_point <= 0:
        raise ValueError("credits_per_point must be positive.")
    amount = Decimal(amount)
    if amount <= 0:
        return 0
    return int(amount // Decimal(credits_per_point))


# ======================================================================
# Validation
# ======================================================================


def to_credits(value) -> Decimal:
    """Parse a credit amount (max 2 decimal places) or raise ValidationError."""
    if isinstance(value, bool) or value is None:
        raise ValidationError("INVALID_AMOUNT", value=value)
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError("INVALID_AMOUNT", value=value)
    if not amount.is_finite() or abs(amount) > MAX_CREDIT_DELTA:
        raise ValidationError("INVALID_AMOUNT", value=value)
    if amount != amount.quantize(CENT):
        raise ValidationError(
            "INVALID_AMOUNT", message="At most 2 decimal places allowed", value=value
        )
    return amount.quantize(CENT)


def to_points(value) -> int:
    """Parse a whole point amount or raise ValidationError."""
    if isinstance(value, bool) or value is None:
        raise ValidationError("INVALID_AMOUNT", message="Points must be an integer", value=value)
    if isinstance(value, int):
        return value
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError("INVALID_AMOUNT", message="Points must be an integer", value=value)
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError("INVALID_AMOUNT", message="Points must be an integer", value=value)
    return int(number)


# ======================================================================
# Writes
# ======================================================================


def lock_account(account_id: int) -> Account:
    """
    Get active account with row-level lock for mutation.

    MUST be called inside transaction.atomic().
    """
    try:
        return Account.objects.select_for_update().get(pk=account_id, is_active=True)
    except Account.DoesNotExist:
        raise NotFoundError("ACCOUNT_NOT_FOUND", account_id=account_id)


@translate_storage_errors
def apply(
    account_id: int,
    credit_delta,
    point_delta,
    category: str,
    description: str,
    reference: str = "",
    created_by: str = "",
    notify: bool = True,
) -> BalanceSnapshot:
    """
    Apply one balance change to an account.

    Args:
        account_id: Account primary key
        credit_delta: Signed credit change (max 2 decimal places)
        point_delta: Signed point change
        category: LedgerCategory value
        description: Human-readable reason
        reference: Idempotency key, unique per account when non-empty
        created_by: Who triggered the change
        notify: Emit a notification after commit

    Returns:
        BalanceSnapshot with the new balances and the created entry

    Raises:
        ValidationError: Unknown category or malformed amounts
        NotFoundError: Unknown/inactive account
        ConcurrencyConflict: ``reference`` already recorded for this account
        LedgerInvariantError: A balance would become negative
    """
    if category not in LedgerCategory.values:
        raise ValidationError("INVALID_CATEGORY", category=category)
    credit_delta = to_credits(credit_delta)
    point_delta = to_points(point_delta)
    if not credit_delta and not point_delta:
        raise ValidationError("INVALID_AMOUNT", message="Empty ledger entry")

    try:
        with transaction.atomic():
            account = lock_account(account_id)

            new_credits = account.credit_balance + credit_delta
            new_points = account.points_balance + point_delta
            if new_credits < 0 or new_points < 0:
                raise LedgerInvariantError(
                    account_id=account_id,
                    credit_balance=account.credit_balance,
                    credit_delta=credit_delta,
                    points_balance=account.points_balance,
                    point_delta=point_delta,
                )

            previous_tier = account.vip_tier
            account.credit_balance = new_credits
            account.points_balance = new_points
            update_fields = ["credit_balance", "points_balance", "updated_at"]
            if point_delta:
                account.vip_tier = get_tier_table().tier_for(new_points).name
                update_fields.append("vip_tier")
            account.save(update_fields=update_fields)

            entry = LedgerEntry.objects.create(
                account=account,
                category=category,
                credit_delta=credit_delta,
                point_delta=point_delta,
                credit_balance_after=new_credits,
                points_balance_after=new_points,
                description=description[:200],
                reference=reference,
                created_by=created_by,
            )

            if notify and credit_delta > 0:
                notifications.notify(
                    account.pk,
                    _NOTIFICATION_TITLES[category],
                    f"You received {credit_delta} credits: {description}",
                    category,
                    entry_id=entry.pk,
                )
            transaction.on_commit(
                lambda: ledger_entry_created.send(sender=LedgerEntry, entry=entry)
            )
            if account.vip_tier != previous_tier:
                _on_tier_change(account, previous_tier)
    except IntegrityError as exc:
        if reference and LedgerEntry.objects.filter(
            account_id=account_id, reference=reference
        ).exists():
            raise ConcurrencyConflict(
                "DUPLICATE_ENTRY", account_id=account_id, reference=reference
            ) from exc
        raise

    logger.info(
        "Ledger %s account=%s credits=%s points=%s ref=%s",
        category,
        account_id,
        credit_delta,
        point_delta,
        reference or "-",
    )
    return BalanceSnapshot(
        account_id=account.pk,
        credits=account.credit_balance,
        points=account.points_balance,
        tier=account.vip_tier,
        entry=entry,
        previous_tier=previous_tier,
    )


def _on_tier_change(account: Account, previous_tier: str) -> None:
    new_tier = account.vip_tier
    logger.info("Account %s tier %s -> %s", account.pk, previous_tier, new_tier)
    notifications.notify(
        account.pk,
        "VIP Tier Changed!",
        f"You are now {new_tier.title()}.",
        "VIP",
        old_tier=previous_tier,
        new_tier=new_tier,
    )
    transaction.on_commit(
        lambda: tier_changed.send(
            sender=Account, account=account, old_tier=previous_tier, new_tier=new_tier
        )
    )


def credit(
    account_id: int,
    amount,
    category: str,
    description: str,
    reference: str = "",
    created_by: str = "",
    notify: bool = True,
) -> BalanceSnapshot:
    """Credit ``amount`` and the points the points policy grants for it."""
    amount = to_credits(amount)
    if amount <= 0:
        raise ValidationError("INVALID_AMOUNT", message="Amount must be positive", value=amount)
    return apply(
        account_id,
        amount,
        points_for_credits(amount),
        category,
        description,
        reference=reference,
        created_by=created_by,
        notify=notify,
    )


def admin_credit(account_id: int, amount, description: str, created_by: str = "") -> BalanceSnapshot:
    """Manual credit by staff (ADMIN_CREDIT)."""
    return credit(
        account_id,
        amount,
        LedgerCategory.ADMIN_CREDIT,
        description or "Credits added by admin",
        created_by=created_by,
    )


# ======================================================================
# Reads
# ======================================================================


def history(
    account_id: int,
    category: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> tuple[list[LedgerEntry], int]:
    """Ledger entries (most recent first) and the total count."""
    if limit is None:
        from rewardman.conf import rewardman_settings

        limit = rewardman_settings.HISTORY_LIMIT
    qs = LedgerEntry.objects.filter(account_id=account_id)
    if category:
        qs = qs.filter(category=category)
    return list(qs[offset : offset + limit]), qs.count()


def stats(account_id: int) -> dict:
    """Totals used by the VIP page."""
    agg = LedgerEntry.objects.filter(account_id=account_id).aggregate(
        earned=Sum("credit_delta", filter=Q(credit_delta__gt=0)),
        games_won=Count("id", filter=Q(category=LedgerCategory.GAME_WIN)),
        bonuses_claimed=Count("id", filter=Q(category=LedgerCategory.BONUS_CLAIM)),
    )
    return {
        "total_credits_earned": agg["earned"] or Decimal("0.00"),
        "games_won": agg["games_won"],
        "bonuses_claimed": agg["bonuses_claimed"],
    }


def audit(account_id: int) -> LedgerAudit:
    """Recompute balances from the entry log and compare with the cache."""
    try:
        account = Account.objects.get(pk=account_id)
    except Account.DoesNotExist:
        raise NotFoundError("ACCOUNT_NOT_FOUND", account_id=account_id)

    agg = LedgerEntry.objects.filter(account_id=account_id).aggregate(
        credits=Sum("credit_delta"),
        points=Sum("point_delta"),
    )
    return LedgerAudit(
        account_id=account.pk,
        credit_balance=account.credit_balance,
        credit_sum=agg["credits"] or Decimal("0.00"),
        points_balance=account.points_balance,
        points_sum=agg["points"] or 0,
        cached_tier=account.vip_tier,
        expected_tier=get_tier_table().tier_for(account.points_balance).name,
    )
