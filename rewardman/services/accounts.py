"""Account service - registration, logins and VIP info.

Registration is one atomic unit:
    Account row -> referrer bonus (best-effort savepoint) -> welcome entry
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from rewardman.exceptions import NotFoundError, ValidationError, translate_storage_errors
from rewardman.models import Account, LedgerCategory
from rewardman.services import ledger, notifications, offers, referral
from rewardman.signals import account_registered
from rewardman.tiers import get_tier_table

logger = logging.getLogger(__name__)

STREAK_WINDOW = timedelta(hours=24)
STREAK_EXPIRY = timedelta(hours=48)


@dataclass(frozen=True)
class LoginResult:
    """Account state after a login was recorded."""

    account: Account
    login_streak: int
    previous_streak: int
    unlocked: list = field(default_factory=list)

    @property
    def streak_reset(self) -> bool:
        return self.previous_streak > 0 and self.login_streak == 1


@dataclass(frozen=True)
class VipInfo:
    """Tier status shown on the VIP page."""

    tier: str
    multiplier: Decimal
    points: int
    next_tier: str | None
    points_to_next: int | None
    total_credits_earned: Decimal
    games_won: int
    bonuses_claimed: int


# ======================================================================
# Reads
# ======================================================================


def get(account_id: int) -> Account | None:
    """Get active account by id."""
    try:
        return Account.objects.get(pk=account_id, is_active=True)
    except Account.DoesNotExist:
        return None


def get_by_username(username: str) -> Account | None:
    """Get active account by username."""
    try:
        return Account.objects.get(username=username, is_active=True)
    except Account.DoesNotExist:
        return None


def get_by_referral_code(code: str) -> Account | None:
    return referral.resolve(code)


def vip_info(account_id: int) -> VipInfo:
    """
    Current tier, multiplier and distance to the next tier.

    Raises:
        NotFoundError: Unknown account
    """
    account = get(account_id)
    if account is None:
        raise NotFoundError("ACCOUNT_NOT_FOUND", account_id=account_id)

    table = get_tier_table()
    tier = table.tier_for(account.points_balance)
    upcoming = table.next_tier(account.points_balance)
    totals = ledger.stats(account.pk)
    return VipInfo(
        tier=tier.name,
        multiplier=tier.multiplier,
        points=account.points_balance,
        next_tier=upcoming.name if upcoming else None,
        points_to_next=table.points_to_next(account.points_balance),
        total_credits_earned=totals["total_credits_earned"],
        games_won=totals["games_won"],
        bonuses_claimed=totals["bonuses_claimed"],
    )


# ======================================================================
# Writes
# ======================================================================


@translate_storage_errors
def register(
    username: str,
    credentials=None,
    referral_code: str | None = None,
    email: str = "",
) -> Account:
    """
    Create an account with its welcome credits.

    ``credentials`` are not stored here; they are handed to
    ``account_registered`` receivers for the identity layer to persist.

    An unknown referral code registers the account without a referrer.

    Raises:
        ValidationError: INVALID_USERNAME or USERNAME_TAKEN
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("INVALID_USERNAME")
    if Account.objects.filter(username=username).exists():
        raise ValidationError("USERNAME_TAKEN", username=username)

    referrer = referral.resolve(referral_code)

    try:
        with transaction.atomic():
            account = Account.objects.create(
                username=username,
                email=email,
                referral_code=referral.generate_code(),
                referred_by=referrer,
                vip_tier=get_tier_table().lowest.name,
            )

            if referrer is not None:
                referral.issue_referrer_bonus(referrer, account)

            _issue_welcome_bonus(account, referred=referrer is not None)

            transaction.on_commit(
                lambda: account_registered.send(
                    sender=Account, account=account, credentials=credentials, referrer=referrer
                )
            )
    except IntegrityError as exc:
        if Account.objects.filter(username=username).exists():
            raise ValidationError("USERNAME_TAKEN", username=username) from exc
        raise

    logger.info(
        "Account registered: %s (referred by %s)",
        username,
        referrer.username if referrer else "-",
    )
    account.refresh_from_db()
    return account


def _issue_welcome_bonus(account: Account, referred: bool) -> None:
    """The new account's first entry: welcome credits plus the referred bonus."""
    from rewardman.conf import rewardman_settings

    amount = Decimal(rewardman_settings.WELCOME_BONUS)
    if referred:
        amount += Decimal(rewardman_settings.REFERRED_BONUS)
    if amount <= 0:
        return

    if referred:
        category = LedgerCategory.REFERRAL_BONUS
        description = "Welcome bonus + referral credits"
    else:
        category = LedgerCategory.BONUS_CLAIM
        description = "Welcome bonus credits"

    ledger.credit(
        account.pk,
        amount,
        category,
        description,
        reference="welcome",
        notify=False,
    )
    notifications.notify(
        account.pk,
        "Welcome!",
        f"Welcome to the rewards program! You received {amount} credits.",
        category,
    )


def next_streak(current: int, last_login_at: datetime | None, now: datetime) -> int:
    """
    Login streak after a login at ``now``.

    First login starts at 1; 24-48h since the last login extends the
    streak; 48h or more resets it to 1; under 24h leaves it unchanged.
    """
    if last_login_at is None:
        return 1
    elapsed = now - last_login_at
    if elapsed >= STREAK_EXPIRY:
        return 1
    if elapsed >= STREAK_WINDOW:
        return current + 1
    return max(current, 1)


@translate_storage_errors
def record_login(account_id: int, now: datetime | None = None) -> LoginResult:
    """
    Record a login and update the login streak.

    Raises:
        NotFoundError: Unknown or inactive account
    """
    now = now or timezone.now()

    with transaction.atomic():
        account = ledger.lock_account(account_id)
        previous = account.login_streak
        account.login_streak = next_streak(previous, account.last_login_at, now)
        account.last_login_at = now
        account.save(update_fields=["login_streak", "last_login_at", "updated_at"])

    logger.debug("Login account=%s streak %s -> %s", account_id, previous, account.login_streak)

    unlocked = offers.evaluate_achievements(account_id)
    if unlocked:
        account.refresh_from_db()
    return LoginResult(
        account=account,
        login_streak=account.login_streak,
        previous_streak=previous,
        unlocked=unlocked,
    )


def deactivate(account_id: int) -> bool:
    """Deactivate an account. Its ledger is kept."""
    updated = Account.objects.filter(pk=account_id, is_active=True).update(
        is_active=False, updated_at=timezone.now()
    )
    if updated:
        logger.info("Account %s deactivated", account_id)
    return bool(updated)
