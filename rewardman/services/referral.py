"""Referral service - codes, referrer bonuses and referral summaries."""

import logging
import secrets
import string
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import DatabaseError, transaction

from rewardman.exceptions import ConcurrencyConflict, RewardmanError
from rewardman.models import Account, LedgerCategory, LedgerEntry

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class ReferralSummary:
    """Referral stats for one account."""

    referral_code: str
    total_referrals: int
    credits_earned: Decimal
    referred_usernames: list


def generate_code(length: int | None = None) -> str:
    """Random referral code that no account uses yet."""
    if length is None:
        from rewardman.conf import rewardman_settings

        length = rewardman_settings.REFERRAL_CODE_LENGTH

    while True:
        code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
        if not Account.objects.filter(referral_code=code).exists():
            return code


def resolve(code: str | None) -> Account | None:
    """
    Active account owning a referral code.

    Unknown codes are not an error: registration proceeds without a referrer.
    """
    if not code:
        return None
    normalized = code.strip().upper()
    try:
        return Account.objects.get(referral_code=normalized, is_active=True)
    except Account.DoesNotExist:
        logger.warning("Unknown referral code %r ignored", code)
        return None


def issue_referrer_bonus(referrer: Account, account: Account) -> bool:
    """
    Credit the referrer for ``account`` signing up with their code.

    Best-effort: a failed bonus is logged and never blocks registration.
    The reference "referral:<account id>" makes the bonus one-time.
    """
    from rewardman.conf import rewardman_settings
    from rewardman.services import ledger

    try:
        amount = Decimal(rewardman_settings.REFERRER_BONUS)
        if amount <= 0:
            return False
        with transaction.atomic():
            ledger.credit(
                referrer.pk,
                amount,
                LedgerCategory.REFERRAL_BONUS,
                f"Referral bonus for inviting {account.username}",
                reference=f"referral:{account.pk}",
            )
    except ConcurrencyConflict:
        logger.info("Referral bonus for account %s already issued", account.pk)
        return False
    except (RewardmanError, DatabaseError, InvalidOperation) as exc:
        logger.warning(
            "Referral bonus for %s -> %s skipped: %r", referrer.pk, account.pk, exc
        )
        return False
    return True


def summary(account_id: int) -> ReferralSummary | None:
    """Referral code, number of referrals and credits earned from them."""
    try:
        account = Account.objects.get(pk=account_id)
    except Account.DoesNotExist:
        return None

    referred = list(
        Account.objects.filter(referred_by=account)
        .order_by("created_at", "pk")
        .values_list("username", flat=True)
    )
    earned = sum(
        LedgerEntry.objects.filter(
            account=account,
            category=LedgerCategory.REFERRAL_BONUS,
            reference__startswith="referral:",
        ).values_list("credit_delta", flat=True),
        Decimal("0.00"),
    )
    return ReferralSummary(
        referral_code=account.referral_code,
        total_referrals=len(referred),
        credits_earned=earned,
        referred_usernames=referred,
    )
