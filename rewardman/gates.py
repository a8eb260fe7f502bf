"""
Rewardman Gates - cooldown and eligibility rules for offers.

CooldownGate.try_claim(): atomic check-and-claim
    1. Lock and snapshot the account (select_for_update)
    2. Eligibility against the snapshot (VIP tier, login streak)
    3. Latest ClaimRecord for (account, offer) vs the cooldown window
    4. Insert ClaimRecord(sequence = last + 1) inside a savepoint

Step 4 is a compare-and-swap on the unique (account, offer, sequence)
constraint: a racing request that read the same "last claim" inserts the
same sequence and loses deterministically with IntegrityError.

CooldownGate.status(): same decision, no lock, no write.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from django.db import IntegrityError, transaction
from django.utils import timezone

from rewardman.catalog import OfferSpec
from rewardman.exceptions import NotFoundError
from rewardman.models import Account, ClaimRecord
from rewardman.tiers import get_tier_table

logger = logging.getLogger(__name__)


class ClaimStatus:
    ELIGIBLE = "eligible"
    ON_COOLDOWN = "on_cooldown"
    NOT_ELIGIBLE = "not_eligible"


@dataclass(frozen=True)
class ClaimDecision:
    """Result of a gate check or claim attempt."""

    status: str
    offer_code: str
    claim: ClaimRecord | None = None
    last_claimed_at: datetime | None = None
    next_available_at: datetime | None = None
    reason: str = ""
    required: int | str | None = None
    current: int | str | None = None
    race_lost: bool = False

    @property
    def eligible(self) -> bool:
        return self.status == ClaimStatus.ELIGIBLE

    @property
    def on_cooldown(self) -> bool:
        return self.status == ClaimStatus.ON_COOLDOWN


# =============================================================================
# Gates
# =============================================================================


class CooldownGate:
    """Cooldown and eligibility gate for games and bonuses."""

    # =========================================================================
    # Claim (atomic)
    # =========================================================================

    @classmethod
    def try_claim(
        cls,
        account_id: int,
        offer: OfferSpec,
        now: datetime | None = None,
    ) -> ClaimDecision:
        """
        Atomically check eligibility and cooldown, and record a claim.

        Safe to call inside an outer transaction.atomic(): the claim then
        commits or rolls back with the caller's work.

        Args:
            account_id: Account primary key
            offer: Offer snapshot from rewardman.catalog
            now: Claim time (defaults to timezone.now())

        Returns:
            ClaimDecision: ELIGIBLE (with the new ClaimRecord),
            ON_COOLDOWN (with next_available_at) or NOT_ELIGIBLE (with reason)

        Raises:
            NotFoundError: If the account is unknown or inactive
        """
        from rewardman.services.ledger import lock_account

        now = now or timezone.now()

        with transaction.atomic():
            account = lock_account(account_id)

            decision = cls._eligibility(account, offer)
            if decision is not None:
                return decision

            last = cls._last_claim(account.pk, offer.id)
            decision = cls._cooldown(offer, last, now)
            if decision is not None:
                return decision

            sequence = last.sequence + 1 if last else 1
            try:
                with transaction.atomic():
                    claim = ClaimRecord.objects.create(
                        account=account,
                        offer_id=offer.id,
                        sequence=sequence,
                        claimed_at=now,
                    )
            except IntegrityError:
                winner = ClaimRecord.objects.filter(
                    account_id=account.pk, offer_id=offer.id, sequence=sequence
                ).first()
                if winner is None:
                    raise
                return cls._race_lost(account.pk, offer, winner)

        logger.info(
            "Claim recorded: account=%s offer=%s seq=%s", account_id, offer.code, sequence
        )
        return ClaimDecision(
            status=ClaimStatus.ELIGIBLE,
            offer_code=offer.code,
            claim=claim,
            last_claimed_at=now,
            next_available_at=now + offer.cooldown,
        )

    @classmethod
    def _race_lost(
        cls, account_id: int, offer: OfferSpec, winner: ClaimRecord
    ) -> ClaimDecision:
        """A concurrent request inserted the same sequence first: report its window."""
        logger.warning(
            "Claim race lost: account=%s offer=%s seq=%s", account_id, offer.code, winner.sequence
        )
        return ClaimDecision(
            status=ClaimStatus.ON_COOLDOWN,
            offer_code=offer.code,
            last_claimed_at=winner.claimed_at,
            next_available_at=winner.claimed_at + offer.cooldown,
            reason="Offer claimed by a concurrent request.",
            race_lost=True,
        )

    # =========================================================================
    # Status (read-only)
    # =========================================================================

    @classmethod
    def status(
        cls,
        account_id: int,
        offer: OfferSpec,
        now: datetime | None = None,
    ) -> ClaimDecision:
        """Same decision as try_claim() without locking or writing anything."""
        now = now or timezone.now()
        try:
            account = Account.objects.get(pk=account_id, is_active=True)
        except Account.DoesNotExist:
            raise NotFoundError("ACCOUNT_NOT_FOUND", account_id=account_id)

        last = cls._last_claim(account.pk, offer.id)
        decision = cls._eligibility(account, offer) or cls._cooldown(offer, last, now)
        if decision is not None:
            return replace(decision, last_claimed_at=last.claimed_at if last else None)
        return ClaimDecision(
            status=ClaimStatus.ELIGIBLE,
            offer_code=offer.code,
            last_claimed_at=last.claimed_at if last else None,
        )

    # =========================================================================
    # Rules
    # =========================================================================

    @classmethod
    def _last_claim(cls, account_id: int, offer_id: int) -> ClaimRecord | None:
        return (
            ClaimRecord.objects.filter(account_id=account_id, offer_id=offer_id)
            .order_by("-sequence")
            .first()
        )

    @classmethod
    def _cooldown(
        cls, offer: OfferSpec, last: ClaimRecord | None, now: datetime
    ) -> ClaimDecision | None:
        """ON_COOLDOWN while now < last claim + cooldown."""
        if last is None:
            return None
        next_available = last.claimed_at + offer.cooldown
        if now < next_available:
            return ClaimDecision(
                status=ClaimStatus.ON_COOLDOWN,
                offer_code=offer.code,
                last_claimed_at=last.claimed_at,
                next_available_at=next_available,
                reason="Offer is on cooldown.",
            )
        return None

    @classmethod
    def _eligibility(cls, account: Account, offer: OfferSpec) -> ClaimDecision | None:
        """VIP-tier and streak requirements, checked against ``account``."""
        if offer.min_tier:
            table = get_tier_table()
            current = table.tier_for(account.points_balance).name
            if not table.meets(current, offer.min_tier):
                return ClaimDecision(
                    status=ClaimStatus.NOT_ELIGIBLE,
                    offer_code=offer.code,
                    reason="TIER_REQUIRED",
                    required=offer.min_tier,
                    current=current,
                )

        if offer.streak_required > 0 and account.login_streak < offer.streak_required:
            return ClaimDecision(
                status=ClaimStatus.NOT_ELIGIBLE,
                offer_code=offer.code,
                reason="STREAK_REQUIRED",
                required=offer.streak_required,
                current=account.login_streak,
            )

        return None
