"""Offer service - play games and claim bonuses.

One atomic unit per action:
    claim record (CooldownGate) + play counter + ledger entry + tier

Achievement evaluation and notifications follow after commit.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from rewardman import catalog
from rewardman.catalog import OfferSpec
from rewardman.exceptions import (
    CooldownActive,
    IneligibleError,
    TransientError,
    translate_storage_errors,
)
from rewardman.gates import ClaimDecision, CooldownGate
from rewardman.models import Account, ClaimRecord, LedgerCategory, OfferKind, RewardMode
from rewardman.rewards import RewardOutcome, fixed_reward, segment_reward, uniform_reward
from rewardman.services import ledger
from rewardman.signals import offer_claimed
from rewardman.tiers import get_tier_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayResult:
    """Outcome of one game play or bonus claim."""

    offer_code: str
    offer_name: str
    kind: str
    outcome: RewardOutcome
    points: int
    claimed_at: datetime
    next_available_at: datetime
    balance: "ledger.BalanceSnapshot | None" = None
    unlocked: list = field(default_factory=list)

    @property
    def amount(self) -> Decimal:
        return self.outcome.amount

    @property
    def multiplier(self) -> Decimal:
        return self.outcome.multiplier

    @property
    def segment_index(self) -> int | None:
        return self.outcome.segment_index

    @property
    def is_win(self) -> bool:
        return self.outcome.is_win


@dataclass(frozen=True)
class OfferStatus:
    """Offer plus its current gate decision for one account."""

    offer: OfferSpec
    decision: ClaimDecision

    @property
    def is_available(self) -> bool:
        return self.decision.eligible


# ======================================================================
# Reward generation
# ======================================================================


def generate_reward(
    offer: OfferSpec, points: int, rng: random.Random | None = None
) -> RewardOutcome:
    """Reward for ``offer`` at the tier ``points`` maps to right now."""
    tier = get_tier_table().tier_for(points)
    if offer.is_bonus:
        return fixed_reward(offer.credit_amount, tier.multiplier, tier.name)
    if offer.reward_mode == RewardMode.SEGMENTS:
        return segment_reward(offer.segment_table, tier.multiplier, tier.name, rng)
    return uniform_reward(offer.min_reward, offer.max_reward, tier.multiplier, tier.name, rng)


def raise_for_decision(decision: ClaimDecision) -> None:
    """Translate a refused gate decision into the matching exception."""
    if decision.eligible:
        return
    if decision.on_cooldown:
        raise CooldownActive(
            offer_code=decision.offer_code,
            last_claimed_at=decision.last_claimed_at,
            next_available_at=decision.next_available_at,
            race_lost=decision.race_lost,
        )
    if decision.reason == "STREAK_REQUIRED":
        message = f"Requires {decision.required} day streak"
    else:
        message = f"Requires {decision.required} VIP tier"
    raise IneligibleError(
        decision.reason,
        message=message,
        offer_code=decision.offer_code,
        required=decision.required,
        current=decision.current,
    )


# ======================================================================
# Actions
# ======================================================================


@translate_storage_errors
def play_game(
    account_id: int,
    offer_code: str,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> PlayResult:
    """
    Play a game offer.

    A zero-value outcome ("try again") still records the claim and counts
    as a game played, but writes no ledger entry.

    Raises:
        NotFoundError: Unknown game or account
        ValidationError: Misconfigured game
        CooldownActive: Played again before next_available_at
        IneligibleError: VIP tier below the game's minimum
        TransientError: Storage fault (retryable)
    """
    offer = catalog.get_offer(offer_code, kind=OfferKind.GAME)
    return _claim(account_id, offer, LedgerCategory.GAME_WIN, now=now, rng=rng)


@translate_storage_errors
def claim_bonus(account_id: int, offer_code: str, now: datetime | None = None) -> PlayResult:
    """
    Claim a bonus offer.

    Raises:
        NotFoundError: Unknown bonus or account
        CooldownActive: Claimed again before next_available_at
        IneligibleError: Login streak below the bonus requirement
        TransientError: Storage fault (retryable)
    """
    offer = catalog.get_offer(offer_code, kind=OfferKind.BONUS)
    return _claim(account_id, offer, LedgerCategory.BONUS_CLAIM, now=now)


def _claim(
    account_id: int,
    offer: OfferSpec,
    category: str,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> PlayResult:
    now = now or timezone.now()

    with transaction.atomic():
        decision = CooldownGate.try_claim(account_id, offer, now=now)
        raise_for_decision(decision)

        # Row already locked by the gate within this transaction.
        account = Account.objects.select_for_update().get(pk=account_id)
        outcome = generate_reward(offer, account.points_balance, rng)

        if offer.is_game:
            Account.objects.filter(pk=account_id).update(games_played=F("games_played") + 1)

        points = 0
        balance = None
        if outcome.is_win:
            points = ledger.points_for_credits(outcome.amount)
            if offer.is_game:
                description = f"Won {outcome.amount} credits from {offer.name}"
            else:
                description = f"Claimed {offer.name}"
            balance = ledger.apply(
                account_id,
                outcome.amount,
                points,
                category,
                description,
                reference=f"claim:{decision.claim.pk}",
            )

        claim = decision.claim
        transaction.on_commit(
            lambda: offer_claimed.send(sender=ClaimRecord, claim=claim, outcome=outcome)
        )

    logger.info(
        "%s %s by account=%s: %s credits (x%s, segment=%s)",
        offer.kind,
        offer.code,
        account_id,
        outcome.amount,
        outcome.multiplier,
        outcome.segment_index,
    )

    return PlayResult(
        offer_code=offer.code,
        offer_name=offer.name,
        kind=offer.kind,
        outcome=outcome,
        points=points,
        claimed_at=decision.claim.claimed_at,
        next_available_at=decision.next_available_at,
        balance=balance,
        unlocked=evaluate_achievements(account_id),
    )


def evaluate_achievements(account_id: int) -> list:
    """Run the achievement engine; the committed play or login stands if it fails."""
    from rewardman.services import achievements

    try:
        return achievements.evaluate(account_id)
    except TransientError:
        logger.warning(
            "Achievement evaluation deferred for account %s (storage fault)",
            account_id,
            exc_info=True,
        )
        return []


# ======================================================================
# Status (read-only)
# ======================================================================


def status(account_id: int, kind: str | None = None, now: datetime | None = None) -> list[OfferStatus]:
    """Every active offer of ``kind`` with its gate decision. No side effects."""
    now = now or timezone.now()
    return [
        OfferStatus(offer=offer, decision=CooldownGate.status(account_id, offer, now=now))
        for offer in catalog.list_offers(kind)
    ]


def game_status(account_id: int, now: datetime | None = None) -> list[OfferStatus]:
    return status(account_id, OfferKind.GAME, now=now)


def bonus_status(account_id: int, now: datetime | None = None) -> list[OfferStatus]:
    return status(account_id, OfferKind.BONUS, now=now)
