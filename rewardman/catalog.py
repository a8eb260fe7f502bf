"""
Rewardman catalog - read-only offer snapshots.

Offers are read from the database once per call and frozen into an
``OfferSpec``. Segment configuration is validated into a strict
``SegmentTable`` here, so malformed catalog rows are rejected before they
ever reach reward generation.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from rewardman.exceptions import NotFoundError, ValidationError
from rewardman.models import Offer, OfferKind, RewardMode
from rewardman.rewards import SegmentTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OfferSpec:
    """Immutable view of an Offer for the duration of one call."""

    id: int
    code: str
    name: str
    kind: str
    cooldown: timedelta
    reward_mode: str = RewardMode.RANGE
    min_reward: Decimal = Decimal("0")
    max_reward: Decimal = Decimal("0")
    segment_table: SegmentTable | None = None
    min_tier: str = ""
    credit_amount: Decimal = Decimal("0")
    streak_required: int = 0

    @property
    def is_game(self) -> bool:
        return self.kind == OfferKind.GAME

    @property
    def is_bonus(self) -> bool:
        return self.kind == OfferKind.BONUS


def validate_offer(offer: Offer) -> OfferSpec:
    """
    Validate an Offer row and freeze it.

    Raises:
        ValueError: If the configuration is malformed
    """
    if offer.kind not in OfferKind.values:
        raise ValueError(f"Unknown offer kind: {offer.kind!r}")
    if offer.cooldown is None or offer.cooldown < timedelta(0):
        raise ValueError("Cooldown must be a non-negative duration.")

    if offer.kind == OfferKind.BONUS:
        if offer.credit_amount is None or offer.credit_amount < 0:
            raise ValueError("Bonus credit amount must be >= 0.")
        if offer.streak_required < 0:
            raise ValueError("Streak requirement must be >= 0.")
        return OfferSpec(
            id=offer.pk,
            code=offer.code,
            name=offer.name,
            kind=offer.kind,
            cooldown=offer.cooldown,
            credit_amount=Decimal(offer.credit_amount),
            streak_required=offer.streak_required,
        )

    segment_table = None
    if offer.reward_mode == RewardMode.RANGE:
        if offer.min_reward < 0:
            raise ValueError("Minimum reward must be >= 0.")
        if offer.min_reward > offer.max_reward:
            raise ValueError("Minimum reward must not exceed maximum reward.")
    elif offer.reward_mode == RewardMode.SEGMENTS:
        segment_table = SegmentTable(offer.segments, selection=offer.selection)
    else:
        raise ValueError(f"Unknown reward mode: {offer.reward_mode!r}")

    if offer.min_tier:
        from rewardman.tiers import get_tier_table

        if get_tier_table().get(offer.min_tier) is None:
            raise ValueError(f"Unknown VIP tier: {offer.min_tier!r}")

    return OfferSpec(
        id=offer.pk,
        code=offer.code,
        name=offer.name,
        kind=offer.kind,
        cooldown=offer.cooldown,
        reward_mode=offer.reward_mode,
        min_reward=Decimal(offer.min_reward),
        max_reward=Decimal(offer.max_reward),
        segment_table=segment_table,
        min_tier=offer.min_tier,
    )


def get_offer(code: str, kind: str | None = None) -> OfferSpec:
    """
    Get an active offer snapshot by code.

    Raises:
        NotFoundError: If no active offer matches
        ValidationError: If the stored configuration is malformed
    """
    qs = Offer.objects.filter(code=code, is_active=True)
    if kind:
        qs = qs.filter(kind=kind)
    offer = qs.first()
    if offer is None:
        raise NotFoundError("OFFER_NOT_FOUND", offer_code=code, kind=kind)
    try:
        return validate_offer(offer)
    except ValueError as exc:
        raise ValidationError("INVALID_OFFER", message=str(exc), offer_code=code)


def list_offers(kind: str | None = None) -> list[OfferSpec]:
    """Active, valid offers. Malformed rows are skipped."""
    qs = Offer.objects.filter(is_active=True)
    if kind:
        qs = qs.filter(kind=kind)

    specs = []
    for offer in qs:
        try:
            specs.append(validate_offer(offer))
        except ValueError as exc:
            logger.warning(
                "Skipping misconfigured offer %s: %s", offer.code, exc
            )
    return specs
