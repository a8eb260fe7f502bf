"""Pytest fixtures for Rewardman tests."""

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from rewardman.models import (
    Account,
    AchievementDef,
    AchievementType,
    Offer,
    OfferKind,
    RewardMode,
)


@pytest.fixture
def t0():
    """Fixed reference time for cooldown/streak tests."""
    return datetime(2025, 3, 1, 12, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def account(db):
    """Create a bronze account with no balance."""
    return Account.objects.create(username="alice", referral_code="ALICE001")


@pytest.fixture
def other_account(db):
    return Account.objects.create(username="bob", referral_code="BOB00001")


@pytest.fixture
def range_game(db):
    """Uniform [10, 20] game with a 24h cooldown."""
    return Offer.objects.create(
        code="lucky-range",
        name="Lucky Range",
        kind=OfferKind.GAME,
        reward_mode=RewardMode.RANGE,
        min_reward=Decimal("10"),
        max_reward=Decimal("20"),
        cooldown=timedelta(hours=24),
    )


@pytest.fixture
def fixed_game(db):
    """Game that always pays exactly 10 credits before the multiplier."""
    return Offer.objects.create(
        code="flat-ten",
        name="Flat Ten",
        kind=OfferKind.GAME,
        min_reward=Decimal("10"),
        max_reward=Decimal("10"),
        cooldown=timedelta(hours=24),
    )


@pytest.fixture
def wheel_game(db):
    """Segment game with a zero-value "try again" slot."""
    return Offer.objects.create(
        code="wheel",
        name="Wheel",
        kind=OfferKind.GAME,
        reward_mode=RewardMode.SEGMENTS,
        min_reward=Decimal("0"),
        max_reward=Decimal("50"),
        segments=[
            {"value": 0, "label": "Try again"},
            {"value": 10},
            {"value": 50, "label": "JACKPOT!"},
        ],
    )


@pytest.fixture
def gold_game(db):
    """Game restricted to gold tier and above."""
    return Offer.objects.create(
        code="gold-room",
        name="Gold Room",
        kind=OfferKind.GAME,
        min_reward=Decimal("10"),
        max_reward=Decimal("20"),
        min_tier="gold",
    )


@pytest.fixture
def daily_bonus(db):
    return Offer.objects.create(
        code="daily-login",
        name="Daily Login Bonus",
        kind=OfferKind.BONUS,
        credit_amount=Decimal("25"),
        cooldown=timedelta(hours=24),
    )


@pytest.fixture
def streak_bonus(db):
    """Bonus requiring a 7-day login streak."""
    return Offer.objects.create(
        code="streak-bonus",
        name="Streak Master",
        kind=OfferKind.BONUS,
        credit_amount=Decimal("75"),
        cooldown=timedelta(days=7),
        streak_required=7,
    )


@pytest.fixture
def first_game_achievement(db):
    return AchievementDef.objects.create(
        code="first-game",
        name="First Spin",
        achievement_type=AchievementType.GAMES_PLAYED,
        threshold=1,
        reward_credits=Decimal("10"),
        reward_points=5,
    )
