"""Tests for the offer catalog."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError

from rewardman import catalog
from rewardman.exceptions import NotFoundError, ValidationError
from rewardman.models import Offer, OfferKind, RewardMode


pytestmark = pytest.mark.django_db


class TestGetOffer:
    def test_snapshot(self, range_game):
        offer = catalog.get_offer("lucky-range")
        assert offer.id == range_game.pk
        assert offer.is_game
        assert offer.cooldown == timedelta(hours=24)
        assert offer.min_reward == Decimal("10")

    def test_snapshot_is_frozen(self, range_game):
        offer = catalog.get_offer("lucky-range")
        with pytest.raises(Exception):
            offer.min_reward = Decimal("0")

    def test_unknown_code(self, db):
        with pytest.raises(NotFoundError) as exc:
            catalog.get_offer("nope")
        assert exc.value.code == "OFFER_NOT_FOUND"

    def test_kind_filter(self, daily_bonus):
        with pytest.raises(NotFoundError):
            catalog.get_offer("daily-login", kind=OfferKind.GAME)
        assert catalog.get_offer("daily-login", kind=OfferKind.BONUS).is_bonus

    def test_inactive_offer_hidden(self, range_game):
        Offer.objects.filter(pk=range_game.pk).update(is_active=False)
        with pytest.raises(NotFoundError):
            catalog.get_offer("lucky-range")

    def test_segments_validated_at_boundary(self, wheel_game):
        offer = catalog.get_offer("wheel")
        assert len(offer.segment_table) == 3
        assert offer.segment_table[0].label == "Try again"

    def test_malformed_segments(self, wheel_game):
        Offer.objects.filter(pk=wheel_game.pk).update(segments=[{"label": "broken"}])
        with pytest.raises(ValidationError) as exc:
            catalog.get_offer("wheel")
        assert exc.value.code == "INVALID_OFFER"

    def test_unknown_min_tier(self, gold_game):
        Offer.objects.filter(pk=gold_game.pk).update(min_tier="diamond")
        with pytest.raises(ValidationError):
            catalog.get_offer("gold-room")


class TestListOffers:
    def test_filters_by_kind(self, range_game, wheel_game, daily_bonus):
        games = catalog.list_offers(OfferKind.GAME)
        assert {o.code for o in games} == {"lucky-range", "wheel"}
        assert [o.code for o in catalog.list_offers(OfferKind.BONUS)] == ["daily-login"]

    def test_skips_malformed(self, range_game, wheel_game, caplog):
        Offer.objects.filter(pk=wheel_game.pk).update(segments=[])
        codes = [o.code for o in catalog.list_offers()]
        assert codes == ["lucky-range"]
        assert "wheel" in caplog.text


class TestOfferClean:
    def test_rejects_min_above_max(self, db):
        offer = Offer(
            code="bad",
            name="Bad",
            kind=OfferKind.GAME,
            min_reward=Decimal("30"),
            max_reward=Decimal("10"),
        )
        with pytest.raises(DjangoValidationError):
            offer.clean()

    def test_rejects_bad_segments(self, db):
        offer = Offer(
            code="bad-wheel",
            name="Bad Wheel",
            kind=OfferKind.GAME,
            reward_mode=RewardMode.SEGMENTS,
            segments=[{"value": -5}],
        )
        with pytest.raises(DjangoValidationError):
            offer.clean()
