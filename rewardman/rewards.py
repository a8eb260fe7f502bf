"""
Rewardman rewards - reward amount generation.

Two algorithms, chosen by offer configuration:
- Uniform range:     round(uniform(min, max) * multiplier, 2dp)
- Discrete segments: round(segment.value * multiplier), segment picked
                     uniformly over index or proportionally to weight

All randomness goes through an injectable ``random.Random`` so outcomes
are reproducible in tests and replayable by clients (segment_index).
"""

import random
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
WHOLE = Decimal("1")

SELECTION_UNIFORM = "uniform"
SELECTION_WEIGHTED = "weighted"
SELECTION_POLICIES = (SELECTION_UNIFORM, SELECTION_WEIGHTED)


def quantize_credits(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Segment:
    """One wheel/card outcome."""

    value: Decimal
    label: str
    weight: Decimal = Decimal("1")

    @property
    def is_win(self) -> bool:
        return self.value > 0


class SegmentTable:
    """
    Strict discrete distribution built from loosely-typed configuration.

    Accepts a list of ``{"value": ..., "label": ..., "weight": ...}`` dicts
    (``label`` and ``weight`` optional; legacy ``probability`` is read as
    weight). Malformed entries raise ValueError at construction time so
    they never reach reward generation.
    """

    def __init__(self, segments, selection: str = SELECTION_UNIFORM):
        if selection not in SELECTION_POLICIES:
            raise ValueError(f"Unknown selection policy: {selection!r}")
        if not isinstance(segments, (list, tuple)) or not segments:
            raise ValueError("Segments must be a non-empty list.")
        self.selection = selection
        self.segments = tuple(self._parse(i, s) for i, s in enumerate(segments))
        self.total_weight = sum((s.weight for s in self.segments), Decimal("0"))

    @staticmethod
    def _parse(index: int, raw) -> Segment:
        if isinstance(raw, Segment):
            return raw
        if not isinstance(raw, dict) or "value" not in raw:
            raise ValueError(f"Segment {index} must be a mapping with a 'value'.")
        value = _to_decimal(raw["value"], f"Segment {index} value")
        if value < 0:
            raise ValueError(f"Segment {index} value must be >= 0.")
        weight_raw = raw.get("weight", raw.get("probability"))
        weight = Decimal("1") if weight_raw is None else _to_decimal(weight_raw, f"Segment {index} weight")
        if weight <= 0:
            raise ValueError(f"Segment {index} weight must be > 0.")
        label = raw.get("label") or format(value.normalize(), "f")
        return Segment(value=value, label=str(label), weight=weight)

    def __len__(self):
        return len(self.segments)

    def __getitem__(self, index: int) -> Segment:
        return self.segments[index]

    def pick(self, rng: random.Random) -> int:
        """Choose a segment index according to the active policy."""
        if self.selection == SELECTION_UNIFORM:
            return rng.randrange(len(self.segments))

        target = Decimal(str(rng.random())) * self.total_weight
        cumulative = Decimal("0")
        for index, segment in enumerate(self.segments):
            cumulative += segment.weight
            if target < cumulative:
                return index
        return len(self.segments) - 1

    def as_config(self) -> list[dict]:
        return [
            {"value": str(s.value), "label": s.label, "weight": str(s.weight)}
            for s in self.segments
        ]


@dataclass(frozen=True)
class RewardOutcome:
    """Result of one reward generation."""

    amount: Decimal
    base_amount: Decimal
    multiplier: Decimal
    tier: str
    segment_index: int | None = None
    segment_label: str | None = None

    @property
    def is_win(self) -> bool:
        return self.amount > 0


def _to_decimal(value, what: str) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"{what} must be a number.")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{what} must be a number, got {value!r}.")
    if not result.is_finite():
        raise ValueError(f"{what} must be finite.")
    return result


def uniform_reward(
    min_reward: Decimal,
    max_reward: Decimal,
    multiplier: Decimal,
    tier: str,
    rng: random.Random | None = None,
) -> RewardOutcome:
    """round(uniform(min, max) * multiplier, 2dp)."""
    rng = rng or random.Random()
    base = Decimal(str(rng.uniform(float(min_reward), float(max_reward))))
    base = min(max(base, min_reward), max_reward)
    return RewardOutcome(
        amount=quantize_credits(base * multiplier),
        base_amount=quantize_credits(base),
        multiplier=multiplier,
        tier=tier,
    )


def segment_reward(
    table: SegmentTable,
    multiplier: Decimal,
    tier: str,
    rng: random.Random | None = None,
) -> RewardOutcome:
    """round(segment.value * multiplier) with segment chosen by policy."""
    rng = rng or random.Random()
    index = table.pick(rng)
    segment = table[index]
    amount = (segment.value * multiplier).quantize(WHOLE, rounding=ROUND_HALF_UP)
    return RewardOutcome(
        amount=quantize_credits(amount),
        base_amount=segment.value,
        multiplier=multiplier,
        tier=tier,
        segment_index=index,
        segment_label=segment.label,
    )


def fixed_reward(amount: Decimal, multiplier: Decimal, tier: str) -> RewardOutcome:
    """Bonus payout: round(amount * multiplier, 2dp)."""
    return RewardOutcome(
        amount=quantize_credits(amount * multiplier),
        base_amount=amount,
        multiplier=multiplier,
        tier=tier,
    )
