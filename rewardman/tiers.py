"""
Rewardman tiers - VIP tier lookup.

Pure functions over an ascending (name, min_points, multiplier) table.
No database access, no mutable state.

Usage:
    from rewardman.tiers import tier_for

    tier = tier_for(620)          # VipTier(name="silver", min_points=500, multiplier=Decimal("1.25"))
    tier.multiplier
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation


@dataclass(frozen=True)
class VipTier:
    """A named reward-multiplier band."""

    name: str
    min_points: int
    multiplier: Decimal

    def __str__(self):
        return f"{self.name} (>={self.min_points}pts, x{self.multiplier})"


class TierTable:
    """
    Immutable, validated tier table.

    Rules:
    - At least one tier
    - First tier starts at 0 points (lookup is total over non-negative ints)
    - Thresholds strictly ascending
    - Multipliers non-decreasing (higher tier never pays less)
    - Unique names
    """

    def __init__(self, tiers):
        parsed = tuple(self._parse(t) for t in tiers)
        if not parsed:
            raise ValueError("Tier table must not be empty.")
        if parsed[0].min_points != 0:
            raise ValueError("First tier must start at 0 points.")
        for lower, upper in zip(parsed, parsed[1:]):
            if upper.min_points <= lower.min_points:
                raise ValueError(
                    f"Tier thresholds must be strictly ascending ({lower.name} -> {upper.name})."
                )
            if upper.multiplier < lower.multiplier:
                raise ValueError(
                    f"Tier multipliers must not decrease ({lower.name} -> {upper.name})."
                )
        names = [t.name for t in parsed]
        if len(set(names)) != len(names):
            raise ValueError("Tier names must be unique.")
        self._tiers = parsed

    @staticmethod
    def _parse(entry) -> VipTier:
        if isinstance(entry, VipTier):
            return entry
        name, min_points, multiplier = entry
        try:
            multiplier = Decimal(str(multiplier))
        except InvalidOperation:
            raise ValueError(f"Invalid multiplier for tier {name!r}: {multiplier!r}")
        if multiplier <= 0:
            raise ValueError(f"Multiplier for tier {name!r} must be positive.")
        return VipTier(name=str(name), min_points=int(min_points), multiplier=multiplier)

    def __iter__(self):
        return iter(self._tiers)

    def __len__(self):
        return len(self._tiers)

    @property
    def lowest(self) -> VipTier:
        return self._tiers[0]

    def tier_for(self, points: int) -> VipTier:
        """Highest tier whose threshold is <= points."""
        if points < 0:
            raise ValueError("Points must be non-negative.")
        current = self._tiers[0]
        for tier in self._tiers[1:]:
            if points < tier.min_points:
                break
            current = tier
        return current

    def next_tier(self, points: int) -> VipTier | None:
        """Next tier above the one for ``points`` (None at the top)."""
        current = self.tier_for(points)
        index = self._tiers.index(current)
        if index + 1 < len(self._tiers):
            return self._tiers[index + 1]
        return None

    def points_to_next(self, points: int) -> int | None:
        nxt = self.next_tier(points)
        if nxt is None:
            return None
        return nxt.min_points - points

    def get(self, name: str) -> VipTier | None:
        for tier in self._tiers:
            if tier.name == name:
                return tier
        return None

    def rank(self, name: str) -> int:
        """Position of ``name`` in the table (0 = lowest). -1 if unknown."""
        for index, tier in enumerate(self._tiers):
            if tier.name == name:
                return index
        return -1

    def meets(self, current: str, required: str) -> bool:
        """True if tier ``current`` is at or above tier ``required``."""
        required_rank = self.rank(required)
        if required_rank < 0:
            raise ValueError(f"Unknown tier: {required!r}")
        return self.rank(current) >= required_rank


def get_tier_table() -> TierTable:
    """Build the tier table from settings (re-read on every call)."""
    from rewardman.conf import rewardman_settings

    return TierTable(rewardman_settings.VIP_TIERS)


def tier_for(points: int, table: TierTable | None = None) -> VipTier:
    """Map a point balance to its VIP tier."""
    return (table or get_tier_table()).tier_for(points)


def multiplier_for(points: int, table: TierTable | None = None) -> Decimal:
    return tier_for(points, table).multiplier
