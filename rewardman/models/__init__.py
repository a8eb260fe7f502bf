"""Rewardman models.

- Account: balances, cached VIP tier, streak and play counters
- LedgerEntry: append-only record of every balance change
- Offer: cooldown-gated game/bonus definitions (externally administered)
- ClaimRecord: one row per successful offer claim (cooldown source of truth)
- AchievementDef / AchievementUnlock: one-time threshold rewards
- Notification: stored inbox for the default notification backend
"""

from rewardman.models.account import Account
from rewardman.models.ledger import LedgerEntry, LedgerCategory
from rewardman.models.offer import Offer, OfferKind, RewardMode, SelectionPolicy
from rewardman.models.claim import ClaimRecord
from rewardman.models.achievement import AchievementDef, AchievementType, AchievementUnlock
from rewardman.models.notification import Notification

__all__ = [
    "Account",
    # Ledger
    "LedgerEntry",
    "LedgerCategory",
    # Catalog
    "Offer",
    "OfferKind",
    "RewardMode",
    "SelectionPolicy",
    # Cooldown gate
    "ClaimRecord",
    # Achievements
    "AchievementDef",
    "AchievementType",
    "AchievementUnlock",
    # Notifications
    "Notification",
]
