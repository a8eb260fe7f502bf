"""
Rewardman signals - public event API.

Emitted signals (all sent after the originating transaction commits):
- account_registered: sender=Account, account, credentials, referrer
- ledger_entry_created: sender=LedgerEntry, entry
- tier_changed: sender=Account, account, old_tier, new_tier
- offer_claimed: sender=ClaimRecord, claim, outcome
- achievement_unlocked: sender=AchievementDef, account_id, achievement
"""

from django.dispatch import Signal

account_registered = Signal()
ledger_entry_created = Signal()
tier_changed = Signal()
offer_claimed = Signal()
achievement_unlocked = Signal()
