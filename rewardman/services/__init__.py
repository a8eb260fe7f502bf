"""Rewardman services.

Plain-function modules, one per concern:
- rewardman.services.ledger: balances, points policy, history, audit
- rewardman.services.offers: play games, claim bonuses, offer status
- rewardman.services.achievements: evaluate and report achievements
- rewardman.services.accounts: registration, logins, VIP info
- rewardman.services.referral: referral codes and bonuses
- rewardman.services.notifications: delivery backends and inbox
"""

from rewardman.services import notifications
from rewardman.services import ledger
from rewardman.services import achievements
from rewardman.services import offers
from rewardman.services import referral
from rewardman.services import accounts

__all__ = ["notifications", "ledger", "achievements", "offers", "referral", "accounts"]
