"""Rewardman exceptions."""

import functools

from django.db import OperationalError


class RewardmanError(Exception):
    """
    Structured exception for reward operations.

    Every error carries a stable ``code``, a human message and free-form
    ``data`` describing the failure (computed timestamps, unmet requirements).

    Usage:
        try:
            RewardService.claim_bonus(account_id, "daily-login")
        except CooldownActive as e:
            retry_at = e.next_available_at
        except RewardmanError as e:
            if e.code == "OFFER_NOT_FOUND":
                handle_not_found()
    """

    default_code = "REWARDMAN_ERROR"
    retryable = False

    _default_messages = {
        "REWARDMAN_ERROR": "Reward operation failed",
        "INVALID_AMOUNT": "Invalid amount",
        "INVALID_CATEGORY": "Invalid ledger category",
        "INVALID_OFFER": "Invalid offer configuration",
        "INVALID_USERNAME": "Username is required",
        "USERNAME_TAKEN": "Username already exists",
        "ACCOUNT_NOT_FOUND": "Account not found",
        "OFFER_NOT_FOUND": "Offer not found",
        "COOLDOWN_ACTIVE": "Offer is on cooldown",
        "TIER_REQUIRED": "VIP tier requirement not met",
        "STREAK_REQUIRED": "Login streak requirement not met",
        "ALREADY_UNLOCKED": "Achievement already unlocked",
        "DUPLICATE_ENTRY": "Ledger entry already recorded",
        "STORAGE_UNAVAILABLE": "Storage temporarily unavailable",
        "LEDGER_INVARIANT": "Ledger invariant violated",
    }

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(f"[{self.code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class ValidationError(RewardmanError):
    """Request rejected before any state change (unknown offer, malformed amount)."""

    default_code = "INVALID_AMOUNT"


class NotFoundError(RewardmanError):
    """Unknown or inactive account/offer."""

    default_code = "ACCOUNT_NOT_FOUND"


class CooldownActive(RewardmanError):
    """Offer claimed before its next-available time."""

    default_code = "COOLDOWN_ACTIVE"

    @property
    def next_available_at(self):
        return self.data.get("next_available_at")

    @property
    def race_lost(self) -> bool:
        return bool(self.data.get("race_lost", False))


class IneligibleError(RewardmanError):
    """Tier or streak requirement not met."""

    default_code = "TIER_REQUIRED"

    @property
    def requirement(self):
        return self.data.get("required")


class ConcurrencyConflict(RewardmanError):
    """An atomic claim/unlock/entry lost a race against a concurrent writer."""

    default_code = "ALREADY_UNLOCKED"


class TransientError(RewardmanError):
    """Storage-layer fault. The only class callers may retry."""

    default_code = "STORAGE_UNAVAILABLE"
    retryable = True


class LedgerInvariantError(RewardmanError):
    """A ledger apply would leave a negative balance."""

    default_code = "LEDGER_INVARIANT"


def translate_storage_errors(func):
    """Re-raise database faults (lost connection, lock timeout) as TransientError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except OperationalError as exc:
            raise TransientError(detail=str(exc)) from exc

    return wrapper
