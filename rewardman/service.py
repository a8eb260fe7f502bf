"""
Rewardman public API.

CORE (essential):
    RewardService.play_game(account_id, code)    - Play a game
    RewardService.claim_bonus(account_id, code)  - Claim a bonus
    RewardService.register_account(username, ...) - Create an account
    RewardService.record_login(account_id)       - Update login streak

CONVENIENCE (helpers):
    RewardService.vip_info(account_id)           - Tier and progress
    RewardService.history(account_id)            - Ledger entries
    RewardService.achievement_progress(account_id) - Achievement progress
"""

from datetime import datetime

from rewardman import catalog
from rewardman.catalog import OfferSpec
from rewardman.models import Account, LedgerEntry, Notification, OfferKind
from rewardman.services import accounts, achievements, ledger, notifications, offers, referral


class RewardService:
    """
    Rewardman public API.

    Uses @classmethod for extensibility: subclass and override a single
    entry point (caching, auditing) without touching the services.

    CORE (essential):
        play_game(account_id, code)   - Play a game (cooldown + tier gated)
        claim_bonus(account_id, code) - Claim a bonus (cooldown + streak gated)
        register_account(username, ...) - Create account, welcome and referral credits
        record_login(account_id)      - Update login streak

    CONVENIENCE (helpers):
        games(account_id) / bonuses(account_id) - Offers with availability
        vip_info(account_id)          - Tier, multiplier, next tier
        history(account_id, ...)      - Ledger entries
        achievement_progress(account_id) - Achievement progress
        referrals(account_id)         - Referral summary
        inbox(account_id)             - Notifications
        admin_credit(account_id, ...) - Manual credit
    """

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def play_game(
        cls, account_id: int, offer_code: str, now: datetime | None = None
    ) -> offers.PlayResult:
        """
        Play a game.

        Raises:
            NotFoundError, CooldownActive, IneligibleError, TransientError
        """
        return offers.play_game(account_id, offer_code, now=now)

    @classmethod
    def claim_bonus(
        cls, account_id: int, offer_code: str, now: datetime | None = None
    ) -> offers.PlayResult:
        """
        Claim a bonus.

        Raises:
            NotFoundError, CooldownActive, IneligibleError, TransientError
        """
        return offers.claim_bonus(account_id, offer_code, now=now)

    @classmethod
    def register_account(
        cls,
        username: str,
        credentials=None,
        referral_code: str | None = None,
        email: str = "",
    ) -> Account:
        """Create an account. Raises ValidationError for a bad/taken username."""
        return accounts.register(
            username, credentials=credentials, referral_code=referral_code, email=email
        )

    @classmethod
    def record_login(cls, account_id: int, now: datetime | None = None) -> accounts.LoginResult:
        return accounts.record_login(account_id, now=now)

    @classmethod
    def get_account(cls, account_id: int) -> Account | None:
        return accounts.get(account_id)

    # ======================================================================
    # CONVENIENCE API
    # ======================================================================

    @classmethod
    def get_offer(cls, code: str) -> OfferSpec:
        return catalog.get_offer(code)

    @classmethod
    def games(cls, account_id: int, now: datetime | None = None) -> list[offers.OfferStatus]:
        """Active games with cooldown/eligibility for the account."""
        return offers.status(account_id, OfferKind.GAME, now=now)

    @classmethod
    def bonuses(cls, account_id: int, now: datetime | None = None) -> list[offers.OfferStatus]:
        """Active bonuses with cooldown/eligibility for the account."""
        return offers.status(account_id, OfferKind.BONUS, now=now)

    @classmethod
    def vip_info(cls, account_id: int) -> accounts.VipInfo:
        return accounts.vip_info(account_id)

    @classmethod
    def history(
        cls,
        account_id: int,
        category: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[LedgerEntry], int]:
        return ledger.history(account_id, category=category, limit=limit, offset=offset)

    @classmethod
    def achievement_progress(cls, account_id: int) -> list[achievements.AchievementProgress]:
        return achievements.progress(account_id)

    @classmethod
    def referrals(cls, account_id: int) -> referral.ReferralSummary | None:
        return referral.summary(account_id)

    @classmethod
    def inbox(cls, account_id: int, unread_only: bool = False) -> list[Notification]:
        return notifications.inbox(account_id, unread_only=unread_only)

    @classmethod
    def admin_credit(
        cls, account_id: int, amount, description: str = "", created_by: str = ""
    ) -> ledger.BalanceSnapshot:
        """Manual credit (ADMIN_CREDIT)."""
        return ledger.admin_credit(account_id, amount, description, created_by=created_by)
