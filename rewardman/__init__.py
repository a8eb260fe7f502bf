"""
Django Rewardman - Loyalty rewards core.

Usage:
    from rewardman import RewardService
    from rewardman.gates import CooldownGate, ClaimDecision

    account = RewardService.register_account("alice", credentials, referral_code="K3Y5X9QA")
    result = RewardService.play_game(account.pk, "wheel-game")
    result = RewardService.claim_bonus(account.pk, "daily-login")

    # Side-effect-free cooldown check
    CooldownGate.status(account.pk, offer)
"""


def __getattr__(name):
    if name == "RewardService":
        from rewardman.service import RewardService

        return RewardService
    if name == "CooldownGate":
        from rewardman.gates import CooldownGate

        return CooldownGate
    if name == "ClaimDecision":
        from rewardman.gates import ClaimDecision

        return ClaimDecision
    if name == "RewardmanError":
        from rewardman.exceptions import RewardmanError

        return RewardmanError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["RewardService", "CooldownGate", "ClaimDecision", "RewardmanError"]
__version__ = "0.1.0"
