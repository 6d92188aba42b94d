"""
Django Rewardman - Loyalty points and rewards ledger.

Usage:
    from rewardman import RewardsService
    from rewardman.exceptions import RewardmanError

    customer = RewardsService.register("Ana", "ana@example.com")
    RewardsService.adjust_points(customer.id, 50)
    rewards = RewardsService.eligible_rewards(customer.id)
    record = RewardsService.redeem(customer.id, rewards[0].id)
"""


def __getattr__(name):
    if name == "RewardsService":
        from rewardman.service import RewardsService

        return RewardsService
    if name == "RewardmanError":
        from rewardman.exceptions import RewardmanError

        return RewardmanError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["RewardsService", "RewardmanError"]
__version__ = "0.1.0"
