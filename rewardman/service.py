"""
Rewardman public API.

CORE (essential):
    RewardsService.register(name, email)          - Register customer
    RewardsService.adjust_points(id, delta)       - Clamp-at-zero adjustment
    RewardsService.eligible_rewards(id)           - Redeemable rewards
    RewardsService.redeem(customer_id, reward_id) - Redeem and reset to 0
    RewardsService.metrics()                      - Summary statistics

CONVENIENCE (helpers):
    RewardsService.register_or_login(...)  - Welcome-back registration
    RewardsService.search(term)            - Filter customers
    RewardsService.records_between(...)    - Date-filtered history
"""

from datetime import date, datetime

from rewardman.protocols.ledger import CustomerInfo, RedemptionRecord, Reward
from rewardman.services import catalog, ledger, metrics, redemption
from rewardman.services.ledger import Registration
from rewardman.services.metrics import LedgerState, MetricsSnapshot
from rewardman.services.redemption import RedemptionCheck


class RewardsService:
    """
    Rewardman public API.

    Uses @classmethod for extensibility. Every method delegates to the
    service modules and lets RewardmanError propagate to the caller.
    """

    # ======================================================================
    # Catalog
    # ======================================================================

    @classmethod
    def rewards(cls) -> list[Reward]:
        """Current catalog in display order (never raises)."""
        return catalog.list_rewards()

    @classmethod
    def save_reward(cls, reward: Reward) -> Reward:
        return catalog.upsert_reward(reward)

    @classmethod
    def add_reward(cls, name: str, icon: str, points_required: int, **kwargs) -> Reward:
        return catalog.add_reward(name, icon, points_required, **kwargs)

    @classmethod
    def delete_reward(cls, reward_id: int) -> bool:
        return catalog.delete_reward(reward_id)

    # ======================================================================
    # Ledger
    # ======================================================================

    @classmethod
    def register(cls, name: str, email: str) -> CustomerInfo:
        return ledger.register(name, email)

    @classmethod
    def register_or_login(cls, name: str, email: str) -> Registration:
        return ledger.register_or_login(name, email)

    @classmethod
    def get(cls, customer_id: int) -> CustomerInfo:
        return ledger.get(customer_id)

    @classmethod
    def get_by_email(cls, email: str) -> CustomerInfo:
        return ledger.find_by_email(email)

    @classmethod
    def customers(cls) -> list[CustomerInfo]:
        return ledger.list_customers()

    @classmethod
    def search(cls, term: str, customers: list[CustomerInfo] | None = None) -> list[CustomerInfo]:
        """Filter customers by name/email (loads all customers if none given)."""
        if customers is None:
            customers = ledger.list_customers()
        return ledger.filter_customers(customers, term)

    @classmethod
    def adjust_points(cls, customer_id: int, delta: int) -> CustomerInfo:
        return ledger.adjust_points(customer_id, delta)

    @classmethod
    def bump_points(cls, customer_id: int, increase: bool = True) -> CustomerInfo:
        return ledger.bump_points(customer_id, increase)

    @classmethod
    def reset_points(cls, customer_id: int) -> CustomerInfo:
        return ledger.reset_points(customer_id)

    @classmethod
    def delete_customer(cls, customer_id: int) -> None:
        ledger.delete(customer_id)

    # ======================================================================
    # Redemption
    # ======================================================================

    @classmethod
    def eligible_rewards(cls, customer_id: int) -> list[Reward]:
        return redemption.eligible_rewards(ledger.get(customer_id))

    @classmethod
    def check_redemption(cls, customer_id: int, reward_id: int) -> RedemptionCheck:
        return redemption.check_redemption(customer_id, reward_id)

    @classmethod
    def redeem(cls, customer_id: int, reward_id: int) -> RedemptionRecord:
        return redemption.redeem(customer_id, reward_id)

    @classmethod
    def complete_redemption(cls, record: RedemptionRecord | dict) -> RedemptionRecord:
        return redemption.complete_redemption(record)

    # ======================================================================
    # Metrics / history
    # ======================================================================

    @classmethod
    def state(cls) -> LedgerState:
        return metrics.load_state()

    @classmethod
    def metrics(cls, state: LedgerState | None = None) -> MetricsSnapshot:
        return metrics.snapshot(state or metrics.load_state())

    @classmethod
    def records_between(
        cls,
        start: date | datetime | None = None,
        end: date | datetime | None = None,
    ) -> list[RedemptionRecord]:
        return metrics.fetch_records(start, end)
