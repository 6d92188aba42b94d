"""Redemption engine.

Redeeming any reward resets the customer's whole balance to zero: a
customer with 480 points redeeming a 200-point reward ends at 0, not 280.
"""

import logging
import uuid
from dataclasses import dataclass

from django.utils import timezone

from rewardman.exceptions import InsufficientPointsError, RewardmanError
from rewardman.protocols.ledger import CustomerInfo, RedemptionRecord, Reward
from rewardman.services import catalog, ledger, locks
from rewardman.services.backend import get_backend
from rewardman.signals import reward_redeemed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedemptionCheck:
    """Pre-flight result for a redemption (no exception raised)."""

    valid: bool
    customer_id: int
    reward_id: int
    available: int = 0
    required: int = 0
    error_code: str | None = None
    message: str | None = None


def _points_of(customer: CustomerInfo | int) -> int:
    return customer.points if isinstance(customer, CustomerInfo) else customer


def is_eligible(points: int, reward: Reward) -> bool:
    return points >= reward.points_required


def eligible_rewards(
    customer: CustomerInfo | int,
    rewards: list[Reward] | None = None,
) -> list[Reward]:
    """
    Rewards the customer (or a raw balance) can redeem, in catalog order.

    Args:
        customer: CustomerInfo or a point balance
        rewards: Catalog to check against (defaults to the current catalog)
    """
    points = _points_of(customer)
    if rewards is None:
        rewards = catalog.list_rewards()
    return [reward for reward in rewards if is_eligible(points, reward)]


def has_available_reward(customer: CustomerInfo | int, rewards: list[Reward]) -> bool:
    points = _points_of(customer)
    return any(is_eligible(points, reward) for reward in rewards)


def reward_progress(points: int, reward: Reward) -> int:
    """Progress toward a reward as a 0-100 percentage."""
    if reward.points_required <= 0:
        return 100
    return min(100, int(points * 100 / reward.points_required))


def check_redemption(customer_id: int, reward_id: int) -> RedemptionCheck:
    """Validate a redemption without performing it."""
    try:
        customer = ledger.get(customer_id)
        reward = catalog.get_reward(reward_id)
    except RewardmanError as e:
        return RedemptionCheck(
            valid=False,
            customer_id=customer_id,
            reward_id=reward_id,
            error_code=e.code,
            message=e.message,
        )

    if not is_eligible(customer.points, reward):
        return RedemptionCheck(
            valid=False,
            customer_id=customer_id,
            reward_id=reward_id,
            available=customer.points,
            required=reward.points_required,
            error_code=InsufficientPointsError.default_code,
            message=f"{customer.name} has {customer.points} of {reward.points_required} points",
        )

    return RedemptionCheck(
        valid=True,
        customer_id=customer_id,
        reward_id=reward_id,
        available=customer.points,
        required=reward.points_required,
    )


def redeem(customer_id: int, reward_id: int) -> RedemptionRecord:
    """
    Redeem a reward for a customer.

    Eligibility is re-checked against a fresh balance while holding the
    customer's lock; the backend then stores the record and resets the
    balance to zero as one unit.

    Args:
        customer_id: Customer id
        reward_id: Catalog reward id

    Returns:
        The stored RedemptionRecord (points_remaining_after is always 0)

    Raises:
        NotFoundError: Unknown customer or reward
        InsufficientPointsError: Balance below the reward threshold
        ConcurrentUpdateError: Balance changed between check and write
        RedemptionIncompleteError: Balance reset but record not stored
    """
    backend = get_backend()
    reward = catalog.get_reward(reward_id)

    with locks.customer_lock(customer_id):
        customer = ledger.get(customer_id)
        if not is_eligible(customer.points, reward):
            raise InsufficientPointsError(
                customer_id=customer_id,
                reward_id=reward_id,
                available=customer.points,
                required=reward.points_required,
            )

        record = RedemptionRecord(
            id=str(uuid.uuid4()),
            customer_id=customer.id,
            customer_name=customer.name,
            reward_id=reward.id,
            reward_name=reward.name,
            points_spent=reward.points_required,
            points_before=customer.points,
            points_remaining_after=0,
            timestamp=timezone.now(),
        )
        backend.apply_redemption(record, expected_points=customer.points)

    logger.info(
        "Customer %s redeemed %s (%s) with %d pts; balance reset to 0",
        customer.id,
        reward.id,
        reward.name,
        customer.points,
    )
    reward_redeemed.send(sender=RedemptionRecord, record=record)
    return record


def complete_redemption(record: RedemptionRecord | dict) -> RedemptionRecord:
    """
    Store a record left pending by RedemptionIncompleteError.

    Safe to call repeatedly: the insert is idempotent on record.id.
    """
    if isinstance(record, dict):
        record = RedemptionRecord.from_dict(record)
    get_backend().insert_redemption_record(record)
    logger.info("Pending redemption %s stored", record.id)
    return record
