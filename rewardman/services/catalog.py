"""Reward catalog service.

The catalog is an ordered list stored as one snapshot: every edit
rewrites the whole list.
"""

import logging
import time
from dataclasses import replace

from rewardman.exceptions import BackendUnavailableError, NotFoundError, ValidationError
from rewardman.protocols.ledger import LedgerBackend, Reward
from rewardman.services.backend import get_backend, read

logger = logging.getLogger(__name__)


# Served until an administrator saves a catalog
DEFAULT_CATALOG = (
    Reward(
        id=1,
        name="Free Taco",
        icon="🌮",
        points_required=50,
        description="A taco of your choice",
    ),
    Reward(
        id=2,
        name="Free Drink",
        icon="🥤",
        points_required=100,
        description="Soda or agua fresca",
    ),
    Reward(
        id=3,
        name="Full Meal",
        icon="🍽️",
        points_required=200,
        description="Full plate plus a drink",
    ),
    Reward(
        id=4,
        name="Meal for 4",
        icon="🏆",
        points_required=500,
        description="Full meal for four people",
        premium=True,
    ),
)


def _load(backend: LedgerBackend) -> list[Reward]:
    """Stored catalog or the defaults. Backend errors propagate.

    Stored entries that fail validation are skipped.
    """
    rewards = read(backend.get_reward_catalog)
    if rewards is None:
        return list(DEFAULT_CATALOG)
    loaded = []
    for reward in rewards:
        try:
            validate_reward(reward)
        except ValidationError as exc:
            logger.warning("Skipping invalid stored reward %s: %s", reward.id, exc)
            continue
        loaded.append(reward)
    return loaded


def list_rewards() -> list[Reward]:
    """
    Return the catalog in display order.

    Never raises: an unreachable backend yields an empty catalog, which
    callers render as "no rewards configured".
    """
    try:
        return _load(get_backend())
    except BackendUnavailableError as exc:
        logger.warning("Reward catalog unavailable, serving empty catalog: %s", exc)
        return []


def get_reward(reward_id: int, rewards: list[Reward] | None = None) -> Reward:
    """Find a reward by id in the given (or current) catalog."""
    if rewards is None:
        rewards = _load(get_backend())
    for reward in rewards:
        if reward.id == reward_id:
            return reward
    raise NotFoundError("REWARD_NOT_FOUND", reward_id=reward_id)


def validate_reward(reward: Reward) -> None:
    """Raise ValidationError unless the reward can be stored."""
    points = reward.points_required
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise ValidationError(
            "INVALID_POINTS",
            reward_id=reward.id,
            points_required=points,
        )
    if not isinstance(reward.name, str) or not reward.name.strip():
        raise ValidationError(message="Reward name is required", reward_id=reward.id)


def upsert_reward(reward: Reward) -> Reward:
    """
    Replace the reward with the same id in place, or append it.

    Args:
        reward: Reward to store

    Returns:
        The stored Reward

    Raises:
        ValidationError: If points_required is not a positive integer
    """
    validate_reward(reward)
    backend = get_backend()
    rewards = _load(backend)

    for index, existing in enumerate(rewards):
        if existing.id == reward.id:
            rewards[index] = reward
            action = "updated"
            break
    else:
        rewards.append(reward)
        action = "added"

    backend.put_reward_catalog(rewards)
    logger.info("Reward %s %s (%s, %d pts)", reward.id, action, reward.name, reward.points_required)
    return reward


def add_reward(
    name: str,
    icon: str,
    points_required: int,
    description: str = "",
    premium: bool = False,
) -> Reward:
    """Append a new reward with a fresh id."""
    reward = Reward(
        id=0,
        name=name,
        icon=icon,
        points_required=points_required,
        description=description,
        premium=premium,
    )
    validate_reward(reward)
    existing_ids = {r.id for r in _load(get_backend())}
    return upsert_reward(replace(reward, id=_next_id(existing_ids)))


def _next_id(existing_ids: set[int]) -> int:
    """Millisecond timestamp, bumped past any id already in use."""
    candidate = int(time.time() * 1000)
    while candidate in existing_ids:
        candidate += 1
    return candidate


def delete_reward(reward_id: int) -> bool:
    """
    Remove a reward from the catalog.

    Past redemption records keep their reward name snapshot.

    Returns:
        False (and writes nothing) if no reward had that id
    """
    backend = get_backend()
    rewards = _load(backend)
    remaining = [r for r in rewards if r.id != reward_id]
    if len(remaining) == len(rewards):
        return False

    backend.put_reward_catalog(remaining)
    logger.info("Reward %s deleted", reward_id)
    return True
