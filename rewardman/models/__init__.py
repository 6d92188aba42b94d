"""Rewardman models (backing store for the Django ORM adapter)."""

from rewardman.models.customer import Customer
from rewardman.models.catalog import RewardCatalog
from rewardman.models.redemption import Redemption

__all__ = [
    "Customer",
    "RewardCatalog",
    "Redemption",
]
