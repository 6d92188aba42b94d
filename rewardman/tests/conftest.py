"""Pytest fixtures for Rewardman tests."""

import uuid

import pytest
from django.utils import timezone

from rewardman.adapters.django_orm import DjangoLedgerBackend
from rewardman.protocols.ledger import RedemptionRecord, Reward
from rewardman.services import ledger


@pytest.fixture
def customer(db):
    """A freshly registered customer (0 points)."""
    return ledger.register("Ana", "ana@x.com")


@pytest.fixture
def rich_customer(db):
    """A customer holding 480 points."""
    cust = ledger.register("Bruno", "bruno@example.com")
    return ledger.adjust_points(cust.id, 480)


@pytest.fixture
def saved_catalog(db):
    """Persist a small custom catalog: Taco 50, Drink 100."""
    rewards = [
        Reward(id=10, name="Taco", icon="🌮", points_required=50),
        Reward(id=20, name="Drink", icon="🥤", points_required=100),
    ]
    DjangoLedgerBackend().put_reward_catalog(rewards)
    return rewards


@pytest.fixture
def make_record():
    """Factory for in-memory RedemptionRecords."""

    def _make(reward_name="Taco", timestamp=None, **overrides):
        if timestamp is None:
            timestamp = timezone.now()
        elif timezone.is_naive(timestamp):
            timestamp = timezone.make_aware(timestamp)
        fields = {
            "id": str(uuid.uuid4()),
            "customer_id": 1,
            "customer_name": "Ana",
            "reward_id": 1,
            "reward_name": reward_name,
            "points_spent": 50,
            "points_before": 50,
            "points_remaining_after": 0,
            "timestamp": timestamp,
        }
        fields.update(overrides)
        return RedemptionRecord(**fields)

    return _make