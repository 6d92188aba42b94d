"""Tests for the reward catalog service."""

from unittest.mock import MagicMock, patch

import pytest

from rewardman.exceptions import BackendUnavailableError, NotFoundError, ValidationError
from rewardman.models import RewardCatalog
from rewardman.protocols.ledger import Reward
from rewardman.services import catalog


pytestmark = pytest.mark.django_db


class TestListRewards:
    """listRewards: stored catalog, defaults, degraded mode."""

    def test_defaults_when_nothing_stored(self):
        """No stored catalog serves the 4 starter rewards."""
        rewards = catalog.list_rewards()

        assert [r.points_required for r in rewards] == [50, 100, 200, 500]
        assert rewards[-1].premium is True
        assert not RewardCatalog.objects.exists()

    def test_stored_empty_catalog_is_valid(self):
        """An admin-emptied catalog stays empty (no defaults)."""
        RewardCatalog.objects.create(config=[])
        assert catalog.list_rewards() == []

    def test_invalid_stored_entries_skipped(self):
        """Stored rewards with a non-positive threshold are not served."""
        RewardCatalog.objects.create(
            config=[
                {"id": 1, "name": "Broken", "icon": "", "points_required": 0},
                {"id": 2, "name": "Taco", "icon": "", "points_required": 50},
            ]
        )

        assert [r.name for r in catalog.list_rewards()] == ["Taco"]
        with pytest.raises(NotFoundError):
            catalog.get_reward(1)

    def test_backend_unavailable_returns_empty(self):
        """Unreachable backend yields an empty list, after one retry."""
        backend = MagicMock()
        backend.get_reward_catalog.side_effect = BackendUnavailableError()

        with patch("rewardman.services.catalog.get_backend", return_value=backend):
            assert catalog.list_rewards() == []

        assert backend.get_reward_catalog.call_count == 2


class TestUpsertReward:
    """upsertReward: replace in place or append."""

    def test_append_new_reward_to_defaults(self):
        """First edit persists the defaults plus the new reward."""
        new = Reward(id=99, name="Churros", icon="🍩", points_required=30)
        catalog.upsert_reward(new)

        rewards = catalog.list_rewards()
        assert len(rewards) == 5
        assert rewards[-1] == new

    def test_replace_preserves_position(self, saved_catalog):
        """Editing keeps the reward's place in the catalog."""
        edited = Reward(id=10, name="Taco XL", icon="🌮", points_required=70)
        catalog.upsert_reward(edited)

        rewards = catalog.list_rewards()
        assert [r.id for r in rewards[-2:]] == [10, 20]
        assert catalog.get_reward(10).name == "Taco XL"

    @pytest.mark.parametrize("points", [0, -5, 2.5, "50", True])
    def test_rejects_non_positive_integer_points(self, points):
        """points_required must be a positive integer; nothing is written."""
        with pytest.raises(ValidationError) as exc:
            catalog.upsert_reward(Reward(id=7, name="Bad", icon="", points_required=points))

        assert exc.value.code == "INVALID_POINTS"
        assert not RewardCatalog.objects.exists()

    def test_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            catalog.upsert_reward(Reward(id=7, name="  ", icon="", points_required=10))

    def test_backend_failure_does_not_wipe_catalog(self):
        """A failed catalog read aborts the write instead of saving a partial list."""
        backend = MagicMock()
        backend.get_reward_catalog.side_effect = BackendUnavailableError()

        with patch("rewardman.services.catalog.get_backend", return_value=backend):
            with pytest.raises(BackendUnavailableError):
                catalog.upsert_reward(Reward(id=7, name="New", icon="", points_required=10))

        backend.put_reward_catalog.assert_not_called()

    def test_add_reward_assigns_fresh_id(self, saved_catalog):
        reward = catalog.add_reward("Flan", "🍮", 40, description="Dessert")

        assert reward.id not in (10, 20)
        assert catalog.get_reward(reward.id).description == "Dessert"


class TestDeleteReward:
    """deleteReward: remove, or no-op when absent."""

    def test_delete_existing(self, saved_catalog):
        assert catalog.delete_reward(10) is True
        assert [r.id for r in catalog.list_rewards()] == [20]

    def test_delete_missing_is_noop(self, saved_catalog):
        assert catalog.delete_reward(12345) is False
        assert len(catalog.list_rewards()) == 2

    def test_get_deleted_reward_raises(self, saved_catalog):
        catalog.delete_reward(20)
        with pytest.raises(NotFoundError) as exc:
            catalog.get_reward(20)
        assert exc.value.code == "REWARD_NOT_FOUND"
