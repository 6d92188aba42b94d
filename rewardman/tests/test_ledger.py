"""Tests for the customer ledger service."""

from unittest.mock import MagicMock, patch

import pytest

from rewardman.exceptions import (
    BackendUnavailableError,
    ConcurrentUpdateError,
    DuplicateEmailError,
    NotFoundError,
    ValidationError,
)
from rewardman.models import Customer
from rewardman.protocols.ledger import CustomerInfo
from rewardman.services import ledger, locks
from rewardman.signals import customer_registered, points_adjusted


pytestmark = pytest.mark.django_db


class TestRegister:
    """register / findByEmail."""

    def test_register_starts_at_zero(self, customer):
        assert customer.points == 0
        assert customer.name == "Ana"
        assert ledger.find_by_email("ana@x.com") == customer

    def test_duplicate_email_raises(self, customer):
        """Second registration fails; the first customer is unchanged."""
        ledger.adjust_points(customer.id, 20)

        with pytest.raises(DuplicateEmailError):
            ledger.register("Other Ana", "ana@x.com")

        found = ledger.find_by_email("ana@x.com")
        assert found.name == "Ana"
        assert found.points == 20
        assert Customer.objects.count() == 1

    def test_email_uniqueness_is_case_sensitive(self, customer):
        """Differently-cased email is a different customer."""
        other = ledger.register("Ana Upper", "Ana@x.com")
        assert other.id != customer.id

        with pytest.raises(NotFoundError):
            ledger.find_by_email("ANA@X.COM")

    @pytest.mark.parametrize(
        "name,email",
        [
            ("", "a@b.com"),
            ("Ana", "not-an-email"),
            ("Ana", ""),
            ("A" * 201, "long@example.com"),
            ("Ana", "a" * 64 + "@" + ".".join(["b" * 60] * 4) + ".com"),
        ],
    )
    def test_invalid_input_rejected(self, name, email):
        with pytest.raises(ValidationError):
            ledger.register(name, email)
        assert not Customer.objects.exists()

    def test_name_at_column_limit_accepted(self, db):
        assert len(ledger.register("A" * 200, "max@example.com").name) == 200

    def test_register_or_login_returns_existing(self, customer):
        result = ledger.register_or_login("Ana Again", "ana@x.com")

        assert result.created is False
        assert result.customer.id == customer.id

    def test_register_or_login_creates(self, db):
        result = ledger.register_or_login("Caro", "caro@example.com")
        assert result.created is True

    def test_registered_signal(self, db):
        received = []

        def handler(sender, customer, **kwargs):
            received.append(customer.email)

        customer_registered.connect(handler)
        try:
            ledger.register("Dani", "dani@example.com")
        finally:
            customer_registered.disconnect(handler)

        assert received == ["dani@example.com"]


class TestAdjustPoints:
    """adjustPoints clamps at zero, never errors on underflow."""

    def test_add_points(self, customer):
        assert ledger.adjust_points(customer.id, 50).points == 50

    def test_decrement_below_zero_clamps(self, customer):
        ledger.adjust_points(customer.id, 3)
        assert ledger.adjust_points(customer.id, -10).points == 0

    def test_points_never_negative_over_sequence(self, customer):
        for delta in [5, -20, 40, -7, -100, 12, 0, -1]:
            assert ledger.adjust_points(customer.id, delta).points >= 0
        assert ledger.get(customer.id).points == 11

    @pytest.mark.parametrize("delta", [1.5, "5", None, True])
    def test_non_integer_delta_rejected(self, customer, delta):
        with pytest.raises(ValidationError):
            ledger.adjust_points(customer.id, delta)

    def test_unknown_customer(self, db):
        with pytest.raises(NotFoundError):
            ledger.adjust_points(424242, 5)

    def test_bump_uses_points_step(self, customer, settings):
        settings.REWARDMAN = {"POINTS_STEP": 5}
        ledger.bump_points(customer.id)
        ledger.bump_points(customer.id)
        assert ledger.bump_points(customer.id, increase=False).points == 5

    def test_reset_points(self, rich_customer):
        assert ledger.reset_points(rich_customer.id).points == 0

    def test_points_adjusted_signal(self, customer):
        received = []

        def handler(sender, customer, previous, **kwargs):
            received.append((previous, customer.points))

        points_adjusted.connect(handler)
        try:
            ledger.adjust_points(customer.id, 15)
        finally:
            points_adjusted.disconnect(handler)

        assert received == [(0, 15)]

    def test_busy_customer_times_out(self, customer, settings):
        """A held customer lock makes concurrent mutations fail fast."""
        settings.REWARDMAN = {"LOCK_TIMEOUT": 0.01}

        with locks.customer_lock(customer.id):
            with pytest.raises(ConcurrentUpdateError) as exc:
                ledger.adjust_points(customer.id, 5)

        assert exc.value.code == "CUSTOMER_BUSY"
        assert ledger.get(customer.id).points == 0


class TestReadRetries:
    """Reads retry on transient failure; writes never do."""

    def test_read_retried_once(self):
        info = MagicMock(spec=CustomerInfo)
        backend = MagicMock()
        backend.select_customer.side_effect = [BackendUnavailableError(), info]

        with patch("rewardman.services.ledger.get_backend", return_value=backend):
            assert ledger.get(1) is info

        assert backend.select_customer.call_count == 2

    def test_write_not_retried(self):
        backend = MagicMock()
        backend.insert_customer.side_effect = BackendUnavailableError()

        with patch("rewardman.services.ledger.get_backend", return_value=backend):
            with pytest.raises(BackendUnavailableError):
                ledger.register("Eva", "eva@example.com")

        assert backend.insert_customer.call_count == 1


class TestListingAndDelete:
    def test_list_newest_first(self, customer):
        second = ledger.register("Zoe", "zoe@example.com")
        assert [c.id for c in ledger.list_customers()] == [second.id, customer.id]

    def test_filter_customers(self, customer, rich_customer):
        customers = ledger.list_customers()

        assert [c.name for c in ledger.filter_customers(customers, "BRU")] == ["Bruno"]
        assert [c.name for c in ledger.filter_customers(customers, "x.com")] == ["Ana"]
        # Below the minimum length the list is not filtered
        assert len(ledger.filter_customers(customers, "z")) == 2

    def test_delete(self, customer):
        ledger.delete(customer.id)
        with pytest.raises(NotFoundError):
            ledger.get(customer.id)

    def test_delete_unknown(self, db):
        with pytest.raises(NotFoundError):
            ledger.delete(999)
