"""Tests for Rewardman models, admin and errors."""

import pytest
from django.contrib import admin
from django.db import IntegrityError, transaction

from rewardman.exceptions import (
    BackendUnavailableError,
    DuplicateEmailError,
    InsufficientPointsError,
    NotFoundError,
    RedemptionIncompleteError,
    RewardmanError,
    ValidationError,
)
from rewardman.models import Customer, Redemption


class TestCustomerModel:
    @pytest.mark.django_db
    def test_points_cannot_go_negative_in_db(self):
        cust = Customer.objects.create(name="Ana", email="ana@x.com")

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Customer.objects.filter(pk=cust.pk).update(points=-1)

    def test_str(self):
        cust = Customer(name="Ana", email="ana@x.com", points=15)
        assert str(cust) == "Ana <ana@x.com>: 15pts"


class TestAdmin:
    def test_models_registered(self):
        assert admin.site.is_registered(Customer)
        assert admin.site.is_registered(Redemption)

    def test_redemptions_are_read_only(self):
        model_admin = admin.site._registry[Redemption]
        assert model_admin.has_add_permission(None) is False
        assert model_admin.has_change_permission(None) is False
        assert model_admin.has_delete_permission(None) is False


class TestRewardmanError:
    """Structured errors: code, default message, data."""

    def test_default_messages(self):
        err = NotFoundError("CUSTOMER_NOT_FOUND")
        assert err.code == "CUSTOMER_NOT_FOUND"
        assert err.message == "Customer not found"

    def test_default_code_per_class(self):
        assert ValidationError().code == "INVALID_INPUT"
        assert DuplicateEmailError().code == "DUPLICATE_EMAIL"
        assert InsufficientPointsError().code == "INSUFFICIENT_POINTS"
        assert BackendUnavailableError().code == "BACKEND_UNAVAILABLE"

    def test_custom_message(self):
        err = ValidationError(message="Custom msg")
        assert err.message == "Custom msg"
        assert str(err) == "[INVALID_INPUT] Custom msg"

    def test_as_dict(self):
        err = InsufficientPointsError(available=10, required=50)
        assert err.as_dict() == {
            "code": "INSUFFICIENT_POINTS",
            "message": "Insufficient points for redemption",
            "data": {"available": 10, "required": 50},
        }

    def test_hierarchy(self):
        assert issubclass(RedemptionIncompleteError, BackendUnavailableError)
        assert issubclass(DuplicateEmailError, RewardmanError)
