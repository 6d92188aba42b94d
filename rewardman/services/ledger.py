"""Customer ledger service - registration and point balances.

Balances never go negative: decrements clamp at zero instead of failing.
Every balance mutation holds the customer's lock.
"""

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from rewardman.conf import rewardman_settings
from rewardman.exceptions import DuplicateEmailError, NotFoundError, ValidationError
from rewardman.models import Customer
from rewardman.protocols.ledger import CustomerInfo
from rewardman.services import locks
from rewardman.services.backend import get_backend, read
from rewardman.signals import customer_deleted, customer_registered, points_adjusted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    """Outcome of register_or_login."""

    customer: CustomerInfo
    created: bool


def register(name: str, email: str) -> CustomerInfo:
    """
    Register a new customer with 0 points.

    Email uniqueness is an exact, case-sensitive match on the stored value.

    Raises:
        ValidationError: If name is blank, email is malformed, or either is too long
        DuplicateEmailError: If the email is already registered
    """
    name = (name or "").strip()
    email = (email or "").strip()
    if not name:
        raise ValidationError(message="Name is required")
    for field, value in (("name", name), ("email", email)):
        max_length = Customer._meta.get_field(field).max_length
        if len(value) > max_length:
            raise ValidationError(
                message=f"{field.capitalize()} is longer than {max_length} characters",
                field=field,
                max_length=max_length,
            )
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError(message="Invalid email address", email=email)

    customer = get_backend().insert_customer(name, email)
    logger.info("Customer %s registered (%s)", customer.id, customer.email)
    customer_registered.send(sender=CustomerInfo, customer=customer)
    return customer


def register_or_login(name: str, email: str) -> Registration:
    """Register, or return the existing customer when the email is taken."""
    try:
        return Registration(customer=register(name, email), created=True)
    except DuplicateEmailError:
        return Registration(customer=find_by_email(email.strip()), created=False)


def get(customer_id: int) -> CustomerInfo:
    """Get customer by id. Raises NotFoundError."""
    customer = read(get_backend().select_customer, customer_id)
    if customer is None:
        raise NotFoundError("CUSTOMER_NOT_FOUND", customer_id=customer_id)
    return customer


def find_by_email(email: str) -> CustomerInfo:
    """Get customer by exact email. Raises NotFoundError."""
    customer = read(get_backend().select_customer_by_email, email)
    if customer is None:
        raise NotFoundError("CUSTOMER_NOT_FOUND", email=email)
    return customer


def list_customers() -> list[CustomerInfo]:
    """All customers, newest first."""
    return read(get_backend().select_all_customers)


def filter_customers(customers: list[CustomerInfo], term: str) -> list[CustomerInfo]:
    """
    Case-insensitive substring match on name or email.

    Terms shorter than MIN_SEARCH_LENGTH leave the list unfiltered.
    """
    term = (term or "").strip().lower()
    if len(term) < rewardman_settings.MIN_SEARCH_LENGTH:
        return list(customers)
    return [
        c for c in customers
        if term in c.name.lower() or term in c.email.lower()
    ]


def _set_points(customer_id: int, compute) -> CustomerInfo:
    backend = get_backend()
    with locks.customer_lock(customer_id):
        current = backend.select_customer(customer_id)
        if current is None:
            raise NotFoundError("CUSTOMER_NOT_FOUND", customer_id=customer_id)
        updated = backend.update_customer_points(customer_id, compute(current.points))
        if updated is None:
            raise NotFoundError("CUSTOMER_NOT_FOUND", customer_id=customer_id)

    points_adjusted.send(sender=CustomerInfo, customer=updated, previous=current.points)
    return updated


def adjust_points(customer_id: int, delta: int) -> CustomerInfo:
    """
    Add delta (may be negative) to the balance, clamping at zero.

    Raises:
        ValidationError: If delta is not an integer
        NotFoundError: If the customer does not exist
    """
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValidationError(message="Point delta must be an integer", delta=delta)

    customer = _set_points(customer_id, lambda points: max(0, points + delta))
    logger.info("Customer %s points %+d -> %d", customer_id, delta, customer.points)
    return customer


def bump_points(customer_id: int, increase: bool = True) -> CustomerInfo:
    """Adjust by one POINTS_STEP (the admin +/- buttons)."""
    step = rewardman_settings.POINTS_STEP
    return adjust_points(customer_id, step if increase else -step)


def reset_points(customer_id: int) -> CustomerInfo:
    """Set the balance to exactly 0."""
    customer = _set_points(customer_id, lambda points: 0)
    logger.info("Customer %s points reset", customer_id)
    return customer


def delete(customer_id: int) -> None:
    """
    Permanently delete a customer.

    Redemption records are history and stay, with a dangling customer_id.

    Raises:
        NotFoundError: If the customer does not exist
    """
    with locks.customer_lock(customer_id):
        if not get_backend().delete_customer(customer_id):
            raise NotFoundError("CUSTOMER_NOT_FOUND", customer_id=customer_id)
    locks.discard(customer_id)

    logger.info("Customer %s deleted", customer_id)
    customer_deleted.send(sender=CustomerInfo, customer_id=customer_id)
