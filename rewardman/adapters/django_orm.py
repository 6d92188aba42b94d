"""Django ORM LedgerBackend adapter."""

from contextlib import contextmanager
from datetime import datetime

from django.db import IntegrityError, InterfaceError, OperationalError, transaction

from rewardman.exceptions import (
    BackendUnavailableError,
    ConcurrentUpdateError,
    DuplicateEmailError,
    NotFoundError,
)
from rewardman.models import Customer, Redemption, RewardCatalog
from rewardman.protocols.ledger import CustomerInfo, RedemptionRecord, Reward


@contextmanager
def _translate_errors(operation: str):
    """Surface connection-level database failures as BackendUnavailableError."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        raise BackendUnavailableError(operation=operation, detail=str(exc)) from exc


def _customer_info(row: Customer) -> CustomerInfo:
    return CustomerInfo(
        id=row.pk,
        name=row.name,
        email=row.email,
        points=row.points,
        created_at=row.created_at,
    )


def _record(row: Redemption) -> RedemptionRecord:
    return RedemptionRecord(
        id=str(row.id),
        customer_id=row.customer_id,
        customer_name=row.customer_name,
        reward_id=row.reward_id,
        reward_name=row.reward_name,
        points_spent=row.points_spent,
        points_before=row.points_before,
        points_remaining_after=row.points_remaining_after,
        timestamp=row.redeemed_at,
    )


def _record_fields(record: RedemptionRecord) -> dict:
    return {
        "customer_id": record.customer_id,
        "customer_name": record.customer_name,
        "reward_id": record.reward_id,
        "reward_name": record.reward_name,
        "points_spent": record.points_spent,
        "points_before": record.points_before,
        "points_remaining_after": record.points_remaining_after,
        "redeemed_at": record.timestamp,
    }


class DjangoLedgerBackend:
    """
    LedgerBackend backed by the rewardman models.

    apply_redemption writes the record and the reset in one transaction
    with the customer row locked (select_for_update), so there is no
    partial-failure window.
    """

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def insert_customer(self, name: str, email: str) -> CustomerInfo:
        with _translate_errors("insert_customer"):
            try:
                with transaction.atomic():
                    row = Customer.objects.create(name=name, email=email, points=0)
            except IntegrityError:
                raise DuplicateEmailError(email=email)
        return _customer_info(row)

    def select_customer(self, customer_id: int) -> CustomerInfo | None:
        with _translate_errors("select_customer"):
            row = Customer.objects.filter(pk=customer_id).first()
        return _customer_info(row) if row else None

    def select_customer_by_email(self, email: str) -> CustomerInfo | None:
        with _translate_errors("select_customer_by_email"):
            row = Customer.objects.filter(email=email).first()
        return _customer_info(row) if row else None

    def select_all_customers(self) -> list[CustomerInfo]:
        with _translate_errors("select_all_customers"):
            rows = list(Customer.objects.order_by("-created_at", "-pk"))
        return [_customer_info(row) for row in rows]

    def update_customer_points(self, customer_id: int, points: int) -> CustomerInfo | None:
        with _translate_errors("update_customer_points"):
            updated = Customer.objects.filter(pk=customer_id).update(points=points)
            if not updated:
                return None
            row = Customer.objects.get(pk=customer_id)
        return _customer_info(row)

    def delete_customer(self, customer_id: int) -> bool:
        with _translate_errors("delete_customer"):
            deleted, _ = Customer.objects.filter(pk=customer_id).delete()
        return deleted > 0

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_reward_catalog(self) -> list[Reward] | None:
        with _translate_errors("get_reward_catalog"):
            row = RewardCatalog.objects.filter(pk=RewardCatalog.SINGLETON_ID).first()
        if row is None:
            return None
        return [Reward.from_dict(item) for item in row.config]

    def put_reward_catalog(self, rewards: list[Reward]) -> None:
        with _translate_errors("put_reward_catalog"):
            RewardCatalog.objects.update_or_create(
                pk=RewardCatalog.SINGLETON_ID,
                defaults={"config": [reward.as_dict() for reward in rewards]},
            )

    # ------------------------------------------------------------------
    # Redemption records
    # ------------------------------------------------------------------

    def insert_redemption_record(self, record: RedemptionRecord) -> None:
        with _translate_errors("insert_redemption_record"):
            Redemption.objects.get_or_create(id=record.id, defaults=_record_fields(record))

    def select_redemption_records(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[RedemptionRecord]:
        qs = Redemption.objects.all()
        if start is not None:
            qs = qs.filter(redeemed_at__gte=start)
        if end is not None:
            qs = qs.filter(redeemed_at__lte=end)
        with _translate_errors("select_redemption_records"):
            rows = list(qs.order_by("-redeemed_at"))
        return [_record(row) for row in rows]

    def apply_redemption(self, record: RedemptionRecord, expected_points: int) -> None:
        with _translate_errors("apply_redemption"), transaction.atomic():
            row = (
                Customer.objects
                .select_for_update()
                .filter(pk=record.customer_id)
                .first()
            )
            if row is None:
                raise NotFoundError("CUSTOMER_NOT_FOUND", customer_id=record.customer_id)
            if row.points != expected_points:
                raise ConcurrentUpdateError(
                    customer_id=row.pk,
                    expected=expected_points,
                    actual=row.points,
                )

            Redemption.objects.create(id=record.id, **_record_fields(record))

            row.points = record.points_remaining_after
            row.save(update_fields=["points"])
