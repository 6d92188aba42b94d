"""Ledger protocol: domain values and the persistence backend contract."""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from django.utils.dateparse import parse_datetime


@dataclass(frozen=True)
class CustomerInfo:
    """A registered customer and their current point balance."""

    id: int
    name: str
    email: str
    points: int
    created_at: datetime


@dataclass(frozen=True)
class Reward:
    """A catalog entry. Catalog order is display order."""

    id: int
    name: str
    icon: str
    points_required: int
    description: str = ""
    premium: bool = False

    def as_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Reward":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            icon=data.get("icon", ""),
            points_required=int(data["points_required"]),
            description=data.get("description") or "",
            premium=bool(data.get("premium", False)),
        )


@dataclass(frozen=True)
class RedemptionRecord:
    """
    Immutable history entry for one redemption.

    Customer and reward names are snapshots taken at redemption time, so
    later renames or deletions never rewrite history.
    """

    id: str
    customer_id: int
    customer_name: str
    reward_id: int
    reward_name: str
    points_spent: int
    points_before: int
    points_remaining_after: int
    timestamp: datetime

    def as_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "RedemptionRecord":
        timestamp = data["timestamp"]
        if isinstance(timestamp, str):
            timestamp = parse_datetime(timestamp)
        return cls(
            id=str(data["id"]),
            customer_id=int(data["customer_id"]),
            customer_name=data["customer_name"],
            reward_id=int(data["reward_id"]),
            reward_name=data["reward_name"],
            points_spent=int(data["points_spent"]),
            points_before=int(data.get("points_before", data["points_spent"])),
            points_remaining_after=int(data["points_remaining_after"]),
            timestamp=timestamp,
        )


@runtime_checkable
class LedgerBackend(Protocol):
    """
    Protocol for the persistence backend.

    Implemented by adapters/django_orm.py and adapters/postgrest.py.
    Infrastructure failures must surface as BackendUnavailableError.

    Configuration in settings.py:
        REWARDMAN = {
            "BACKEND": "rewardman.adapters.django_orm.DjangoLedgerBackend",
        }
    """

    # Customers

    def insert_customer(self, name: str, email: str) -> CustomerInfo:
        """Insert with points=0. Raises DuplicateEmailError on an exact email match."""
        ...

    def select_customer(self, customer_id: int) -> CustomerInfo | None:
        ...

    def select_customer_by_email(self, email: str) -> CustomerInfo | None:
        """Exact, case-sensitive lookup."""
        ...

    def select_all_customers(self) -> list[CustomerInfo]:
        """All customers, newest first."""
        ...

    def update_customer_points(self, customer_id: int, points: int) -> CustomerInfo | None:
        """Store an absolute balance. Returns None if the customer is gone."""
        ...

    def delete_customer(self, customer_id: int) -> bool:
        """Returns False if nothing was deleted."""
        ...

    # Catalog

    def get_reward_catalog(self) -> list[Reward] | None:
        """Stored catalog, or None when no catalog was ever saved."""
        ...

    def put_reward_catalog(self, rewards: list[Reward]) -> None:
        """Replace the whole catalog."""
        ...

    # Redemption records

    def insert_redemption_record(self, record: RedemptionRecord) -> None:
        """Append a record. Idempotent on record.id."""
        ...

    def select_redemption_records(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[RedemptionRecord]:
        """Records with start <= timestamp <= end, newest first."""
        ...

    def apply_redemption(self, record: RedemptionRecord, expected_points: int) -> None:
        """
        Append the record and reset the customer's balance to 0 as one unit.

        Raises ConcurrentUpdateError if the stored balance is no longer
        expected_points. Backends that cannot commit both writes atomically
        raise RedemptionIncompleteError when only the reset landed.
        """
        ...
