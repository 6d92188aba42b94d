"""Metrics and history views over the redemption record log.

Everything here except load_state/fetch_records is a pure function of
(customers, rewards, records).
"""

import calendar
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from django.utils import timezone

from rewardman.exceptions import ValidationError
from rewardman.protocols.ledger import CustomerInfo, RedemptionRecord, Reward
from rewardman.services import catalog, ledger
from rewardman.services.backend import get_backend, read
from rewardman.services.redemption import has_available_reward


@dataclass
class LedgerState:
    """
    Local working view of backend state.

    Built by load_state() and refreshed explicitly with reload() after
    mutations; there are no module-level mirrors.
    """

    customers: list[CustomerInfo] = field(default_factory=list)
    rewards: list[Reward] = field(default_factory=list)
    records: list[RedemptionRecord] = field(default_factory=list)

    def reload(self) -> "LedgerState":
        fresh = load_state()
        self.customers = fresh.customers
        self.rewards = fresh.rewards
        self.records = fresh.records
        return self


@dataclass(frozen=True)
class MetricsSnapshot:
    """Summary statistics. Derived on demand, never persisted."""

    total_customers: int
    total_points: int
    total_redemptions: int
    customers_with_available_reward: int
    reward_frequency: list[tuple[str, int]]
    first_redemption_at: datetime | None
    last_redemption_at: datetime | None


def load_state() -> LedgerState:
    return LedgerState(
        customers=ledger.list_customers(),
        rewards=catalog.list_rewards(),
        records=fetch_records(),
    )


def reward_frequency(records: list[RedemptionRecord]) -> list[tuple[str, int]]:
    """
    Redemption count per reward name, most redeemed first.

    Ties keep first-encountered order.
    """
    counts = Counter(record.reward_name for record in records)
    return sorted(counts.items(), key=lambda item: -item[1])


def snapshot(state: LedgerState) -> MetricsSnapshot:
    timestamps = [record.timestamp for record in state.records]
    return MetricsSnapshot(
        total_customers=len(state.customers),
        total_points=sum(c.points for c in state.customers),
        total_redemptions=len(state.records),
        customers_with_available_reward=sum(
            1 for c in state.customers if has_available_reward(c, state.rewards)
        ),
        reward_frequency=reward_frequency(state.records),
        first_redemption_at=min(timestamps) if timestamps else None,
        last_redemption_at=max(timestamps) if timestamps else None,
    )


# =============================================================================
# Date ranges
# =============================================================================


def _as_datetime(value: date | datetime, at: time) -> datetime:
    """Dates expand to the given time of day in the current timezone."""
    if isinstance(value, datetime):
        return timezone.make_aware(value) if timezone.is_naive(value) else value
    return timezone.make_aware(datetime.combine(value, at))


def range_bounds(start: date | datetime, end: date | datetime) -> tuple[datetime, datetime]:
    """
    Inclusive datetime bounds for a range.

    A date end covers the whole day, up to 23:59:59.999999.

    Raises:
        ValidationError: If start is after end
    """
    start_at = _as_datetime(start, time.min)
    end_at = _as_datetime(end, time.max)
    if start_at > end_at:
        raise ValidationError("INVALID_RANGE", start=str(start), end=str(end))
    return start_at, end_at


def records_in_range(
    records: list[RedemptionRecord],
    start: date | datetime,
    end: date | datetime,
) -> list[RedemptionRecord]:
    start_at, end_at = range_bounds(start, end)
    return [r for r in records if start_at <= r.timestamp <= end_at]


def fetch_records(
    start: date | datetime | None = None,
    end: date | datetime | None = None,
) -> list[RedemptionRecord]:
    """Load records from the backend, filtered there when bounds are given."""
    start_at = end_at = None
    if start is not None and end is not None:
        start_at, end_at = range_bounds(start, end)
    elif start is not None:
        start_at = _as_datetime(start, time.min)
    elif end is not None:
        end_at = _as_datetime(end, time.max)
    return read(get_backend().select_redemption_records, start_at, end_at)


def days_in_range(start: date, end: date) -> int:
    """Number of calendar days in an inclusive range."""
    return (end - start).days + 1


def _months_ago(day: date, months: int) -> date:
    index = day.year * 12 + day.month - 1 - months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def current_month(records: list[RedemptionRecord], today: date | None = None):
    today = today or timezone.localdate()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return records_in_range(records, today.replace(day=1), today.replace(day=last_day))


def last_30_days(records: list[RedemptionRecord], today: date | None = None):
    today = today or timezone.localdate()
    return records_in_range(records, today - timedelta(days=30), today)


def last_quarter(records: list[RedemptionRecord], today: date | None = None):
    """Trailing three calendar months up to and including today."""
    today = today or timezone.localdate()
    return records_in_range(records, _months_ago(today, 3), today)
