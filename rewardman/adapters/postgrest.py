"""
PostgREST LedgerBackend adapter (hosted Postgres, e.g. Supabase).

Expected tables:
1) customers
   - id bigserial primary key
   - name text not null
   - email text unique not null
   - points int not null default 0 check (points >= 0)
   - created_at timestamptz default now()

2) reward_catalog
   - id int primary key (single row, id = 1)
   - config jsonb not null

3) redemptions
   - id uuid primary key
   - customer_id bigint, customer_name text
   - reward_id bigint, reward_name text
   - points_spent int, points_before int, points_remaining_after int
   - redeemed_at timestamptz
"""

import logging
import threading
from datetime import datetime
from typing import Any

import requests
from django.utils.dateparse import parse_datetime

from rewardman.conf import rewardman_settings
from rewardman.exceptions import (
    BackendUnavailableError,
    ConcurrentUpdateError,
    DuplicateEmailError,
    RedemptionIncompleteError,
    RewardmanError,
)
from rewardman.protocols.ledger import CustomerInfo, RedemptionRecord, Reward

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
CATALOG_ROW_ID = 1


def _customer_info(row: dict) -> CustomerInfo:
    return CustomerInfo(
        id=int(row["id"]),
        name=row["name"],
        email=row["email"],
        points=int(row["points"]),
        created_at=parse_datetime(row["created_at"]),
    )


def _record(row: dict) -> RedemptionRecord:
    return RedemptionRecord.from_dict({**row, "timestamp": row["redeemed_at"]})


def _record_row(record: RedemptionRecord) -> dict:
    row = record.as_dict()
    row["redeemed_at"] = row.pop("timestamp")
    return row


class PostgrestLedgerBackend:
    """
    LedgerBackend over the PostgREST HTTP API.

    Every call is bounded by REQUEST_TIMEOUT. Timeouts, connection errors
    and 5xx responses raise BackendUnavailableError; other non-2xx
    responses raise RewardmanError("BACKEND_REJECTED").
    """

    table_customers = "customers"
    table_catalog = "reward_catalog"
    table_redemptions = "redemptions"

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.url = (url or rewardman_settings.POSTGREST_URL).rstrip("/")
        self.key = key or rewardman_settings.POSTGREST_KEY
        self.timeout = timeout if timeout is not None else rewardman_settings.REQUEST_TIMEOUT
        self.session = session or shared_session()
        if not self.url or not self.key:
            raise RewardmanError(
                "BACKEND_REJECTED",
                message="Missing POSTGREST_URL or POSTGREST_KEY.",
            )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _headers(self, prefer: str = "") -> dict[str, str]:
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(
        self,
        method: str,
        table: str,
        params: Any = None,
        json: Any = None,
        prefer: str = "",
    ) -> Any:
        url = f"{self.url}/rest/v1/{table}"
        try:
            r = self.session.request(
                method,
                url,
                headers=self._headers(prefer),
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except (requests.Timeout, requests.ConnectionError) as exc:
            raise BackendUnavailableError(table=table, method=method, detail=str(exc)) from exc

        if r.status_code >= 500:
            raise BackendUnavailableError(table=table, status=r.status_code, detail=r.text)
        if r.status_code >= 400:
            body = self._error_body(r)
            if body.get("code") == UNIQUE_VIOLATION:
                raise DuplicateEmailError(detail=body.get("message", ""))
            raise RewardmanError(
                "BACKEND_REJECTED",
                table=table,
                status=r.status_code,
                detail=r.text,
            )

        if r.status_code == 204 or not r.content:
            return []
        return r.json()

    @staticmethod
    def _error_body(r) -> dict:
        try:
            body = r.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def insert_customer(self, name: str, email: str) -> CustomerInfo:
        try:
            data = self._request(
                "POST",
                self.table_customers,
                json=[{"name": name, "email": email, "points": 0}],
                prefer="return=representation",
            )
        except DuplicateEmailError as exc:
            raise DuplicateEmailError(email=email, **exc.data) from exc
        return _customer_info(data[0])

    def select_customer(self, customer_id: int) -> CustomerInfo | None:
        data = self._request(
            "GET",
            self.table_customers,
            params={"select": "*", "id": f"eq.{customer_id}"},
        )
        return _customer_info(data[0]) if data else None

    def select_customer_by_email(self, email: str) -> CustomerInfo | None:
        data = self._request(
            "GET",
            self.table_customers,
            params={"select": "*", "email": f"eq.{email}"},
        )
        return _customer_info(data[0]) if data else None

    def select_all_customers(self) -> list[CustomerInfo]:
        data = self._request(
            "GET",
            self.table_customers,
            params={"select": "*", "order": "created_at.desc"},
        )
        return [_customer_info(row) for row in data]

    def update_customer_points(self, customer_id: int, points: int) -> CustomerInfo | None:
        data = self._request(
            "PATCH",
            self.table_customers,
            params={"id": f"eq.{customer_id}"},
            json={"points": points},
            prefer="return=representation",
        )
        return _customer_info(data[0]) if data else None

    def delete_customer(self, customer_id: int) -> bool:
        data = self._request(
            "DELETE",
            self.table_customers,
            params={"id": f"eq.{customer_id}"},
            prefer="return=representation",
        )
        return bool(data)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_reward_catalog(self) -> list[Reward] | None:
        data = self._request(
            "GET",
            self.table_catalog,
            params={"select": "config", "id": f"eq.{CATALOG_ROW_ID}"},
        )
        if not data or data[0].get("config") is None:
            return None
        return [Reward.from_dict(item) for item in data[0]["config"]]

    def put_reward_catalog(self, rewards: list[Reward]) -> None:
        self._request(
            "POST",
            self.table_catalog,
            params={"on_conflict": "id"},
            json=[{"id": CATALOG_ROW_ID, "config": [r.as_dict() for r in rewards]}],
            prefer="resolution=merge-duplicates,return=minimal",
        )

    # ------------------------------------------------------------------
    # Redemption records
    # ------------------------------------------------------------------

    def insert_redemption_record(self, record: RedemptionRecord) -> None:
        self._request(
            "POST",
            self.table_redemptions,
            params={"on_conflict": "id"},
            json=[_record_row(record)],
            prefer="resolution=ignore-duplicates,return=minimal",
        )

    def select_redemption_records(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[RedemptionRecord]:
        params = [("select", "*"), ("order", "redeemed_at.desc")]
        if start is not None:
            params.append(("redeemed_at", f"gte.{start.isoformat()}"))
        if end is not None:
            params.append(("redeemed_at", f"lte.{end.isoformat()}"))
        data = self._request("GET", self.table_redemptions, params=params)
        return [_record(row) for row in data]

    def apply_redemption(self, record: RedemptionRecord, expected_points: int) -> None:
        """
        Compare-and-set reset first, then the idempotent record insert.

        The reset only matches while the stored balance still equals
        expected_points, so two racing redemptions cannot both pass.
        """
        data = self._request(
            "PATCH",
            self.table_customers,
            params={
                "id": f"eq.{record.customer_id}",
                "points": f"eq.{expected_points}",
            },
            json={"points": record.points_remaining_after},
            prefer="return=representation",
        )
        if not data:
            raise ConcurrentUpdateError(
                customer_id=record.customer_id,
                expected=expected_points,
            )

        try:
            self.insert_redemption_record(record)
        except RewardmanError as exc:
            logger.error(
                "Redemption %s: balance reset for customer %s but record write failed: %s",
                record.id,
                record.customer_id,
                exc,
            )
            raise RedemptionIncompleteError(
                record=record.as_dict(),
                detail=exc.message,
            ) from exc


_lock = threading.Lock()
_default_session: requests.Session | None = None


def shared_session() -> requests.Session:
    """Process-wide HTTP session reused by settings-configured backends."""
    global _default_session
    with _lock:
        if _default_session is None:
            _default_session = requests.Session()
        return _default_session
