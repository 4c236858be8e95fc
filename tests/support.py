from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from fnmatch import fnmatchcase
from typing import Dict, Iterator, List, Optional, Tuple

import redis

from src.models.large_accounts import (
    LargeAccountRecord,
    LargeAccountStatus,
    LargeAccountTier,
    ServiceLevel,
    ServiceRecord,
)
from src.models.sales import SaleRecord, SalesScope


class InMemoryRedis:
    """Just enough of the redis-py client surface for AnalyticsCache."""

    def __init__(self) -> None:
        self.now = 0.0
        self.store: Dict[str, Tuple[str, float]] = {}
        self.closed = False

    def get(self, key: str) -> Optional[str]:
        entry = self.store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.now >= expires_at:
            del self.store[key]
            return None
        return value

    def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = (value, self.now + ttl)
        return True

    def scan_iter(self, match: str = "*") -> Iterator[str]:
        return iter([key for key in list(self.store) if fnmatchcase(key, match)])

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    def ttl(self, key: str) -> int:
        _, expires_at = self.store[key]
        return int(expires_at - self.now)

    def close(self) -> None:
        self.closed = True


class UnreachableRedis:
    def __init__(self) -> None:
        self.attempts = 0

    def _fail(self, *_: object, **__: object) -> None:
        self.attempts += 1
        raise redis.ConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    get = _fail
    setex = _fail
    scan_iter = _fail
    delete = _fail

    def close(self) -> None:
        return None


class StubSalesRepository:
    def __init__(self, records: Optional[List[SaleRecord]] = None) -> None:
        self.records = records or []
        self.calls: List[Tuple[Optional[datetime], Optional[datetime], Optional[SalesScope]]] = []

    def list_sale_records(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        scope: Optional[SalesScope] = None,
    ) -> List[SaleRecord]:
        self.calls.append((start_date, end_date, scope))
        return list(self.records)


class StubLargeAccountsRepository:
    def __init__(
        self,
        accounts: Optional[List[LargeAccountRecord]] = None,
        service_records: Optional[Dict[str, List[ServiceRecord]]] = None,
    ) -> None:
        self.accounts = {account.id: account for account in accounts or []}
        self.service_records = service_records or {}
        self.service_record_calls: List[Dict[str, object]] = []

    def get_account(self, account_id: str) -> Optional[LargeAccountRecord]:
        return self.accounts.get(account_id)

    def list_service_records(
        self,
        customer_id: str,
        limit: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[ServiceRecord]:
        self.service_record_calls.append(
            {"customer_id": customer_id, "limit": limit, "start_date": start_date, "end_date": end_date}
        )
        records = self.service_records.get(customer_id, [])
        if start_date is not None:
            records = [record for record in records if record.service_date >= start_date]
        if end_date is not None:
            records = [record for record in records if record.service_date <= end_date]
        return records[:limit] if limit is not None else list(records)

    def count_accounts(self, status: Optional[LargeAccountStatus] = None) -> int:
        if status is None:
            return len(self.accounts)
        return sum(1 for account in self.accounts.values() if account.status == status)


def make_sale(
    sale_id: str,
    sales_date: datetime,
    amount: str,
    category: str = "tires",
    employee_id: Optional[str] = None,
    store_id: Optional[str] = None,
) -> SaleRecord:
    return SaleRecord(
        id=sale_id,
        sales_date=sales_date,
        net_amount=Decimal(amount),
        category=category,
        employee_id=employee_id,
        store_id=store_id,
    )


def make_service_record(
    record_id: str,
    customer_id: str,
    service_date: datetime,
    parts: Optional[str] = "0",
    labor: Optional[str] = "0",
) -> ServiceRecord:
    return ServiceRecord(
        id=record_id,
        customer_id=customer_id,
        service_date=service_date,
        service_type="fleet_maintenance",
        parts_cost=Decimal(parts) if parts is not None else None,
        labor_cost=Decimal(labor) if labor is not None else None,
    )


def make_account(
    account_id: str = "account-1",
    customer_id: str = "customer-1",
    tier: LargeAccountTier = LargeAccountTier.GOLD,
    service_level: ServiceLevel = ServiceLevel.STANDARD,
    annual_revenue: Optional[str] = None,
    contract_end_date: Optional[date] = None,
    status: LargeAccountStatus = LargeAccountStatus.ACTIVE,
) -> LargeAccountRecord:
    return LargeAccountRecord(
        id=account_id,
        customer_id=customer_id,
        tier=tier,
        service_level=service_level,
        annual_revenue=Decimal(annual_revenue) if annual_revenue is not None else None,
        contract_end_date=contract_end_date,
        status=status,
    )
