from __future__ import annotations

import os

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

from datetime import datetime, timedelta, timezone
from typing import List

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_large_accounts_service, get_sales_analytics_service
from src.core.cache import AnalyticsCache
from src.main import create_app
from src.models.large_accounts import LargeAccountStatus, LargeAccountTier, ServiceLevel
from src.models.sales import SaleRecord
from src.services.large_accounts_service import LargeAccountsService
from src.services.sales_analytics_service import SalesAnalyticsService
from tests.support import (
    InMemoryRedis,
    StubLargeAccountsRepository,
    StubSalesRepository,
    make_account,
    make_sale,
)


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def memory_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture()
def analytics_cache(memory_redis: InMemoryRedis) -> AnalyticsCache:
    return AnalyticsCache(client=memory_redis)


@pytest.fixture()
def march_sales() -> List[SaleRecord]:
    base = datetime(2026, 3, 20, 15, 0, tzinfo=timezone.utc)
    return [
        make_sale("sale-3", base, "50", category="services", employee_id="emp-2"),
        make_sale("sale-2", base - timedelta(days=1), "200", category="tires", employee_id="emp-1"),
        make_sale("sale-1", base - timedelta(days=2), "100", category="tires"),
    ]


@pytest.fixture()
def sales_repository(march_sales: List[SaleRecord]) -> StubSalesRepository:
    return StubSalesRepository(march_sales)


@pytest.fixture()
def large_accounts_repository() -> StubLargeAccountsRepository:
    today = datetime.now(timezone.utc).date()
    renewal_account = make_account(
        account_id="account-renewal",
        customer_id="customer-renewal",
        tier=LargeAccountTier.PLATINUM,
        service_level=ServiceLevel.PREMIUM,
        contract_end_date=today + timedelta(days=20),
    )
    struggling_account = make_account(
        account_id="account-struggling",
        customer_id="customer-struggling",
        tier=LargeAccountTier.BRONZE,
        annual_revenue="10000",
        status=LargeAccountStatus.SUSPENDED,
    )
    return StubLargeAccountsRepository(accounts=[renewal_account, struggling_account])


@pytest.fixture()
def client(
    sales_repository: StubSalesRepository,
    large_accounts_repository: StubLargeAccountsRepository,
    analytics_cache: AnalyticsCache,
) -> TestClient:
    app = create_app(analytics_cache=analytics_cache)
    app.dependency_overrides[get_sales_analytics_service] = lambda: SalesAnalyticsService(
        repository=sales_repository, cache=analytics_cache
    )
    app.dependency_overrides[get_large_accounts_service] = lambda: LargeAccountsService(
        repository=large_accounts_repository
    )
    return TestClient(app)
