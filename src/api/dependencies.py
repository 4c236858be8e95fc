from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Request

from src.core.cache import AnalyticsCache
from src.core.config import get_settings
from src.repositories.large_accounts_repository import LargeAccountsRepository
from src.repositories.sales_repository import SalesRepository
from src.services.large_accounts_service import LargeAccountsService
from src.services.sales_analytics_service import SalesAnalyticsService


@lru_cache
def get_sales_repository() -> SalesRepository:
    return SalesRepository()


def get_analytics_cache(request: Request) -> AnalyticsCache:
    return request.app.state.analytics_cache


def get_sales_analytics_service(
    cache: AnalyticsCache = Depends(get_analytics_cache),
) -> SalesAnalyticsService:
    return SalesAnalyticsService(
        repository=get_sales_repository(),
        cache=cache,
        settings=get_settings(),
    )


@lru_cache
def get_large_accounts_repository() -> LargeAccountsRepository:
    return LargeAccountsRepository()


def get_large_accounts_service() -> LargeAccountsService:
    return LargeAccountsService(
        repository=get_large_accounts_repository(),
        max_workers=get_settings().account_stats_max_workers,
    )
