from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError

from src.analytics.sales_aggregation import aggregate_sales, empty_sales_analytics
from src.analytics.sales_trends import (
    DEFAULT_AOV_TARGET,
    calculate_kpis,
    calculate_sales_trends,
    generate_insights,
    to_data_points,
)
from src.core.cache import AnalyticsCache
from src.core.config import Settings
from src.models.sales import SaleRecord, SalesScope
from src.repositories.sales_repository import SalesRepository
from src.schemas.insights import Insight, PerformanceMetric, SalesTrendPoint
from src.schemas.sales_analytics import EnhancedAnalytics, SalesAnalytics
from src.shared.time import (
    month_to_date_window,
    today_window,
    trailing_window,
    validate_date_range,
    year_to_date_window,
)

logger = logging.getLogger(__name__)

SALES_ANALYTICS_KEY_PREFIX = "sales-analytics-"
UNBOUNDED = "all"
ENHANCED_DEFAULT_DAYS = 365
INSIGHTS_DEFAULT_DAYS = 90
KPI_DEFAULT_DAYS = 30
TRENDS_DEFAULT_DAYS = 365


def sales_analytics_cache_key(
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    scope: Optional[SalesScope] = None,
) -> str:
    start_token = start_date.isoformat() if start_date else UNBOUNDED
    end_token = end_date.isoformat() if end_date else UNBOUNDED
    scope_token = scope.cache_token() if scope is not None else UNBOUNDED
    return f"{SALES_ANALYTICS_KEY_PREFIX}{start_token}-{end_token}-{scope_token}"


class SalesAnalyticsService:
    def __init__(
        self,
        repository: SalesRepository,
        cache: Optional[AnalyticsCache] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.repository = repository
        self.cache = cache
        self.ttl_seconds = settings.analytics_cache_ttl_seconds if settings else None
        self.aov_target = settings.kpi_aov_target if settings else DEFAULT_AOV_TARGET

    def get_sales_analytics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        scope: Optional[SalesScope] = None,
    ) -> SalesAnalytics:
        start_date, end_date = validate_date_range(start_date, end_date)
        if scope is not None and scope.denies_all:
            return empty_sales_analytics()

        cache_key = sales_analytics_cache_key(start_date, end_date, scope)
        cached = self._read_cached(cache_key)
        if cached is not None:
            return cached

        records = self.repository.list_sale_records(start_date, end_date, scope)
        analytics = aggregate_sales(records)
        if self.cache is not None:
            self.cache.set(cache_key, analytics.model_dump_json(), self.ttl_seconds)
        return analytics

    def get_todays_analytics(self, scope: Optional[SalesScope] = None) -> SalesAnalytics:
        start_date, end_date = today_window()
        return self.get_sales_analytics(start_date, end_date, scope)

    def get_month_to_date_analytics(self, scope: Optional[SalesScope] = None) -> SalesAnalytics:
        start_date, end_date = month_to_date_window()
        return self.get_sales_analytics(start_date, end_date, scope)

    def get_year_to_date_analytics(self, scope: Optional[SalesScope] = None) -> SalesAnalytics:
        start_date, end_date = year_to_date_window()
        return self.get_sales_analytics(start_date, end_date, scope)

    def invalidate_analytics_cache(self) -> int:
        if self.cache is None:
            return 0
        return self.cache.delete_matching(f"{SALES_ANALYTICS_KEY_PREFIX}*")

    def get_enhanced_analytics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        scope: Optional[SalesScope] = None,
    ) -> EnhancedAnalytics:
        basic_analytics = self.get_sales_analytics(start_date, end_date, scope)
        records = self._list_window_records(start_date, end_date, scope, ENHANCED_DEFAULT_DAYS)
        points = to_data_points(records)
        return EnhancedAnalytics(
            basic_analytics=basic_analytics,
            insights=generate_insights(points),
            trends=calculate_sales_trends(points),
            kpis=calculate_kpis(points, aov_target=self.aov_target),
        )

    def get_business_insights(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        scope: Optional[SalesScope] = None,
    ) -> List[Insight]:
        records = self._list_window_records(start_date, end_date, scope, INSIGHTS_DEFAULT_DAYS)
        return generate_insights(to_data_points(records))

    def get_performance_metrics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        scope: Optional[SalesScope] = None,
    ) -> List[PerformanceMetric]:
        records = self._list_window_records(start_date, end_date, scope, KPI_DEFAULT_DAYS)
        return calculate_kpis(to_data_points(records), aov_target=self.aov_target)

    def get_sales_trends(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        scope: Optional[SalesScope] = None,
    ) -> List[SalesTrendPoint]:
        records = self._list_window_records(start_date, end_date, scope, TRENDS_DEFAULT_DAYS)
        return calculate_sales_trends(to_data_points(records))

    def _list_window_records(
        self,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        scope: Optional[SalesScope],
        default_days: int,
    ) -> List[SaleRecord]:
        validate_date_range(start_date, end_date)
        default_start, default_end = trailing_window(default_days, now=end_date)
        start_date, end_date = validate_date_range(start_date or default_start, end_date or default_end)
        if scope is not None and scope.denies_all:
            return []
        return self.repository.list_sale_records(start_date, end_date, scope)

    def _read_cached(self, cache_key: str) -> Optional[SalesAnalytics]:
        if self.cache is None:
            return None
        payload = self.cache.get(cache_key)
        if payload is None:
            return None
        try:
            return SalesAnalytics.model_validate_json(payload)
        except ValidationError:
            logger.warning("Discarding unreadable analytics cache entry %s", cache_key)
            return None
