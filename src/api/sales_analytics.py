from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_sales_analytics_service
from src.models.sales import SalesScope
from src.schemas.insights import Insight, PerformanceMetric, SalesTrendPoint
from src.schemas.sales_analytics import (
    CacheInvalidationResult,
    EnhancedAnalytics,
    SalesAnalytics,
    SalesAnalyticsFilters,
    SalesListFilters,
)
from src.services.sales_analytics_service import SalesAnalyticsService
from src.shared.response import ResponseEnvelope, build_meta, paginate_list

router = APIRouter(prefix="/sales-analytics", tags=["sales-analytics"])

SOURCE = "sales_data"


def get_sales_analytics_filters(
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    store_id: Optional[str] = Query(default=None, min_length=1, max_length=64),
) -> SalesAnalyticsFilters:
    return SalesAnalyticsFilters(start_date=start_date, end_date=end_date, store_id=store_id)


def get_sales_list_filters(
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    store_id: Optional[str] = Query(default=None, min_length=1, max_length=64),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
) -> SalesListFilters:
    return SalesListFilters(
        start_date=start_date,
        end_date=end_date,
        store_id=store_id,
        page=page,
        page_size=page_size,
    )


def _scope(store_id: Optional[str]) -> Optional[SalesScope]:
    return SalesScope(store_id=store_id) if store_id else None


def _time_window(filters: SalesAnalyticsFilters) -> str:
    start = filters.start_date.isoformat() if filters.start_date else "all"
    end = filters.end_date.isoformat() if filters.end_date else "all"
    return f"{start}..{end}"


@router.get("")
def sales_analytics(
    filters: SalesAnalyticsFilters = Depends(get_sales_analytics_filters),
    service: SalesAnalyticsService = Depends(get_sales_analytics_service),
) -> ResponseEnvelope[SalesAnalytics]:
    data = service.get_sales_analytics(filters.start_date, filters.end_date, _scope(filters.store_id))
    return ResponseEnvelope(
        data=data, meta=build_meta(SOURCE, _time_window(filters), filters.store_id)
    )


@router.get("/today")
def todays_analytics(
    store_id: Optional[str] = Query(default=None, min_length=1, max_length=64),
    service: SalesAnalyticsService = Depends(get_sales_analytics_service),
) -> ResponseEnvelope[SalesAnalytics]:
    data = service.get_todays_analytics(_scope(store_id))
    return ResponseEnvelope(data=data, meta=build_meta(SOURCE, "today", store_id))


@router.get("/month-to-date")
def month_to_date_analytics(
    store_id: Optional[str] = Query(default=None, min_length=1, max_length=64),
    service: SalesAnalyticsService = Depends(get_sales_analytics_service),
) -> ResponseEnvelope[SalesAnalytics]:
    data = service.get_month_to_date_analytics(_scope(store_id))
    return ResponseEnvelope(data=data, meta=build_meta(SOURCE, "mtd", store_id))


@router.get("/year-to-date")
def year_to_date_analytics(
    store_id: Optional[str] = Query(default=None, min_length=1, max_length=64),
    service: SalesAnalyticsService = Depends(get_sales_analytics_service),
) -> ResponseEnvelope[SalesAnalytics]:
    data = service.get_year_to_date_analytics(_scope(store_id))
    return ResponseEnvelope(data=data, meta=build_meta(SOURCE, "ytd", store_id))


@router.get("/enhanced")
def enhanced_analytics(
    filters: SalesAnalyticsFilters = Depends(get_sales_analytics_filters),
    service: SalesAnalyticsService = Depends(get_sales_analytics_service),
) -> ResponseEnvelope[EnhancedAnalytics]:
    data = service.get_enhanced_analytics(filters.start_date, filters.end_date, _scope(filters.store_id))
    return ResponseEnvelope(
        data=data, meta=build_meta(SOURCE, _time_window(filters), filters.store_id)
    )


@router.get("/insights")
def business_insights(
    filters: SalesListFilters = Depends(get_sales_list_filters),
    service: SalesAnalyticsService = Depends(get_sales_analytics_service),
) -> ResponseEnvelope[List[Insight]]:
    data = service.get_business_insights(filters.start_date, filters.end_date, _scope(filters.store_id))
    paged_data, pagination = paginate_list(data, filters.page, filters.page_size)
    return ResponseEnvelope(
        data=paged_data,
        pagination=pagination,
        meta=build_meta(SOURCE, _time_window(filters), filters.store_id),
    )


@router.get("/kpis")
def performance_metrics(
    filters: SalesAnalyticsFilters = Depends(get_sales_analytics_filters),
    service: SalesAnalyticsService = Depends(get_sales_analytics_service),
) -> ResponseEnvelope[List[PerformanceMetric]]:
    data = service.get_performance_metrics(filters.start_date, filters.end_date, _scope(filters.store_id))
    return ResponseEnvelope(
        data=data, meta=build_meta(SOURCE, _time_window(filters), filters.store_id)
    )


@router.get("/trends")
def sales_trends(
    filters: SalesListFilters = Depends(get_sales_list_filters),
    service: SalesAnalyticsService = Depends(get_sales_analytics_service),
) -> ResponseEnvelope[List[SalesTrendPoint]]:
    data = service.get_sales_trends(filters.start_date, filters.end_date, _scope(filters.store_id))
    paged_data, pagination = paginate_list(data, filters.page, filters.page_size)
    return ResponseEnvelope(
        data=paged_data,
        pagination=pagination,
        meta=build_meta(SOURCE, _time_window(filters), filters.store_id),
    )


@router.post("/cache/invalidate")
def invalidate_analytics_cache(
    service: SalesAnalyticsService = Depends(get_sales_analytics_service),
) -> ResponseEnvelope[CacheInvalidationResult]:
    removed = service.invalidate_analytics_cache()
    return ResponseEnvelope(
        data=CacheInvalidationResult(keys_removed=removed),
        meta=build_meta("analytics_cache", "now"),
    )
