from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.core.cache import AnalyticsCache
from src.core.errors import InvalidRangeError
from src.models.sales import SalesScope
from src.services.sales_analytics_service import SalesAnalyticsService, sales_analytics_cache_key
from tests.support import StubSalesRepository, UnreachableRedis

START = datetime(2026, 3, 1, tzinfo=timezone.utc)
END = datetime(2026, 3, 31, 23, 59, 59, tzinfo=timezone.utc)


def test_second_request_is_served_from_cache(sales_repository, analytics_cache):
    service = SalesAnalyticsService(repository=sales_repository, cache=analytics_cache)

    first = service.get_sales_analytics(START, END)
    second = service.get_sales_analytics(START, END)

    assert first == second
    assert second.total_revenue == Decimal("350")
    assert len(sales_repository.calls) == 1


def test_expired_entry_triggers_fresh_fetch(sales_repository, analytics_cache, memory_redis):
    service = SalesAnalyticsService(repository=sales_repository, cache=analytics_cache)

    service.get_sales_analytics(START, END)
    memory_redis.now += 301
    service.get_sales_analytics(START, END)

    assert len(sales_repository.calls) == 2


def test_reversed_range_is_rejected_before_any_fetch(sales_repository, analytics_cache, memory_redis):
    service = SalesAnalyticsService(repository=sales_repository, cache=analytics_cache)

    with pytest.raises(InvalidRangeError):
        service.get_sales_analytics(END, START)

    assert sales_repository.calls == []
    assert memory_redis.store == {}


def test_scope_without_stores_returns_empty_without_querying(sales_repository, analytics_cache, memory_redis):
    service = SalesAnalyticsService(repository=sales_repository, cache=analytics_cache)

    analytics = service.get_sales_analytics(START, END, SalesScope(allowed_store_ids=[]))

    assert analytics.total_sales == 0
    assert analytics.recent_sales == []
    assert sales_repository.calls == []
    assert memory_redis.store == {}


def test_cache_entries_are_kept_per_store_scope(sales_repository, analytics_cache, memory_redis):
    service = SalesAnalyticsService(repository=sales_repository, cache=analytics_cache)

    service.get_sales_analytics(START, END, SalesScope(store_id="store-1"))
    service.get_sales_analytics(START, END, SalesScope(store_id="store-2"))
    service.get_sales_analytics(START, END)

    assert len(sales_repository.calls) == 3
    assert sales_repository.calls[0][2] == SalesScope(store_id="store-1")
    assert len(memory_redis.store) == 3


def test_cache_key_format():
    assert sales_analytics_cache_key(None, None) == "sales-analytics-all-all-all"
    assert sales_analytics_cache_key(START, None, SalesScope(allowed_store_ids=["b", "a"])) == (
        "sales-analytics-2026-03-01T00:00:00+00:00-all-stores:a,b"
    )


def test_unreachable_cache_falls_back_to_record_store(sales_repository):
    service = SalesAnalyticsService(repository=sales_repository, cache=AnalyticsCache(client=UnreachableRedis()))

    first = service.get_sales_analytics(START, END)
    second = service.get_sales_analytics(START, END)

    assert first.total_sales == 3
    assert first == second
    assert len(sales_repository.calls) == 2


def test_unreadable_cache_entry_is_recomputed(sales_repository, analytics_cache, memory_redis):
    service = SalesAnalyticsService(repository=sales_repository, cache=analytics_cache)
    key = AnalyticsCache.namespaced(sales_analytics_cache_key(START, END))
    memory_redis.setex(key, 300, "not json")

    analytics = service.get_sales_analytics(START, END)

    assert analytics.total_sales == 3
    assert len(sales_repository.calls) == 1
    assert memory_redis.get(key) != "not json"


def test_undecodable_cache_entry_is_recomputed(sales_repository, analytics_cache, memory_redis):
    service = SalesAnalyticsService(repository=sales_repository, cache=analytics_cache)
    key = AnalyticsCache.namespaced(sales_analytics_cache_key(START, END))
    memory_redis.setex(key, 300, b"\xff\xfe")

    analytics = service.get_sales_analytics(START, END)

    assert analytics.total_sales == 3
    assert len(sales_repository.calls) == 1
    assert service.get_sales_analytics(START, END) == analytics
    assert len(sales_repository.calls) == 1


def test_invalidate_removes_only_sales_snapshots(sales_repository, analytics_cache, memory_redis):
    service = SalesAnalyticsService(repository=sales_repository, cache=analytics_cache)
    service.get_sales_analytics(START, END)
    service.get_sales_analytics(None, END)
    analytics_cache.set("other-report", "{}")

    removed = service.invalidate_analytics_cache()
    service.get_sales_analytics(START, END)

    assert removed == 2
    assert "analytics:other-report" in memory_redis.store
    assert len(sales_repository.calls) == 3


def test_service_without_cache_always_fetches(sales_repository):
    service = SalesAnalyticsService(repository=sales_repository)

    service.get_sales_analytics(START, END)
    service.get_sales_analytics(START, END)

    assert len(sales_repository.calls) == 2
    assert service.invalidate_analytics_cache() == 0


def test_fixed_windows_query_bounded_ranges(sales_repository):
    service = SalesAnalyticsService(repository=sales_repository)

    service.get_todays_analytics()
    service.get_month_to_date_analytics(SalesScope(store_id="store-1"))
    service.get_year_to_date_analytics()

    today_start, today_end, _ = sales_repository.calls[0]
    assert today_end - today_start == timedelta(days=1)
    assert today_start.hour == 0 and today_start.tzinfo is not None
    month_start, _, month_scope = sales_repository.calls[1]
    assert month_start.day == 1
    assert month_scope == SalesScope(store_id="store-1")
    year_start, _, _ = sales_repository.calls[2]
    assert (year_start.month, year_start.day) == (1, 1)


def test_enhanced_analytics_bundles_snapshot_insights_trends_and_kpis(sales_repository, analytics_cache):
    service = SalesAnalyticsService(repository=sales_repository, cache=analytics_cache)

    enhanced = service.get_enhanced_analytics(START, END)

    assert enhanced.basic_analytics.total_sales == 3
    assert enhanced.insights[0].title == "tires Leading Sales"
    assert [trend.period for trend in enhanced.trends] == ["2026-03"]
    assert [kpi.name for kpi in enhanced.kpis] == [
        "Total Revenue",
        "Total Transactions",
        "Average Order Value",
    ]


def test_window_defaults_trail_back_from_end_date(sales_repository):
    service = SalesAnalyticsService(repository=sales_repository)

    service.get_business_insights(end_date=END)
    service.get_performance_metrics(end_date=END)
    service.get_sales_trends(end_date=END)

    spans = [end - start for start, end, _ in sales_repository.calls]
    assert spans == [timedelta(days=90), timedelta(days=30), timedelta(days=365)]


def test_window_operations_reject_reversed_range_and_empty_scope(sales_repository):
    service = SalesAnalyticsService(repository=sales_repository)

    with pytest.raises(InvalidRangeError):
        service.get_sales_trends(END, START)
    assert service.get_business_insights(scope=SalesScope(allowed_store_ids=[])) == []
    assert sales_repository.calls == []


def test_start_after_default_end_is_rejected(sales_repository):
    service = SalesAnalyticsService(repository=sales_repository)

    with pytest.raises(InvalidRangeError):
        service.get_performance_metrics(start_date=datetime.now(timezone.utc) + timedelta(days=7))
