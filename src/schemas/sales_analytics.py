from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from src.schemas.insights import Insight, PerformanceMetric, SalesTrendPoint
from src.shared.base import BaseSchema


class CategorySales(BaseSchema):
    category: str
    count: int
    revenue: Decimal


class EmployeeSales(BaseSchema):
    employee_id: str
    count: int
    revenue: Decimal


class MonthSales(BaseSchema):
    month: str
    count: int
    revenue: Decimal


class SaleSummary(BaseSchema):
    id: str
    sales_date: datetime
    net_amount: Decimal
    category: str
    employee_id: Optional[str] = None
    customer_id: Optional[str] = None
    store_id: Optional[str] = None
    invoice_number: Optional[str] = None


class SalesAnalytics(BaseSchema):
    total_sales: int = 0
    total_revenue: Decimal = Decimal("0")
    average_order_value: Decimal = Decimal("0")
    sales_by_category: List[CategorySales] = Field(default_factory=list)
    sales_by_employee: List[EmployeeSales] = Field(default_factory=list)
    sales_by_month: List[MonthSales] = Field(default_factory=list)
    recent_sales: List[SaleSummary] = Field(default_factory=list)


class EnhancedAnalytics(BaseSchema):
    basic_analytics: SalesAnalytics
    insights: List[Insight]
    trends: List[SalesTrendPoint]
    kpis: List[PerformanceMetric]


class SalesAnalyticsFilters(BaseSchema):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    store_id: Optional[str] = None


class SalesListFilters(SalesAnalyticsFilters):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=500)


class CacheInvalidationResult(BaseSchema):
    keys_removed: int
