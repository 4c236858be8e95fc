from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable

from src.models.sales import SaleRecord
from src.schemas.sales_analytics import (
    CategorySales,
    EmployeeSales,
    MonthSales,
    SaleSummary,
    SalesAnalytics,
)
from src.shared.time import month_key

RECENT_SALES_LIMIT = 10


@dataclass
class SalesTally:
    count: int = 0
    revenue: Decimal = Decimal("0")

    def add(self, amount: Decimal) -> None:
        self.count += 1
        self.revenue += amount


def empty_sales_analytics() -> SalesAnalytics:
    return SalesAnalytics(
        total_sales=0,
        total_revenue=Decimal("0"),
        average_order_value=Decimal("0"),
        sales_by_category=[],
        sales_by_employee=[],
        sales_by_month=[],
        recent_sales=[],
    )


def aggregate_sales(records: Iterable[SaleRecord]) -> SalesAnalytics:
    """Build a sales snapshot from records ordered most-recent-first.

    Category, employee and month groupings keep the order in which each key
    first appears. Month keys are ``YYYY-MM`` in UTC, so the month breakdown
    partitions every record and its revenue always sums to ``total_revenue``.
    Records without an employee are left out of the employee breakdown only.
    """
    sales = list(records)
    if not sales:
        return empty_sales_analytics()

    total_revenue = Decimal("0")
    by_category: Dict[str, SalesTally] = {}
    by_employee: Dict[str, SalesTally] = {}
    by_month: Dict[str, SalesTally] = {}
    for sale in sales:
        total_revenue += sale.net_amount
        by_category.setdefault(sale.category, SalesTally()).add(sale.net_amount)
        if sale.employee_id:
            by_employee.setdefault(sale.employee_id, SalesTally()).add(sale.net_amount)
        by_month.setdefault(month_key(sale.sales_date), SalesTally()).add(sale.net_amount)

    total_sales = len(sales)
    return SalesAnalytics(
        total_sales=total_sales,
        total_revenue=total_revenue,
        average_order_value=total_revenue / total_sales,
        sales_by_category=[
            CategorySales(category=category, count=tally.count, revenue=tally.revenue)
            for category, tally in by_category.items()
        ],
        sales_by_employee=[
            EmployeeSales(employee_id=employee_id, count=tally.count, revenue=tally.revenue)
            for employee_id, tally in by_employee.items()
        ],
        sales_by_month=[
            MonthSales(month=month, count=tally.count, revenue=tally.revenue)
            for month, tally in by_month.items()
        ],
        recent_sales=[_to_sale_summary(sale) for sale in sales[:RECENT_SALES_LIMIT]],
    )


def _to_sale_summary(record: SaleRecord) -> SaleSummary:
    return SaleSummary(
        id=record.id,
        sales_date=record.sales_date,
        net_amount=record.net_amount,
        category=record.category,
        employee_id=record.employee_id,
        customer_id=record.customer_id,
        store_id=record.store_id,
        invoice_number=record.invoice_number,
    )
