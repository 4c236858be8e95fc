from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from src.models.sales import SaleRecord
from src.schemas.insights import Impact, Insight, InsightKind, PerformanceMetric, SalesTrendPoint, Trend
from src.shared.time import as_utc, month_key, now_utc

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
KPI_WINDOW_DAYS = 30
DEFAULT_AOV_TARGET = 150.0
SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class SalesDataPoint:
    date: datetime
    amount: Decimal
    category: str = ""
    employee_id: Optional[str] = None


def to_data_points(records: Iterable[SaleRecord]) -> List[SalesDataPoint]:
    return [
        SalesDataPoint(
            date=record.sales_date,
            amount=record.net_amount,
            category=record.category,
            employee_id=record.employee_id,
        )
        for record in records
    ]


def calculate_sales_trends(points: Iterable[SalesDataPoint]) -> List[SalesTrendPoint]:
    monthly: Dict[str, Decimal] = {}
    for point in points:
        key = month_key(point.date)
        monthly[key] = monthly.get(key, Decimal("0")) + point.amount

    trends: List[SalesTrendPoint] = []
    previous_value: Optional[Decimal] = None
    # YYYY-MM keys sort chronologically.
    for period in sorted(monthly):
        value = monthly[period]
        if previous_value is None:
            change = Decimal("0")
            change_percent = 0.0
        else:
            change = value - previous_value
            change_percent = float(change / previous_value * 100) if previous_value else 0.0
        trends.append(
            SalesTrendPoint(period=period, value=value, change=change, change_percent=change_percent)
        )
        previous_value = value
    return trends


def generate_insights(points: Iterable[SalesDataPoint]) -> List[Insight]:
    data = list(points)
    insights: List[Insight] = []
    insights.extend(_category_insights(data))
    insights.extend(_weekday_insights(data))
    insights.extend(_employee_insights(data))
    return insights


def calculate_kpis(
    points: Iterable[SalesDataPoint],
    now: Optional[datetime] = None,
    aov_target: float = DEFAULT_AOV_TARGET,
) -> List[PerformanceMetric]:
    """Headline KPIs with last-30 vs previous-30 day trends.

    Both windows are measured back from ``now`` (wall clock by default), not
    from the span of the supplied data. Average order value carries a fixed
    target and is always reported as STABLE.
    """
    data = list(points)
    current_time = as_utc(now or now_utc())
    total_revenue = sum((point.amount for point in data), Decimal("0"))
    total_transactions = len(data)
    average_order_value = total_revenue / total_transactions if total_transactions else Decimal("0")

    last_window: List[SalesDataPoint] = []
    previous_window: List[SalesDataPoint] = []
    for point in data:
        age_days = (current_time - as_utc(point.date)).total_seconds() / SECONDS_PER_DAY
        if age_days <= KPI_WINDOW_DAYS:
            last_window.append(point)
        elif age_days <= KPI_WINDOW_DAYS * 2:
            previous_window.append(point)

    current_revenue = sum((point.amount for point in last_window), Decimal("0"))
    previous_revenue = sum((point.amount for point in previous_window), Decimal("0"))
    revenue_trend = _compare(current_revenue, previous_revenue) if previous_revenue else Trend.STABLE

    return [
        PerformanceMetric(
            name="Total Revenue",
            value=total_revenue,
            unit="USD",
            trend=revenue_trend,
        ),
        PerformanceMetric(
            name="Total Transactions",
            value=Decimal(total_transactions),
            unit="count",
            trend=_compare(len(last_window), len(previous_window)),
        ),
        PerformanceMetric(
            name="Average Order Value",
            value=average_order_value,
            target=Decimal(str(aov_target)),
            unit="USD",
            trend=Trend.STABLE,
        ),
    ]


def _compare(current: Decimal | int, previous: Decimal | int) -> Trend:
    if current > previous:
        return Trend.UP
    if current < previous:
        return Trend.DOWN
    return Trend.STABLE


def _ranked(totals: Dict[str, Decimal]) -> List[tuple[str, Decimal]]:
    # Stable sort keeps first-seen order among ties.
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def _category_insights(data: Sequence[SalesDataPoint]) -> List[Insight]:
    totals: Dict[str, Decimal] = {}
    for point in data:
        totals[point.category] = totals.get(point.category, Decimal("0")) + point.amount
    if not totals:
        return []

    ranked = _ranked(totals)
    top_category, top_revenue = ranked[0]
    insights = [
        Insight(
            kind=InsightKind.ACHIEVEMENT,
            title=f"{top_category} Leading Sales",
            description=(
                f"{top_category} generated ${top_revenue:.2f} in revenue, "
                "making it your top performing category."
            ),
            impact=Impact.HIGH,
            actionable=False,
        )
    ]

    if len(ranked) >= 3:
        bottom_category, bottom_revenue = ranked[-1]
        mean_revenue = sum(totals.values(), Decimal("0")) / len(totals)
        if bottom_revenue < mean_revenue * Decimal("0.5"):
            insights.append(
                Insight(
                    kind=InsightKind.OPPORTUNITY,
                    title=f"{bottom_category} Underperforming",
                    description=(
                        f"{bottom_category} is significantly below average revenue. "
                        "Consider reviewing pricing or promotion strategies."
                    ),
                    impact=Impact.MEDIUM,
                    actionable=True,
                )
            )
    return insights


def _weekday_insights(data: Sequence[SalesDataPoint]) -> List[Insight]:
    totals: Dict[str, Decimal] = {}
    for point in data:
        # Python weeks start on Monday; shift so 0 is Sunday.
        day_index = (as_utc(point.date).weekday() + 1) % 7
        day_name = DAY_NAMES[day_index]
        totals[day_name] = totals.get(day_name, Decimal("0")) + point.amount
    if not totals:
        return []

    best_day, _ = _ranked(totals)[0]
    return [
        Insight(
            kind=InsightKind.ACHIEVEMENT,
            title=f"{best_day} is Your Best Day",
            description=(
                f"{best_day} consistently generates the highest revenue. "
                "Consider special promotions on other days."
            ),
            impact=Impact.MEDIUM,
            actionable=True,
        )
    ]


def _employee_insights(data: Sequence[SalesDataPoint]) -> List[Insight]:
    totals: Dict[str, Decimal] = {}
    for point in data:
        if point.employee_id:
            totals[point.employee_id] = totals.get(point.employee_id, Decimal("0")) + point.amount
    if len(totals) < 2:
        return []

    top_employee, top_revenue = _ranked(totals)[0]
    return [
        Insight(
            kind=InsightKind.ACHIEVEMENT,
            title="Top Sales Performer Identified",
            description=f"Employee {top_employee} has generated ${top_revenue:.2f} in sales.",
            impact=Impact.HIGH,
            actionable=False,
        )
    ]
